"""AI ranking and rationale generation for vendor candidates.

The model receives the top-K pre-scored candidates and the project scope and
must return a score, rationale and key strengths for every candidate. The
response is validated as a whole; any schema violation rejects it. Upstream
failures degrade to pre-score stand-ins so a match request never fails only
because the model is unavailable.
"""

import json
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Tuple

from pydantic import ValidationError

from vira.ai.llm import LLMClient
from vira.ai.schemas import AIRecommendation, MatchQuery, RankingOutput, ScoredCandidate
from vira.core.constants import (
    FALLBACK_RATIONALE,
    RANKING_SOURCE_AI,
    RANKING_SOURCE_FALLBACK,
    RANKING_SOURCE_NONE,
)
from vira.core.exceptions import AIProcessingError, UpstreamMalformed
from vira.core.logging import get_logger, query_fields

logger = get_logger("ai.ranker")

# Truncation limits to control token cost
MAX_SCOPE_CHARS = 3000
MAX_SKILLS_CHARS = 400

RANKING_SYSTEM_PROMPT = (
    "You are ViRA (Vendor Intelligence & Recommendation Assistant), an expert "
    "in matching service vendors to client projects. Always answer with valid JSON."
)

_CODE_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)


def _truncate_text(text: str | None, max_chars: int) -> str:
    """Truncate text to max_chars, adding ellipsis if truncated."""
    if not text:
        return ""
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + " [...]"


def _fmt(value: Optional[float], fmt: str, suffix: str = "") -> str:
    return f"{value:{fmt}}{suffix}" if value is not None else "N/A"


def recommendation_order(rec: AIRecommendation) -> Tuple[int, float, str]:
    """Sort key: descending viraScore, descending pre-score, ascending vendor id."""
    return (-rec.vira_score, -rec.pre_score, rec.vendor_id)


def order_recommendations(recs: List[AIRecommendation]) -> List[AIRecommendation]:
    return sorted(recs, key=recommendation_order)


def fallback_recommendations(candidates: List[ScoredCandidate]) -> List[AIRecommendation]:
    """Build stand-in recommendations directly from pre-scores."""
    recs = [
        AIRecommendation(
            vendor=c.vendor,
            vira_score=max(0, min(100, round(c.pre_score))),
            rationale=FALLBACK_RATIONALE,
            key_strengths=[],
            considerations=None,
            pre_score=c.pre_score,
        )
        for c in candidates
    ]
    return order_recommendations(recs)


class Ranker(ABC):
    """Capability interface for qualitative candidate ranking."""

    source: str = RANKING_SOURCE_AI

    @abstractmethod
    def rank(
        self, candidates: List[ScoredCandidate], query: MatchQuery
    ) -> List[AIRecommendation]:
        """Rank candidates for a query.

        Raises:
            AIProcessingError: If the ranking backend fails or answers malformed
        """


class PreScoreRanker(Ranker):
    """Deterministic ranker that never calls a model."""

    source = RANKING_SOURCE_FALLBACK

    def rank(
        self, candidates: List[ScoredCandidate], query: MatchQuery
    ) -> List[AIRecommendation]:
        return fallback_recommendations(candidates)


class OpenAIRanker(Ranker):
    """Ranks candidates with a generative model via structured JSON output."""

    def __init__(self, llm: LLMClient):
        self._llm = llm

    def rank(
        self, candidates: List[ScoredCandidate], query: MatchQuery
    ) -> List[AIRecommendation]:
        prompt = build_ranking_prompt(candidates, query)
        raw = self._llm.complete_json(RANKING_SYSTEM_PROMPT, prompt)
        logger.debug("LLM raw response: %s", raw[:500])
        return parse_ranking_response(raw, candidates)


def build_ranking_prompt(candidates: List[ScoredCandidate], query: MatchQuery) -> str:
    """Build the ranking prompt."""
    blocks = []
    for c in candidates:
        v = c.vendor
        categories = ", ".join(v.service_categories) or v.legacy_categories or "Not specified"
        availability = v.availability_status.value if v.availability_status else "Unknown"
        blocks.append(
            f"""VENDOR ID: {v.vendor_id}
- Name: {v.vendor_name}
- Services: {categories}
- Skills: {_truncate_text(v.skills, MAX_SKILLS_CHARS) or 'Not specified'}
- Pricing: {v.pricing_structure or 'Not specified'} | Rate: {v.rate_cost or 'Contact for pricing'}
- Availability: {availability}
- Rated Projects: {v.rated_projects} | Avg Rating: {_fmt(v.avg_overall_rating, '.1f', '/10')} | Recommend Rate: {_fmt(v.recommendation_pct, '.0f', '%')}
- Performance Pre-Score: {c.pre_score:.1f}/100"""
        )
    candidates_text = "\n---\n".join(blocks)

    return f"""Analyze these vendor candidates for a project and rank them.

PROJECT
=======
Service Category: {query.category}
Scope: {_truncate_text(query.project_scope, MAX_SCOPE_CHARS)}

VENDOR CANDIDATES
=================
{candidates_text}

SCORING
=======
- Project fit: 40%
- Performance & reliability: 40%
- Qualitative match: 20%

Answer with a JSON object with a single field "recommendations": an array with
exactly one entry for each of the {len(candidates)} vendors above. Each entry has:
- vendorId: the exact VENDOR ID from above (string)
- vendorName: the vendor name
- viraScore: integer 0-100
- reason: 2-4 sentences explaining the score with reference to the data
- keyStrengths: array of 2-3 short strengths
- considerations: concerns or caveats, or null

Answer ONLY with the JSON object, without additional text."""


def _extract_json(raw: str):
    text = _CODE_FENCE_RE.sub("", raw).strip()
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        # Models occasionally wrap the payload in prose
        start = min((i for i in (text.find("{"), text.find("[")) if i >= 0), default=-1)
        end = max(text.rfind("}"), text.rfind("]"))
        if start < 0 or end <= start:
            raise
        return json.loads(text[start : end + 1])


def parse_ranking_response(
    raw: str, candidates: List[ScoredCandidate]
) -> List[AIRecommendation]:
    """Validate a model response and convert it to recommendations.

    Every candidate must be ranked exactly once; unknown or duplicate vendor
    ids, out-of-range scores or missing fields reject the whole response.

    Raises:
        UpstreamMalformed: If the response fails validation
    """
    try:
        data = _extract_json(raw)
    except json.JSONDecodeError as e:
        raise UpstreamMalformed(
            f"Invalid JSON from LLM: {e}",
            raw_output=raw,
            expected_schema="RankingOutput",
        ) from e

    if isinstance(data, list):
        data = {"recommendations": data}

    try:
        output = RankingOutput.model_validate(data)
    except ValidationError as e:
        raise UpstreamMalformed(
            f"Response validation failed: {e.error_count()} error(s)",
            raw_output=raw,
            expected_schema="RankingOutput",
        ) from e

    by_id = {c.vendor_id: c for c in candidates}
    returned_ids = [item.vendor_id for item in output.recommendations]
    if len(returned_ids) != len(set(returned_ids)):
        raise UpstreamMalformed(
            "Duplicate vendor ids in ranking", raw_output=raw, expected_schema="RankingOutput"
        )
    if set(returned_ids) != set(by_id):
        raise UpstreamMalformed(
            "Ranking does not cover exactly the candidates sent",
            raw_output=raw,
            expected_schema="RankingOutput",
            details={
                "missing": sorted(set(by_id) - set(returned_ids)),
                "unknown": sorted(set(returned_ids) - set(by_id)),
            },
        )

    recs = []
    for item in output.recommendations:
        candidate = by_id[item.vendor_id]
        recs.append(
            AIRecommendation(
                vendor=candidate.vendor,
                vira_score=item.vira_score,
                rationale=item.reason,
                key_strengths=[s.strip() for s in item.key_strengths if s.strip()],
                considerations=(item.considerations or "").strip() or None,
                pre_score=candidate.pre_score,
            )
        )
    return order_recommendations(recs)


@dataclass
class RankingOutcome:
    """Ordered recommendations and where their scores came from."""

    recommendations: List[AIRecommendation]
    source: str


def generate_recommendations(
    ranker: Ranker,
    candidates: List[ScoredCandidate],
    query: MatchQuery,
) -> RankingOutcome:
    """Rank candidates, degrading to pre-score stand-ins on upstream failure.

    Args:
        ranker: Ranking backend
        candidates: The top-K candidates
        query: Match query

    Returns:
        RankingOutcome sorted by descending viraScore
    """
    if not candidates:
        return RankingOutcome(recommendations=[], source=RANKING_SOURCE_NONE)

    try:
        recs = ranker.rank(candidates, query)
    except AIProcessingError as e:
        logger.warning(
            "Ranking fell back to pre-score (%s): %s candidates=%d",
            type(e).__name__,
            query_fields(query.category, query.project_scope),
            len(candidates),
        )
        return RankingOutcome(
            recommendations=fallback_recommendations(candidates),
            source=RANKING_SOURCE_FALLBACK,
        )

    return RankingOutcome(recommendations=order_recommendations(recs), source=ranker.source)
