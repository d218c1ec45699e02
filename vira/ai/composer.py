"""Merge ranked and pre-score-only candidates into one match result."""

from vira.ai.ranker import RankingOutcome
from vira.ai.schemas import CandidateSelection, MatchResult
from vira.core.logging import get_logger

logger = get_logger("ai.composer")


def compose_match_result(
    category: str,
    selection: CandidateSelection,
    outcome: RankingOutcome,
) -> MatchResult:
    """Build the match result from a selection and its ranking outcome.

    Recommendations are restricted to the candidates that were sent to the
    ranker, and remaining vendors never repeat a recommended vendor, so the
    two lists partition the selected candidates.

    Args:
        category: Requested service category
        selection: Candidate selection (top-K and remaining)
        outcome: Ranked recommendations for the top-K

    Returns:
        MatchResult
    """
    sent_ids = {c.vendor_id for c in selection.sent_to_ai}

    recommendations = []
    recommended_ids = set()
    for rec in outcome.recommendations:
        if rec.vendor_id not in sent_ids or rec.vendor_id in recommended_ids:
            logger.warning("Dropping recommendation for unexpected vendor %s", rec.vendor_id)
            continue
        recommended_ids.add(rec.vendor_id)
        recommendations.append(rec)

    # Candidates the ranker left out stay visible with their pre-score
    unranked = [c for c in selection.sent_to_ai if c.vendor_id not in recommended_ids]
    remaining = unranked + [
        c for c in selection.remaining if c.vendor_id not in recommended_ids
    ]

    return MatchResult(
        category=category,
        recommendations=recommendations,
        remaining_vendors=remaining,
        candidates_analyzed=selection.candidates_analyzed,
        sent_to_ai=len(recommendations),
        ranking_source=outcome.source,
    )
