"""Candidate selection: category filter, pre-scoring and top-K cut."""

from typing import Iterable, List, Optional, Tuple

from vira.ai.prescore import PreScoreWeights, compute_pre_score
from vira.ai.schemas import CandidateSelection, ScoredCandidate, VendorRecord
from vira.core.constants import VENDOR_STATUS_ACTIVE
from vira.core.exceptions import InputValidationError
from vira.core.logging import get_logger
from vira.settings import settings

logger = get_logger("ai.candidate_selector")


def normalize_category(category: str) -> str:
    """Lower-case and collapse whitespace for category comparison."""
    return " ".join(category.lower().split())


def vendor_categories(vendor: VendorRecord) -> List[str]:
    """Normalized categories of a vendor, falling back to the legacy string."""
    if vendor.service_categories:
        return [normalize_category(c) for c in vendor.service_categories if c.strip()]
    if vendor.legacy_categories:
        return [
            normalize_category(c)
            for c in vendor.legacy_categories.split(",")
            if c.strip()
        ]
    return []


def vendor_matches_category(vendor: VendorRecord, category: str) -> bool:
    return normalize_category(category) in vendor_categories(vendor)


def is_active(vendor: VendorRecord) -> bool:
    return vendor.status.strip().lower() == VENDOR_STATUS_ACTIVE


def pre_score_order(candidate: ScoredCandidate) -> Tuple[float, str]:
    """Sort key: descending pre-score, then ascending vendor id."""
    return (-candidate.pre_score, candidate.vendor_id)


def select_candidates(
    vendors: Iterable[VendorRecord],
    category: str,
    top_k: Optional[int] = None,
    max_remaining: Optional[int] = None,
    weights: Optional[PreScoreWeights] = None,
) -> CandidateSelection:
    """Filter vendors by category and split them into AI and pre-score-only sets.

    Args:
        vendors: Vendor snapshot from the repository
        category: Requested service category
        top_k: Number of candidates sent to the model
        max_remaining: Cap for the pre-score-only list
        weights: Pre-score weights

    Returns:
        CandidateSelection; empty (not an error) when nothing matches

    Raises:
        InputValidationError: If category is empty
    """
    if not isinstance(category, str) or not category.strip():
        raise InputValidationError("Service category is required", field="serviceCategory")

    top_k = settings.match_top_k if top_k is None else top_k
    max_remaining = settings.max_remaining_vendors if max_remaining is None else max_remaining
    weights = weights or PreScoreWeights.from_settings()

    seen: set = set()
    scored: List[ScoredCandidate] = []
    for vendor in vendors:
        if vendor.vendor_id in seen:
            continue
        if not is_active(vendor) or not vendor_matches_category(vendor, category):
            continue
        seen.add(vendor.vendor_id)
        scored.append(
            ScoredCandidate(vendor=vendor, pre_score=compute_pre_score(vendor, weights))
        )

    scored.sort(key=pre_score_order)

    sent = scored[:top_k]
    remaining = scored[top_k:]
    if len(remaining) > max_remaining:
        logger.info(
            "Remaining vendors capped: %d -> %d (category=%s)",
            len(remaining),
            max_remaining,
            category,
        )
        remaining = remaining[:max_remaining]

    logger.debug(
        "Selected candidates: category=%s matched=%d sent=%d remaining=%d",
        category,
        len(scored),
        len(sent),
        len(remaining),
    )
    return CandidateSelection(
        sent_to_ai=sent,
        remaining=remaining,
        candidates_analyzed=len(scored),
    )
