"""Deterministic performance pre-score for vendor candidates.

The pre-score is computed from structured performance aggregates only.
Quality (average rating and recommendation rate) is shrunk towards a neutral
prior by a confidence factor that saturates with the number of completed
projects, so a single perfect rating cannot outrank a long strong history.
Availability adds a bonus or penalty. Weights are tunable via settings.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from vira.ai.schemas import AvailabilityStatus, VendorRecord
from vira.settings import Settings, settings as default_settings

PRESCORE_MIN = 0.0
PRESCORE_MAX = 100.0
PRESCORE_PRECISION = 2


@dataclass(frozen=True)
class PreScoreWeights:
    """Weights of the pre-score formula."""

    rating: float = 50.0
    recommendation: float = 30.0
    volume: float = 10.0
    confidence_half_saturation: float = 3.0
    prior: float = 0.5
    availability: Optional[Dict[AvailabilityStatus, float]] = None

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "PreScoreWeights":
        s = settings or default_settings
        return cls(
            rating=s.prescore_weight_rating,
            recommendation=s.prescore_weight_recommendation,
            volume=s.prescore_weight_volume,
            confidence_half_saturation=s.prescore_confidence_half_saturation,
            prior=s.prescore_prior,
            availability={
                AvailabilityStatus.AVAILABLE: s.prescore_bonus_available,
                AvailabilityStatus.LIMITED: s.prescore_bonus_limited,
                AvailabilityStatus.ON_LEAVE: s.prescore_penalty_on_leave,
                AvailabilityStatus.UNAVAILABLE: s.prescore_penalty_unavailable,
            },
        )

    def availability_adjustment(self, status: Optional[AvailabilityStatus]) -> float:
        if status is None or not self.availability:
            return 0.0
        return self.availability.get(status, 0.0)


def confidence_weight(rated_projects: int, half_saturation: float) -> float:
    """Saturating confidence in [0, 1): 0 without history, 0.5 at half_saturation."""
    n = max(rated_projects, 0)
    return n / (n + half_saturation)


def compute_pre_score(
    vendor: VendorRecord, weights: Optional[PreScoreWeights] = None
) -> float:
    """Compute the pre-score of a vendor in [0, 100].

    Args:
        vendor: Vendor with performance aggregates
        weights: Formula weights (defaults to the configured weights)

    Returns:
        Pre-score rounded to two decimals
    """
    w = weights or PreScoreWeights.from_settings()

    rating_norm = (
        vendor.avg_overall_rating / 10.0
        if vendor.avg_overall_rating is not None
        else w.prior
    )
    recommendation_norm = (
        vendor.recommendation_pct / 100.0
        if vendor.recommendation_pct is not None
        else w.prior
    )

    quality = rating_norm * w.rating + recommendation_norm * w.recommendation
    prior_quality = w.prior * (w.rating + w.recommendation)

    confidence = confidence_weight(vendor.rated_projects, w.confidence_half_saturation)
    shrunk_quality = confidence * quality + (1.0 - confidence) * prior_quality

    score = (
        shrunk_quality
        + w.volume * confidence
        + w.availability_adjustment(vendor.availability_status)
    )
    score = max(PRESCORE_MIN, min(PRESCORE_MAX, score))
    return round(score, PRESCORE_PRECISION)
