"""AI module - pre-scoring, candidate selection, ranking and intent routing."""

from vira.ai.schemas import (
    AIRecommendation,
    MatchResult,
    ScoredCandidate,
    VendorRecord,
)
from vira.ai.prescore import compute_pre_score
from vira.ai.candidate_selector import select_candidates
from vira.ai.ranker import OpenAIRanker, PreScoreRanker, Ranker, generate_recommendations
from vira.ai.intent_classifier import classify_intent

__all__ = [
    # Schemas
    "AIRecommendation",
    "MatchResult",
    "ScoredCandidate",
    "VendorRecord",
    # Ranking backends
    "Ranker",
    "OpenAIRanker",
    "PreScoreRanker",
    # Functions
    "compute_pre_score",
    "select_candidates",
    "generate_recommendations",
    "classify_intent",
]
