"""Service layer - business logic encapsulation."""

from vira.services.match_service import MatchService

__all__ = [
    "MatchService",
]
