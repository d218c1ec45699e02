"""Vendor matching service: selection, ranking and result composition."""

from typing import Any, Optional

from vira.ai.candidate_selector import select_candidates
from vira.ai.composer import compose_match_result
from vira.ai.prescore import PreScoreWeights
from vira.ai.ranker import Ranker, generate_recommendations
from vira.ai.schemas import MatchQuery, MatchResult
from vira.core.exceptions import InputValidationError, RepositoryError
from vira.core.logging import get_logger, query_fields
from vira.repositories.vendor_repository import VendorRepository
from vira.settings import Settings, settings as default_settings

logger = get_logger("services.match")


def validate_match_request(
    category: Any, project_scope: Any, min_scope_length: int = 0
) -> MatchQuery:
    """Validate raw request values and build a MatchQuery.

    Raises:
        InputValidationError: If a value is missing, empty, not a string, or
            the scope is shorter than min_scope_length
    """
    if not isinstance(category, str) or not category.strip():
        raise InputValidationError(
            "Service category and project scope are required", field="serviceCategory"
        )
    if not isinstance(project_scope, str) or not project_scope.strip():
        raise InputValidationError(
            "Service category and project scope are required", field="projectScope"
        )
    scope = project_scope.strip()
    if len(scope) < min_scope_length:
        raise InputValidationError(
            f"Project scope must be at least {min_scope_length} characters",
            field="projectScope",
        )
    return MatchQuery(category=category.strip(), project_scope=scope)


class MatchService:
    """Service for vendor match requests."""

    def __init__(
        self,
        vendor_repository: VendorRepository,
        ranker: Ranker,
        settings: Optional[Settings] = None,
    ):
        """Initialize match service.

        Args:
            vendor_repository: Vendor directory
            ranker: Ranking backend for the top-K candidates
            settings: Optional settings instance
        """
        self._repository = vendor_repository
        self._ranker = ranker
        self._settings = settings or default_settings
        self._weights = PreScoreWeights.from_settings(self._settings)

    def match(
        self,
        category: Any,
        project_scope: Any,
        enforce_min_scope: bool = True,
    ) -> MatchResult:
        """Recommend vendors for a category and project scope.

        Args:
            category: Requested service category
            project_scope: Free-text project description
            enforce_min_scope: Apply the minimum scope length rule

        Returns:
            MatchResult; empty when no vendor matches the category

        Raises:
            InputValidationError: If the request is invalid
            RepositoryError: If vendors cannot be loaded
        """
        min_length = self._settings.min_project_scope_length if enforce_min_scope else 0
        query = validate_match_request(category, project_scope, min_length)

        try:
            vendors = self._repository.list_active_vendors()
        except RepositoryError:
            logger.error(
                "Vendor lookup failed: %s",
                query_fields(query.category, query.project_scope),
            )
            raise

        selection = select_candidates(
            vendors,
            query.category,
            top_k=self._settings.match_top_k,
            max_remaining=self._settings.max_remaining_vendors,
            weights=self._weights,
        )
        if selection.candidates_analyzed == 0:
            logger.info("No active vendors for category: %s", query.category)

        outcome = generate_recommendations(self._ranker, selection.sent_to_ai, query)
        result = compose_match_result(query.category, selection, outcome)

        logger.info(
            "Match: category=%s analyzed=%d sent=%d remaining=%d source=%s",
            result.category,
            result.candidates_analyzed,
            result.sent_to_ai,
            len(result.remaining_vendors),
            result.ranking_source,
        )
        return result
