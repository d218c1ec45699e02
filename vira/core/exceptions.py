"""Application exception hierarchy."""


class ViraError(Exception):
    """Base exception for all ViRA errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InputValidationError(ViraError):
    """Request input is missing, empty or of the wrong type."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.field = field


class AIProcessingError(ViraError):
    """Error during AI/LLM processing."""

    def __init__(
        self,
        message: str,
        model: str | None = None,
        prompt_preview: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.model = model
        self.prompt_preview = prompt_preview[:200] if prompt_preview else None


class UpstreamTimeout(AIProcessingError):
    """The model call exceeded its deadline or the service was unreachable."""


class UpstreamMalformed(AIProcessingError):
    """The model responded but its output failed schema validation."""

    def __init__(
        self,
        message: str,
        raw_output: str | None = None,
        expected_schema: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details=details)
        self.raw_output = raw_output[:500] if raw_output else None
        self.expected_schema = expected_schema


class RepositoryError(ViraError):
    """Error while reading vendors or reading/writing conversation history."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.operation = operation
