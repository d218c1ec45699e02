"""FastAPI application exposing vendor matching and the ViRA chat assistant."""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from vira.api.schemas import (
    ChatRequest,
    ChatResponse,
    HealthResponse,
    MatchRequest,
    MatchResponse,
    to_match_response,
)
from vira.core.constants import HEALTH_CAPABILITIES
from vira.core.container import ApplicationContainer, get_container
from vira.core.exceptions import InputValidationError, RepositoryError, ViraError
from vira.core.logging import get_logger

logger = get_logger("api")

MATCH_PATH = "/api/vira-match"
CHAT_PATH = "/api/chat"

MATCH_ERROR_MESSAGE = "An error occurred while generating recommendations."
CHAT_ERROR_MESSAGE = "An error occurred while processing your message."


def _server_error_message(request: Request) -> str:
    return CHAT_ERROR_MESSAGE if request.url.path == CHAT_PATH else MATCH_ERROR_MESSAGE


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    if location:
        return f"Invalid request: {location}: {first.get('msg', 'invalid value')}"
    return f"Invalid request: {first.get('msg', 'invalid value')}"


def get_app_container(request: Request) -> ApplicationContainer:
    return request.app.state.container


def create_app(container: Optional[ApplicationContainer] = None) -> FastAPI:
    """Build the API application.

    Args:
        container: Optional dependency container (defaults to the global one)

    Returns:
        Configured FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        app.state.container.close()

    app = FastAPI(title="ViRA API", lifespan=lifespan)
    app.state.container = container or get_container()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(InputValidationError)
    async def input_validation_handler(request: Request, exc: InputValidationError):
        logger.info("Rejected request to %s: %s", request.url.path, exc.message)
        return JSONResponse(status_code=400, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        message = _describe_validation_error(exc)
        logger.info("Rejected request to %s: %s", request.url.path, message)
        return JSONResponse(status_code=400, content={"error": message})

    @app.exception_handler(RepositoryError)
    async def repository_error_handler(request: Request, exc: RepositoryError):
        logger.error(
            "Repository failure on %s: operation=%s", request.url.path, exc.operation
        )
        return JSONResponse(status_code=500, content={"error": _server_error_message(request)})

    @app.exception_handler(ViraError)
    async def vira_error_handler(request: Request, exc: ViraError):
        logger.error("Request to %s failed: %s", request.url.path, type(exc).__name__)
        return JSONResponse(status_code=500, content={"error": _server_error_message(request)})

    @app.post(MATCH_PATH, response_model=MatchResponse)
    def vira_match(
        body: MatchRequest,
        app_container: ApplicationContainer = Depends(get_app_container),
    ) -> MatchResponse:
        result = app_container.match_service.match(body.service_category, body.project_scope)
        return to_match_response(result)

    @app.post(CHAT_PATH, response_model=ChatResponse)
    def chat(
        body: ChatRequest,
        app_container: ApplicationContainer = Depends(get_app_container),
    ) -> ChatResponse:
        turn = app_container.chat_service.handle_message(
            body.message,
            session_id=body.session_id,
            client_history=body.conversation_history,
        )
        return ChatResponse(
            message=turn.message,
            session_id=turn.session_id,
            intent=turn.intent,
            vendor_data=turn.vendor_data,
            conversation_history=turn.conversation_history,
            timestamp=turn.timestamp,
        )

    @app.get(CHAT_PATH, response_model=HealthResponse)
    def chat_capabilities() -> HealthResponse:
        return HealthResponse(
            status="ViRA Chat API is running",
            capabilities=list(HEALTH_CAPABILITIES),
            timestamp=datetime.now(timezone.utc),
        )

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    return app
