"""Conversational assistant: intent routing, replies and session history."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional, Tuple

from vira.ai.intent_classifier import (
    GeneralIntent,
    Intent,
    RecommendationIntent,
    SearchIntent,
    classify_intent,
)
from vira.ai.llm import LLMClient
from vira.ai.schemas import ChatMessage, MatchResult, VendorSearchResult
from vira.chat.session_store import SessionStore
from vira.core.constants import (
    CHAT_GENERAL_FALLBACK_REPLY,
    CHAT_GENERIC_ERROR_REPLY,
    CHAT_RECOMMENDATION_ERROR_REPLY,
)
from vira.core.exceptions import AIProcessingError, InputValidationError, ViraError
from vira.core.logging import get_logger, query_fields
from vira.repositories.vendor_repository import VendorRepository
from vira.services.match_service import MatchService
from vira.settings import Settings, settings as default_settings

logger = get_logger("chat.service")

DEFAULT_SESSION_ID = "default"
REASON_PREVIEW_CHARS = 150

GENERAL_SYSTEM_PROMPT = """You are ViRA (Vendor Intelligence & Recommendation Assistant), a helpful AI assistant specialized in vendor management and project consulting.

You help users find the right vendors for their projects, answer questions about vendor capabilities, and provide guidance on project requirements and vendor selection.

- Be helpful, professional, and conversational
- Focus on vendor-related topics when possible
- If users ask about vendor recommendations, guide them to be more specific about their needs
- If users ask about database queries, explain that you can search vendors but complex queries might need the full interface
- Keep responses concise but informative
- Always offer to help with vendor recommendations or searches"""


class GeneralResponder(ABC):
    """Produces replies for messages without a vendor intent."""

    @abstractmethod
    def reply(self, message: str, context: List[ChatMessage]) -> str:
        """Reply to message given recent history (oldest first, including message)."""


class CannedResponder(GeneralResponder):
    """Static introduction reply, used when no model is configured."""

    def reply(self, message: str, context: List[ChatMessage]) -> str:
        return CHAT_GENERAL_FALLBACK_REPLY


class LLMResponder(GeneralResponder):
    """General conversation through the language model."""

    def __init__(self, llm: LLMClient):
        self._llm = llm

    def reply(self, message: str, context: List[ChatMessage]) -> str:
        messages = [{"role": m.role, "content": m.content} for m in context]
        if not messages or messages[-1]["content"] != message:
            messages.append({"role": "user", "content": message})
        try:
            text = self._llm.complete_text(GENERAL_SYSTEM_PROMPT, messages).strip()
        except AIProcessingError as e:
            logger.warning("General reply failed: %s", type(e).__name__)
            return CHAT_GENERAL_FALLBACK_REPLY
        return text or CHAT_GENERAL_FALLBACK_REPLY


@dataclass
class ChatTurn:
    """Result of one chat turn."""

    message: str
    session_id: str
    intent: str
    vendor_data: Optional[List[VendorSearchResult]]
    conversation_history: List[ChatMessage]
    timestamp: datetime


def format_recommendations(result: MatchResult, shown: int) -> str:
    """Render match results as a conversational reply."""
    if not result.recommendations:
        return (
            f'I couldn\'t find any vendors matching your criteria for "{result.category}". '
            "You might want to try a different service category or check if there are "
            "active vendors in our database."
        )

    lines = [
        f"Based on your request for {result.category} services, "
        "here are my top recommendations:",
        "",
    ]
    for index, rec in enumerate(result.recommendations[:shown], start=1):
        reason = rec.rationale
        if len(reason) > REASON_PREVIEW_CHARS:
            reason = reason[:REASON_PREVIEW_CHARS] + "..."
        lines.append(f"**{index}. {rec.vendor_name}** ({rec.vira_score}% match)")
        lines.append(reason)
        if rec.key_strengths:
            lines.append(f"Key strengths: {', '.join(rec.key_strengths)}")
        lines.append("")

    lines.append(
        f"I analyzed {result.candidates_analyzed} vendors for this recommendation. "
        "Would you like more details about any of these vendors or need help with "
        "a different type of project?"
    )
    return "\n".join(lines)


def format_search_results(results: List[VendorSearchResult], original_message: str) -> str:
    """Render directory search results as a conversational reply."""
    if not results:
        return (
            f'I didn\'t find any vendors matching "{original_message}". Try searching '
            'for service categories like "web development", "content", or '
            '"data analytics", or ask me for recommendations instead.'
        )

    plural = "s" if len(results) > 1 else ""
    lines = [f"I found {len(results)} vendor{plural} matching your search:", ""]
    for index, vendor in enumerate(results, start=1):
        lines.append(f"**{index}. {vendor.vendor_name}**")
        lines.append(f"Services: {vendor.service_categories}")
        if vendor.skills:
            lines.append(f"Skills: {vendor.skills}")
        if vendor.location:
            lines.append(f"Location: {vendor.location}")
        if vendor.contact_name and vendor.contact_email:
            lines.append(f"Contact: {vendor.contact_name} ({vendor.contact_email})")
        lines.append("")

    lines.append(
        "Would you like me to provide detailed recommendations for any of these "
        "vendors, or help you with something else?"
    )
    return "\n".join(lines)


class ChatService:
    """Handles chat turns: classify, answer, and record history."""

    def __init__(
        self,
        match_service: MatchService,
        vendor_repository: VendorRepository,
        session_store: SessionStore,
        responder: GeneralResponder,
        settings: Optional[Settings] = None,
    ):
        self._match_service = match_service
        self._repository = vendor_repository
        self._store = session_store
        self._responder = responder
        self._settings = settings or default_settings

    def handle_message(
        self,
        message: Any,
        session_id: Optional[str] = None,
        client_history: Optional[List[ChatMessage]] = None,
    ) -> ChatTurn:
        """Process one user message.

        Client-supplied history, when given, replaces the stored history of
        the session for this turn. The store keeps the full history; the turn
        returns only the most recent window.

        Args:
            message: Raw user message
            session_id: Session identifier (defaults to "default")
            client_history: Optional history owned by the client

        Returns:
            ChatTurn

        Raises:
            InputValidationError: If message is missing, empty or not a string
        """
        if not isinstance(message, str) or not message.strip():
            raise InputValidationError(
                "Message is required and must be a string", field="message"
            )
        session_id = session_id or DEFAULT_SESSION_ID
        self._evict_idle_sessions()

        with self._store.lock(session_id):
            if client_history is not None:
                history = list(client_history)
                self._store.replace(session_id, history)
            else:
                history = self._store.get(session_id)

            user_message = ChatMessage(role="user", content=message)
            self._store.append(session_id, user_message)
            history.append(user_message)

            intent = classify_intent(message)
            logger.debug("Message intent: session=%s intent=%s", session_id, intent.type)

            try:
                reply, vendor_data = self._respond(intent, message, history)
            except Exception:
                logger.exception(
                    "Chat turn failed: session=%s intent=%s message_len=%d",
                    session_id,
                    intent.type,
                    len(message),
                )
                reply, vendor_data = CHAT_GENERIC_ERROR_REPLY, None

            assistant_message = ChatMessage(role="assistant", content=reply)
            self._store.append(session_id, assistant_message)
            history.append(assistant_message)

        return ChatTurn(
            message=reply,
            session_id=session_id,
            intent=intent.type,
            vendor_data=vendor_data,
            conversation_history=history[-self._settings.chat_history_window :],
            timestamp=datetime.now(timezone.utc),
        )

    def _evict_idle_sessions(self) -> None:
        ttl = self._settings.chat_session_ttl_minutes
        if ttl:
            self._store.evict_idle(timedelta(minutes=ttl))

    def _respond(
        self, intent: Intent, message: str, history: List[ChatMessage]
    ) -> Tuple[str, Optional[List[VendorSearchResult]]]:
        if isinstance(intent, RecommendationIntent):
            return self._recommend(intent), None
        if isinstance(intent, SearchIntent):
            results = self._repository.search_vendors(
                intent.search_term, limit=self._settings.chat_search_limit
            )
            return format_search_results(results, message), results
        if isinstance(intent, GeneralIntent):
            window = self._settings.chat_context_messages
            context = history[-window:] if window else []
            return self._responder.reply(message, context), None
        raise TypeError(f"Unknown intent: {intent!r}")

    def _recommend(self, intent: RecommendationIntent) -> str:
        try:
            result = self._match_service.match(
                intent.category, intent.scope_text, enforce_min_scope=False
            )
        except ViraError as e:
            logger.error(
                "Chat recommendation failed (%s): %s",
                type(e).__name__,
                query_fields(intent.category, intent.scope_text),
            )
            return CHAT_RECOMMENDATION_ERROR_REPLY
        return format_recommendations(result, self._settings.chat_recommendations_shown)
