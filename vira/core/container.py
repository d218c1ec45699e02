"""Dependency injection container."""

from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from vira.ai.llm import LLMClient
from vira.ai.ranker import OpenAIRanker, PreScoreRanker, Ranker
from vira.chat.service import CannedResponder, ChatService, GeneralResponder, LLMResponder
from vira.chat.session_store import InMemorySessionStore, SessionStore, SqlAlchemySessionStore
from vira.core.logging import get_logger
from vira.db.session import build_engine
from vira.repositories.vendor_repository import SqlAlchemyVendorRepository, VendorRepository
from vira.services.match_service import MatchService
from vira.settings import Settings, settings as default_settings

logger = get_logger("core.container")


@dataclass
class ApplicationContainer:
    """Container for application dependencies.

    Provides centralized dependency management and injection. Collaborators
    passed to create() replace the production defaults (tests inject
    in-memory repositories and deterministic rankers here).
    """

    settings: Settings = field(default_factory=lambda: default_settings)
    _engine: Optional[Engine] = field(default=None, repr=False)
    _session_factory: Optional[sessionmaker] = field(default=None, repr=False)
    _llm_client: Optional[LLMClient] = field(default=None, repr=False)
    _vendor_repository: Optional[VendorRepository] = field(default=None, repr=False)
    _ranker: Optional[Ranker] = field(default=None, repr=False)
    _responder: Optional[GeneralResponder] = field(default=None, repr=False)
    _session_store: Optional[SessionStore] = field(default=None, repr=False)
    _match_service: Optional[MatchService] = field(default=None, repr=False)
    _chat_service: Optional[ChatService] = field(default=None, repr=False)

    @classmethod
    def create(
        cls,
        settings: Optional[Settings] = None,
        vendor_repository: Optional[VendorRepository] = None,
        ranker: Optional[Ranker] = None,
        responder: Optional[GeneralResponder] = None,
        session_store: Optional[SessionStore] = None,
    ) -> "ApplicationContainer":
        """Create a new application container.

        Args:
            settings: Optional settings override
            vendor_repository: Optional vendor directory
            ranker: Optional ranking backend
            responder: Optional general conversation responder
            session_store: Optional conversation store

        Returns:
            Configured ApplicationContainer instance
        """
        container = cls(
            settings=settings or default_settings,
            _vendor_repository=vendor_repository,
            _ranker=ranker,
            _responder=responder,
            _session_store=session_store,
        )
        logger.debug("Created ApplicationContainer")
        return container

    @property
    def has_model(self) -> bool:
        return bool(self.settings.openai_api_key)

    @property
    def session_factory(self) -> sessionmaker:
        """Get SQLAlchemy session factory (lazy initialization)."""
        if self._session_factory is None:
            self._engine = build_engine(self.settings.database_url)
            self._session_factory = sessionmaker(
                autocommit=False, autoflush=False, bind=self._engine
            )
        return self._session_factory

    @property
    def llm_client(self) -> LLMClient:
        """Get LLM client (lazy initialization)."""
        if self._llm_client is None:
            self._llm_client = LLMClient(settings=self.settings)
        return self._llm_client

    @property
    def vendor_repository(self) -> VendorRepository:
        if self._vendor_repository is None:
            self._vendor_repository = SqlAlchemyVendorRepository(self.session_factory)
        return self._vendor_repository

    @property
    def ranker(self) -> Ranker:
        if self._ranker is None:
            if self.has_model:
                self._ranker = OpenAIRanker(self.llm_client)
            else:
                logger.warning("No OpenAI API key configured; ranking by pre-score only")
                self._ranker = PreScoreRanker()
        return self._ranker

    @property
    def responder(self) -> GeneralResponder:
        if self._responder is None:
            self._responder = (
                LLMResponder(self.llm_client) if self.has_model else CannedResponder()
            )
        return self._responder

    @property
    def session_store(self) -> SessionStore:
        if self._session_store is None:
            if self.settings.chat_store_backend == "database":
                self._session_store = SqlAlchemySessionStore(self.session_factory)
            else:
                self._session_store = InMemorySessionStore()
        return self._session_store

    @property
    def match_service(self) -> MatchService:
        """Get match service (lazy initialization)."""
        if self._match_service is None:
            self._match_service = MatchService(
                vendor_repository=self.vendor_repository,
                ranker=self.ranker,
                settings=self.settings,
            )
        return self._match_service

    @property
    def chat_service(self) -> ChatService:
        """Get chat service (lazy initialization)."""
        if self._chat_service is None:
            self._chat_service = ChatService(
                match_service=self.match_service,
                vendor_repository=self.vendor_repository,
                session_store=self.session_store,
                responder=self.responder,
                settings=self.settings,
            )
        return self._chat_service

    def close(self) -> None:
        """Clean up container resources."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None
        logger.debug("ApplicationContainer closed")


# Global container instance
_container: Optional[ApplicationContainer] = None


def get_container() -> ApplicationContainer:
    """Get or create the global application container.

    Returns:
        ApplicationContainer instance
    """
    global _container
    if _container is None:
        _container = ApplicationContainer.create()
    return _container


def reset_container() -> None:
    """Reset the global container (useful for testing)."""
    global _container
    if _container is not None:
        _container.close()
        _container = None
