"""Tests for the HTTP surface using FastAPI's TestClient."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from vira.ai.ranker import OpenAIRanker, PreScoreRanker, Ranker
from vira.api.app import create_app
from vira.chat.service import CannedResponder, LLMResponder
from vira.chat.session_store import InMemorySessionStore, SqlAlchemySessionStore
from vira.core.constants import FALLBACK_RATIONALE
from vira.core.container import ApplicationContainer
from vira.core.exceptions import RepositoryError, UpstreamTimeout
from vira.db.models import Base, Vendor, VendorPerformance
from vira.db.session import build_engine, session_scope
from vira.repositories.vendor_repository import (
    InMemoryVendorRepository,
    SqlAlchemyVendorRepository,
)

SCOPE = "Rebuild our company website with a headless CMS"


class TimeoutRanker(Ranker):
    def rank(self, candidates, query):
        raise UpstreamTimeout("Model call failed: APITimeoutError")


class BrokenRepository(InMemoryVendorRepository):
    def list_active_vendors(self):
        raise RepositoryError("Failed to fetch vendor candidates", operation="list_active_vendors")


def _client(settings, repository, ranker=None):
    container = ApplicationContainer.create(
        settings=settings,
        vendor_repository=repository,
        ranker=ranker or PreScoreRanker(),
        responder=CannedResponder(),
        session_store=InMemorySessionStore(),
    )
    return TestClient(create_app(container))


@pytest.fixture
def client(test_settings, repository):
    return _client(test_settings, repository)


class TestMatchEndpoint:
    """Tests for POST /api/vira-match."""

    def test_match_response_shape(self, client):
        """Test a valid request returns matches, remaining vendors and query info."""
        response = client.post(
            "/api/vira-match",
            json={"serviceCategory": "web development", "projectScope": SCOPE},
        )
        assert response.status_code == 200
        body = response.json()
        assert [m["vendor_id"] for m in body["matches"]] == ["W1", "W5"]
        first = body["matches"][0]
        assert first["vendorName"] == "TechCraft Solutions"
        assert first["viraScore"] == 85
        assert first["reason"] == FALLBACK_RATIONALE
        assert first["keyStrengths"] == []
        assert first["totalProjects"] == 12
        assert first["category"] == "web development"
        assert first["availability_status"] == "Available"
        remaining = body["remainingVendors"]
        assert [r["vendor_id"] for r in remaining] == ["W2", "W3"]
        assert remaining[0]["preScore"] == pytest.approx(56.0)
        assert remaining[1]["avgRating"] is None
        assert body["query_info"] == {
            "category_filter": "web development",
            "candidates_analyzed": 4,
            "sent_to_ai": 2,
            "total_matches": 2,
            "ranking_source": "fallback",
        }

    def test_zero_matches(self, client):
        """Test a category without vendors is not an error."""
        response = client.post(
            "/api/vira-match",
            json={"serviceCategory": "legal services", "projectScope": SCOPE},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["matches"] == []
        assert body["remainingVendors"] == []
        assert body["query_info"]["candidates_analyzed"] == 0

    def test_timeout_degrades(self, test_settings, repository):
        """Test a model timeout still returns pre-score matches."""
        client = _client(test_settings, repository, ranker=TimeoutRanker())
        response = client.post(
            "/api/vira-match",
            json={"serviceCategory": "web development", "projectScope": SCOPE},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["matches"]
        assert all(m["reason"] == FALLBACK_RATIONALE for m in body["matches"])
        assert body["query_info"]["ranking_source"] == "fallback"

    def test_missing_field(self, client):
        """Test a missing project scope returns 400."""
        response = client.post("/api/vira-match", json={"serviceCategory": "web development"})
        assert response.status_code == 400
        assert response.json() == {"error": "Service category and project scope are required"}

    def test_scope_too_short(self, client):
        """Test a short project scope returns 400."""
        response = client.post(
            "/api/vira-match",
            json={"serviceCategory": "web development", "projectScope": "short"},
        )
        assert response.status_code == 400
        assert "at least 10 characters" in response.json()["error"]

    def test_wrong_type(self, client):
        """Test non-string values return 400 with an error message."""
        response = client.post(
            "/api/vira-match",
            json={"serviceCategory": 42, "projectScope": SCOPE},
        )
        assert response.status_code == 400
        assert "serviceCategory" in response.json()["error"]

    def test_invalid_json(self, client):
        """Test an unparseable body returns 400."""
        response = client.post(
            "/api/vira-match",
            content="{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert "error" in response.json()

    def test_repository_failure(self, test_settings):
        """Test vendor lookup failures return 500 without internals."""
        client = _client(test_settings, BrokenRepository())
        response = client.post(
            "/api/vira-match",
            json={"serviceCategory": "web development", "projectScope": SCOPE},
        )
        assert response.status_code == 500
        assert response.json() == {"error": "An error occurred while generating recommendations."}

    def test_invalid_vendor_row_skipped(self, test_settings):
        """Test one vendor row with out-of-range ratings does not fail the match."""
        engine = build_engine("sqlite://")
        Base.metadata.create_all(engine)
        factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
        with session_scope(factory) as db:
            db.add_all([
                Vendor(vendor_id="S1", vendor_name="Search Pros",
                       service_categories=["seo"], status="active"),
                Vendor(vendor_id="S2", vendor_name="Rank Masters",
                       service_categories=["seo"], status="active"),
                VendorPerformance(vendor_id="S2", avg_overall_rating=10.5,
                                  recommendation_pct=80.0, rated_projects=6),
            ])
        client = _client(test_settings, SqlAlchemyVendorRepository(factory))
        response = client.post(
            "/api/vira-match",
            json={"serviceCategory": "seo", "projectScope": SCOPE},
        )
        engine.dispose()
        assert response.status_code == 200
        body = response.json()
        assert [m["vendor_id"] for m in body["matches"]] == ["S1"]
        assert body["query_info"]["candidates_analyzed"] == 1


class TestChatEndpoint:
    """Tests for /api/chat."""

    def test_chat_turns(self, client):
        """Test three turns on one session return six messages."""
        for text in ("hello", "What's the weather today?", "Thanks!"):
            response = client.post("/api/chat", json={"message": text, "sessionId": "abc"})
            assert response.status_code == 200
        body = response.json()
        assert body["sessionId"] == "abc"
        assert body["intent"] == "general"
        assert body["vendorData"] is None
        history = body["conversationHistory"]
        assert len(history) == 6
        assert [m["role"] for m in history] == ["user", "assistant"] * 3

    def test_search_returns_vendor_data(self, client):
        """Test search intent returns directory entries."""
        response = client.post("/api/chat", json={"message": "Show me all vendors in SEO"})
        body = response.json()
        assert body["intent"] == "vendor_search"
        assert body["sessionId"] == "default"
        assert [v["vendor_id"] for v in body["vendorData"]] == ["M1"]

    def test_client_history(self, client):
        """Test client-supplied history is honoured."""
        response = client.post(
            "/api/chat",
            json={
                "message": "hello",
                "sessionId": "xyz",
                "conversationHistory": [
                    {"role": "user", "content": "earlier"},
                    {"role": "assistant", "content": "reply"},
                ],
            },
        )
        history = response.json()["conversationHistory"]
        assert [m["content"] for m in history][:3] == ["earlier", "reply", "hello"]
        assert len(history) == 4

    @pytest.mark.parametrize("payload", [{}, {"message": ""}, {"message": "   "}])
    def test_missing_message(self, client, payload):
        """Test empty messages return 400."""
        response = client.post("/api/chat", json=payload)
        assert response.status_code == 400
        assert response.json() == {"error": "Message is required and must be a string"}

    def test_non_string_message(self, client):
        """Test non-string messages return 400."""
        response = client.post("/api/chat", json={"message": 123})
        assert response.status_code == 400
        assert "error" in response.json()

    def test_capabilities(self, client):
        """Test GET /api/chat describes the assistant."""
        body = client.get("/api/chat").json()
        assert body["status"] == "ViRA Chat API is running"
        assert "vendor_recommendations" in body["capabilities"]
        assert "timestamp" in body

    def test_health(self, client):
        """Test the health endpoint."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestContainer:
    """Tests for production wiring of the dependency container."""

    def test_defaults_without_api_key(self, test_settings):
        """Test missing API key wires deterministic ranking and canned replies."""
        settings = test_settings.model_copy(update={"database_url": "sqlite://"})
        container = ApplicationContainer.create(settings=settings)
        assert isinstance(container.ranker, PreScoreRanker)
        assert isinstance(container.responder, CannedResponder)
        assert isinstance(container.session_store, InMemorySessionStore)
        assert isinstance(container.vendor_repository, SqlAlchemyVendorRepository)
        container.close()

    def test_api_key_wires_model(self, test_settings):
        """Test a configured API key wires the model-backed components."""
        settings = test_settings.model_copy(update={"openai_api_key": "sk-test"})
        container = ApplicationContainer.create(settings=settings)
        assert isinstance(container.ranker, OpenAIRanker)
        assert isinstance(container.responder, LLMResponder)

    def test_database_session_store(self, test_settings):
        """Test the database conversation store can be selected."""
        settings = test_settings.model_copy(
            update={"database_url": "sqlite://", "chat_store_backend": "database"}
        )
        container = ApplicationContainer.create(settings=settings)
        assert isinstance(container.session_store, SqlAlchemySessionStore)
        container.close()
