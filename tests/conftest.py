"""Shared fixtures: vendor factory, isolated settings and wired services."""

import pytest

from vira.ai.ranker import PreScoreRanker
from vira.ai.schemas import VendorRecord
from vira.chat.service import CannedResponder, ChatService
from vira.chat.session_store import InMemorySessionStore
from vira.repositories.vendor_repository import InMemoryVendorRepository
from vira.services.match_service import MatchService
from vira.settings import Settings


def make_vendor(vendor_id, **overrides) -> VendorRecord:
    """Build a VendorRecord with sensible defaults."""
    data = {
        "vendor_id": vendor_id,
        "vendor_name": f"Vendor {vendor_id}",
        "service_categories": ["web development"],
        "avg_overall_rating": 8.0,
        "rated_projects": 5,
        "recommendation_pct": 80.0,
        "availability_status": "Available",
        "status": "active",
    }
    data.update(overrides)
    return VendorRecord(**data)


@pytest.fixture
def test_settings():
    """Settings isolated from .env files and environment secrets."""
    return Settings(
        _env_file=None,
        openai_api_key="",
        match_top_k=2,
        ai_retry_attempts=2,
        ai_retry_wait_min=0,
        ai_retry_wait_max=0,
        chat_session_ttl_minutes=None,
    )


@pytest.fixture
def vendors():
    """Directory with four active web vendors plus noise."""
    return [
        make_vendor(
            "W1",
            vendor_name="TechCraft Solutions",
            avg_overall_rating=9.0,
            recommendation_pct=95.0,
            rated_projects=12,
            skills="React, Next.js",
            location="New York, NY",
            contact_name="Sarah Johnson",
            contact_email="sarah@techcraft.com",
        ),
        make_vendor(
            "W2",
            vendor_name="Blue Byte",
            avg_overall_rating=7.0,
            recommendation_pct=70.0,
            rated_projects=3,
            availability_status="Limited",
        ),
        make_vendor(
            "W3",
            vendor_name="Fresh Start Web",
            avg_overall_rating=None,
            recommendation_pct=None,
            rated_projects=0,
        ),
        make_vendor(
            "W4",
            vendor_name="Retired Web Co",
            status="inactive",
        ),
        make_vendor(
            "W5",
            vendor_name="Legacy Labs",
            service_categories=[],
            legacy_categories="Web Development, Design",
        ),
        make_vendor(
            "C1",
            vendor_name="ContentMasters Agency",
            service_categories=["content"],
            skills="Copywriting, content strategy",
        ),
        make_vendor(
            "M1",
            vendor_name="GrowthHack Marketing",
            service_categories=["marketing", "seo"],
            skills="SEO, PPC advertising",
        ),
    ]


@pytest.fixture
def repository(vendors):
    return InMemoryVendorRepository(vendors)


@pytest.fixture
def match_service(repository, test_settings):
    return MatchService(repository, PreScoreRanker(), test_settings)


@pytest.fixture
def session_store():
    return InMemorySessionStore()


@pytest.fixture
def chat_service(match_service, repository, session_store, test_settings):
    return ChatService(
        match_service=match_service,
        vendor_repository=repository,
        session_store=session_store,
        responder=CannedResponder(),
        settings=test_settings,
    )


@pytest.fixture
def vendor_factory():
    return make_vendor
