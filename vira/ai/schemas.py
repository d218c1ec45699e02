"""Pydantic schemas for vendor matching and structured AI outputs."""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AvailabilityStatus(str, Enum):
    """Vendor availability as maintained in the vendor directory."""

    AVAILABLE = "Available"
    LIMITED = "Limited"
    UNAVAILABLE = "Unavailable"
    ON_LEAVE = "On Leave"

    @classmethod
    def parse(cls, value: "str | AvailabilityStatus | None") -> Optional["AvailabilityStatus"]:
        """Parse loosely formatted status text ("on_leave", "ONLEAVE", ...)."""
        if value is None or isinstance(value, cls):
            return value
        key = "".join(ch for ch in str(value).lower() if ch.isalpha())
        for status in cls:
            if key == "".join(ch for ch in status.value.lower() if ch.isalpha()):
                return status
        return None


class VendorRecord(BaseModel):
    """Read-only view of a vendor with its performance aggregates."""

    vendor_id: str
    vendor_name: str
    service_categories: List[str] = Field(default_factory=list)
    # Older records only carry a comma-separated category string
    legacy_categories: Optional[str] = None
    skills: Optional[str] = None
    avg_overall_rating: Optional[float] = Field(default=None, ge=0, le=10)
    rated_projects: int = Field(default=0, ge=0)
    recommendation_pct: Optional[float] = Field(default=None, ge=0, le=100)
    availability_status: Optional[AvailabilityStatus] = None
    pricing_structure: Optional[str] = None
    rate_cost: Optional[str] = None
    status: str = "active"
    location: Optional[str] = None
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None

    @field_validator("vendor_id", mode="before")
    @classmethod
    def _coerce_vendor_id(cls, value):
        return str(value) if value is not None else value

    @field_validator("availability_status", mode="before")
    @classmethod
    def _parse_availability(cls, value):
        return AvailabilityStatus.parse(value)


class MatchQuery(BaseModel):
    """A request for vendor recommendations."""

    category: str
    project_scope: str


class ScoredCandidate(BaseModel):
    """A category match together with its deterministic pre-score."""

    vendor: VendorRecord
    pre_score: float = Field(ge=0, le=100)

    @property
    def vendor_id(self) -> str:
        return self.vendor.vendor_id


class CandidateSelection(BaseModel):
    """Output of candidate selection: top-K for the model plus the rest."""

    sent_to_ai: List[ScoredCandidate]
    remaining: List[ScoredCandidate]
    candidates_analyzed: int = Field(ge=0)


class AIRecommendation(BaseModel):
    """A ranked recommendation, either model-assigned or a pre-score stand-in."""

    vendor: VendorRecord
    vira_score: int = Field(ge=0, le=100)
    rationale: str
    key_strengths: List[str] = Field(default_factory=list)
    considerations: Optional[str] = None
    pre_score: float = Field(ge=0, le=100)

    @property
    def vendor_id(self) -> str:
        return self.vendor.vendor_id

    @property
    def vendor_name(self) -> str:
        return self.vendor.vendor_name


class MatchResult(BaseModel):
    """Complete, explainable result of a match request."""

    category: str
    recommendations: List[AIRecommendation]
    remaining_vendors: List[ScoredCandidate]
    candidates_analyzed: int = Field(ge=0)
    sent_to_ai: int = Field(ge=0)
    ranking_source: Literal["ai", "fallback", "none"]


class RankedVendorOutput(BaseModel):
    """One entry of the model's structured ranking output."""

    model_config = ConfigDict(populate_by_name=True)

    vendor_id: str = Field(alias="vendorId", min_length=1)
    vendor_name: Optional[str] = Field(default=None, alias="vendorName")
    vira_score: int = Field(alias="viraScore", ge=0, le=100)
    reason: str = Field(min_length=1)
    key_strengths: List[str] = Field(alias="keyStrengths")
    considerations: Optional[str] = None

    @field_validator("vendor_id", mode="before")
    @classmethod
    def _coerce_vendor_id(cls, value):
        return str(value) if isinstance(value, int) else value

    @field_validator("reason", mode="before")
    @classmethod
    def _strip_reason(cls, value):
        return value.strip() if isinstance(value, str) else value


class RankingOutput(BaseModel):
    """Structured output for vendor ranking."""

    recommendations: List[RankedVendorOutput]


class ChatMessage(BaseModel):
    """A single turn of a conversation."""

    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class VendorSearchResult(BaseModel):
    """Directory entry returned by a vendor search."""

    vendor_id: str
    vendor_name: str
    service_categories: str
    skills: Optional[str] = None
    location: Optional[str] = None
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
