"""Request and response models of the HTTP API (wire field names as aliases)."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from vira.ai.schemas import ChatMessage, MatchResult, VendorSearchResult


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class MatchRequest(WireModel):
    service_category: Optional[str] = Field(default=None, alias="serviceCategory")
    project_scope: Optional[str] = Field(default=None, alias="projectScope")


class MatchEntry(WireModel):
    vendor_name: str = Field(alias="vendorName")
    vendor_id: str
    vira_score: int = Field(alias="viraScore", ge=0, le=100)
    reason: str
    key_strengths: List[str] = Field(alias="keyStrengths")
    considerations: Optional[str] = None
    pre_score: float = Field(alias="preScore")
    total_projects: Optional[int] = Field(default=None, alias="totalProjects")
    category: str
    availability_status: Optional[str] = None
    pricing_structure: Optional[str] = Field(default=None, alias="pricingStructure")
    rate_cost: Optional[str] = Field(default=None, alias="rateCost")


class RemainingVendorEntry(WireModel):
    vendor_name: str = Field(alias="vendorName")
    vendor_id: str
    category: str
    pre_score: float = Field(alias="preScore")
    total_projects: int = Field(alias="totalProjects")
    avg_rating: Optional[float] = Field(default=None, alias="avgRating")
    recommendation_pct: Optional[float] = Field(default=None, alias="recommendationPct")
    pricing_structure: Optional[str] = Field(default=None, alias="pricingStructure")
    rate_cost: Optional[str] = Field(default=None, alias="rateCost")


class QueryInfo(WireModel):
    category_filter: str
    candidates_analyzed: int
    sent_to_ai: int
    total_matches: int
    ranking_source: str


class MatchResponse(WireModel):
    matches: List[MatchEntry]
    remaining_vendors: List[RemainingVendorEntry] = Field(alias="remainingVendors")
    query_info: QueryInfo


class ChatRequest(WireModel):
    message: Optional[str] = None
    session_id: Optional[str] = Field(default="default", alias="sessionId")
    conversation_history: Optional[List[ChatMessage]] = Field(
        default=None, alias="conversationHistory"
    )


class ChatResponse(WireModel):
    message: str
    session_id: str = Field(alias="sessionId")
    intent: str
    vendor_data: Optional[List[VendorSearchResult]] = Field(alias="vendorData")
    conversation_history: List[ChatMessage] = Field(alias="conversationHistory")
    timestamp: datetime


class HealthResponse(WireModel):
    status: str
    capabilities: List[str]
    timestamp: datetime


def to_match_response(result: MatchResult) -> MatchResponse:
    """Convert a MatchResult to the wire response."""
    matches = []
    for rec in result.recommendations:
        vendor = rec.vendor
        matches.append(
            MatchEntry(
                vendor_name=vendor.vendor_name,
                vendor_id=vendor.vendor_id,
                vira_score=rec.vira_score,
                reason=rec.rationale,
                key_strengths=rec.key_strengths,
                considerations=rec.considerations,
                pre_score=rec.pre_score,
                total_projects=vendor.rated_projects,
                category=result.category,
                availability_status=(
                    vendor.availability_status.value if vendor.availability_status else None
                ),
                pricing_structure=vendor.pricing_structure,
                rate_cost=vendor.rate_cost,
            )
        )

    remaining = [
        RemainingVendorEntry(
            vendor_name=c.vendor.vendor_name,
            vendor_id=c.vendor_id,
            category=result.category,
            pre_score=c.pre_score,
            total_projects=c.vendor.rated_projects,
            avg_rating=c.vendor.avg_overall_rating,
            recommendation_pct=c.vendor.recommendation_pct,
            pricing_structure=c.vendor.pricing_structure,
            rate_cost=c.vendor.rate_cost,
        )
        for c in result.remaining_vendors
    ]

    return MatchResponse(
        matches=matches,
        remaining_vendors=remaining,
        query_info=QueryInfo(
            category_filter=result.category,
            candidates_analyzed=result.candidates_analyzed,
            sent_to_ai=result.sent_to_ai,
            total_matches=len(matches),
            ranking_source=result.ranking_source,
        ),
    )
