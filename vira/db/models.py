from datetime import datetime, timezone

from sqlalchemy import (
    Column, Integer, String, Text, Float, DateTime, ForeignKey, JSON, Index
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Vendor(Base):
    __tablename__ = "vendors"

    vendor_id = Column(String(50), primary_key=True)
    vendor_name = Column(String(255), nullable=False)
    service_categories = Column(JSON)  # List of category names
    vendor_type = Column(String(255))  # Legacy comma-separated categories
    skills = Column(Text)
    pricing_structure = Column(String(100))
    rate_cost = Column(String(255))
    availability_status = Column(String(30))  # Available/Limited/Unavailable/On Leave
    status = Column(String(30), default="active")
    location = Column(String(255))
    contact_name = Column(String(255))
    contact_email = Column(String(255))

    __table_args__ = (
        Index("ix_vendors_status", "status"),
    )

    performance = relationship("VendorPerformance", back_populates="vendor", uselist=False)


class VendorPerformance(Base):
    """Aggregated rating data per vendor."""

    __tablename__ = "vendor_performance"

    vendor_id = Column(String(50), ForeignKey("vendors.vendor_id"), primary_key=True)
    avg_overall_rating = Column(Float)  # 0-10
    recommendation_pct = Column(Float)  # 0-100
    rated_projects = Column(Integer, default=0)

    vendor = relationship("Vendor", back_populates="performance")


class ChatMessageRecord(Base):
    __tablename__ = "chat_messages"

    id = Column(Integer, primary_key=True)
    session_id = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False)  # "user" | "assistant"
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    __table_args__ = (
        Index("ix_chat_messages_session_created", "session_id", "created_at"),
    )
