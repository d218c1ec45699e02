from vira.db.models import Base, Vendor, VendorPerformance, ChatMessageRecord
from vira.db.session import build_engine, get_session_factory, session_scope

__all__ = [
    "Base",
    "Vendor",
    "VendorPerformance",
    "ChatMessageRecord",
    "build_engine",
    "get_session_factory",
    "session_scope",
]
