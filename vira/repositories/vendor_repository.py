"""Read-only access to the vendor directory."""

from abc import ABC, abstractmethod
from typing import Iterable, List

from pydantic import ValidationError
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload, sessionmaker

from vira.ai.candidate_selector import is_active
from vira.ai.schemas import VendorRecord, VendorSearchResult
from vira.core.constants import VENDOR_STATUS_ACTIVE
from vira.core.exceptions import RepositoryError
from vira.core.logging import get_logger
from vira.db.models import Vendor
from vira.db.session import session_scope

logger = get_logger("repositories.vendor")


class VendorRepository(ABC):
    """Vendor directory contract consumed by matching and chat."""

    @abstractmethod
    def list_active_vendors(self) -> List[VendorRecord]:
        """Return a point-in-time snapshot of all active vendors.

        Raises:
            RepositoryError: If the vendor query fails
        """

    def search_vendors(self, term: str, limit: int = 10) -> List[VendorSearchResult]:
        """Search active vendors by name, then categories, then skills."""
        return search_records(self.list_active_vendors(), term, limit)


def to_search_result(vendor: VendorRecord) -> VendorSearchResult:
    categories = ", ".join(vendor.service_categories) or vendor.legacy_categories or ""
    return VendorSearchResult(
        vendor_id=vendor.vendor_id,
        vendor_name=vendor.vendor_name,
        service_categories=categories,
        skills=vendor.skills,
        location=vendor.location,
        contact_name=vendor.contact_name,
        contact_email=vendor.contact_email,
    )


def search_records(
    vendors: Iterable[VendorRecord], term: str, limit: int
) -> List[VendorSearchResult]:
    """Case-insensitive substring search with name > categories > skills precedence.

    Args:
        vendors: Vendors to search
        term: Search term
        limit: Maximum number of results

    Returns:
        De-duplicated results, at most limit entries
    """
    needle = term.strip().lower()
    if not needle or limit <= 0:
        return []

    active = [v for v in vendors if is_active(v)]
    fields = (
        lambda v: v.vendor_name,
        lambda v: " ".join(v.service_categories) + " " + (v.legacy_categories or ""),
        lambda v: v.skills or "",
    )

    results: List[VendorSearchResult] = []
    seen: set = set()
    for field in fields:
        for vendor in active:
            if len(results) >= limit:
                return results
            if vendor.vendor_id in seen or needle not in field(vendor).lower():
                continue
            seen.add(vendor.vendor_id)
            results.append(to_search_result(vendor))
    return results


class InMemoryVendorRepository(VendorRepository):
    """Vendor repository backed by a list; used for tests and local runs."""

    def __init__(self, vendors: Iterable[VendorRecord] = ()):
        self._vendors: List[VendorRecord] = list(vendors)

    def list_active_vendors(self) -> List[VendorRecord]:
        return [v for v in self._vendors if is_active(v)]


def vendor_to_record(vendor: Vendor) -> VendorRecord:
    """Convert a Vendor row (with performance loaded) to a VendorRecord.

    A plain string in the service_categories column is the older
    comma-separated format and is read like vendor_type.

    Raises:
        ValidationError: If the row holds values outside the record bounds
    """
    perf = vendor.performance
    categories = vendor.service_categories
    if isinstance(categories, str):
        categories, legacy = [], categories
    else:
        categories, legacy = list(categories or []), vendor.vendor_type
    return VendorRecord(
        vendor_id=vendor.vendor_id,
        vendor_name=vendor.vendor_name,
        service_categories=categories,
        legacy_categories=legacy,
        skills=vendor.skills,
        avg_overall_rating=perf.avg_overall_rating if perf else None,
        rated_projects=(perf.rated_projects or 0) if perf else 0,
        recommendation_pct=perf.recommendation_pct if perf else None,
        availability_status=vendor.availability_status,
        pricing_structure=vendor.pricing_structure,
        rate_cost=vendor.rate_cost,
        status=vendor.status or VENDOR_STATUS_ACTIVE,
        location=vendor.location,
        contact_name=vendor.contact_name,
        contact_email=vendor.contact_email,
    )


def _to_records(rows: Iterable[Vendor]) -> List[VendorRecord]:
    records = []
    for row in rows:
        try:
            records.append(vendor_to_record(row))
        except ValidationError as e:
            logger.warning(
                "Skipping vendor %s with invalid data: %d error(s)",
                row.vendor_id,
                e.error_count(),
            )
    return records


class SqlAlchemyVendorRepository(VendorRepository):
    """Vendor repository reading the vendors and vendor_performance tables."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def list_active_vendors(self) -> List[VendorRecord]:
        stmt = (
            select(Vendor)
            .options(joinedload(Vendor.performance))
            .where(func.lower(Vendor.status) == VENDOR_STATUS_ACTIVE)
            .order_by(Vendor.vendor_id)
        )
        try:
            with session_scope(self._session_factory) as session:
                rows = session.execute(stmt).scalars().all()
                return _to_records(rows)
        except SQLAlchemyError as e:
            logger.error("Vendor query failed: %s", type(e).__name__)
            raise RepositoryError(
                "Failed to fetch vendor candidates",
                operation="list_active_vendors",
            ) from e
