"""Vendor directory access."""

from vira.repositories.vendor_repository import (
    InMemoryVendorRepository,
    SqlAlchemyVendorRepository,
    VendorRepository,
)

__all__ = [
    "VendorRepository",
    "InMemoryVendorRepository",
    "SqlAlchemyVendorRepository",
]
