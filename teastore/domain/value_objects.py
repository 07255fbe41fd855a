"""Value Objects for domain model."""
from __future__ import annotations

from enum import Enum


class UserRole(str, Enum):
    """Account roles stored in ``profiles.role``."""

    USER = "user"
    ADMIN = "admin"


class ProductCategory(str, Enum):
    """Catalog categories offered by the storefront."""

    TEA = "Tea"
    COFFEE = "Coffee"
