"""Business logic: validation, authorization and aggregation rules.

Services take an :class:`~repositories.AbstractRepository` and never talk to
a storage backend directly, so every rule holds for both backends.
"""

from .account_service import AccountService
from .catalog_service import CatalogService
from .review_service import ReviewService

__all__ = ["AccountService", "CatalogService", "ReviewService"]
