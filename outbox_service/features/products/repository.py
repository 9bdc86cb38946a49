"""Repository for the products feature."""
from __future__ import annotations

from outbox_service.core.database.repository import BaseRepository
from outbox_service.core.pagination.query import CREATED_AT_FIELD, ID_FIELD, NAME_FIELD
from outbox_service.features.products.models import Product


class ProductRepository(BaseRepository[Product]):
    """Data access for products.

    Lists may filter on ``id``, ``name`` and ``created_at``.
    """

    model = Product
    filterable_fields = frozenset({ID_FIELD, NAME_FIELD, CREATED_AT_FIELD})


__all__ = ["ProductRepository"]
