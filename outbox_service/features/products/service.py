"""Service layer for products: every mutation stages an outbox event."""
from __future__ import annotations

from typing import TYPE_CHECKING

from outbox_service.core.pagination import CursorCodec, Query
from outbox_service.core.pagination.query import NAME_FIELD
from outbox_service.core.services.base import BaseService
from outbox_service.features.products.events import PRODUCT_CREATED, PRODUCT_DELETED
from outbox_service.features.products.models import Product
from outbox_service.features.products.repository import ProductRepository
from outbox_service.features.products.schemas import ProductMessage
from outbox_service.infra.events.outbox import create_with_event
from outbox_service.infra.metrics.business import products_created_total, products_deleted_total

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from outbox_service.core.database import TransactionScope, UnitOfWork
    from outbox_service.core.settings.pagination import PaginationSettings
    from outbox_service.features.products.schemas import ProductCreate


class ProductService(BaseService):
    """Orchestrates product operations inside scoped transactions."""

    def __init__(
        self,
        unit_of_work: UnitOfWork,
        pagination: PaginationSettings | None = None,
    ) -> None:
        super().__init__()
        self._uow = unit_of_work
        self._pagination = pagination

    async def create_product(self, payload: ProductCreate) -> Product:
        """Create a product and its ``product.created`` event atomically.

        Raises:
            UniqueConstraintError: If the product violates a unique constraint.
            TransactionError: If the transaction cannot be committed.
        """

        async def create(tx: TransactionScope) -> Product:
            return await tx.repository(ProductRepository).create(Product(**payload.model_dump()))

        product = await create_with_event(
            self._uow,
            create,
            PRODUCT_CREATED,
            lambda created: ProductMessage.from_product(created, "created"),
        )
        products_created_total.inc()

        # INFO level - business event (audit trail)
        self.logger.info(
            "Product created",
            extra={
                "product_id": str(product.id),
                "product_name": product.name[:50],
                "operation": "service.create_product",
            },
        )
        return product

    async def delete_product(self, product_id: UUID) -> Product:
        """Delete a product and stage its ``product.deleted`` event atomically.

        The event is built from the row as read before deletion.

        Returns:
            The deleted product (detached snapshot)

        Raises:
            NotFoundError: If the product does not exist.
        """

        async def delete(tx: TransactionScope) -> Product:
            products = tx.repository(ProductRepository)
            product = await products.find_by_id(product_id)
            await products.delete_by_id(product_id)
            return product

        product = await create_with_event(
            self._uow,
            delete,
            PRODUCT_DELETED,
            lambda deleted: ProductMessage.from_product(deleted, "deleted"),
        )
        products_deleted_total.inc()

        self.logger.info(
            "Product deleted",
            extra={"product_id": str(product_id), "operation": "service.delete_product"},
        )
        return product

    async def get_product(self, product_id: UUID) -> Product:
        """Fetch one product.

        Raises:
            NotFoundError: If the product does not exist.
        """
        async with self._uow.transaction() as tx:
            product = await tx.repository(ProductRepository).find_by_id(product_id)

        self._lazy.debug(lambda: f"service.get_product({product_id}) -> found")
        return product

    async def list_products(
        self,
        *,
        limit: int | None = None,
        page_token: str | None = None,
        name: str | None = None,
    ) -> tuple[Sequence[Product], str | None]:
        """List products newest first, one page at a time.

        Args:
            limit: Page size; defaults and caps come from pagination settings
            page_token: Token returned with the previous page
            name: Only products with exactly this name

        Returns:
            The page and the token for the next one (None when the page is
            not full, i.e. there is nothing more to read)

        Raises:
            InvalidPaginationTokenError: If ``page_token`` is malformed.
        """
        query = Query()
        if name:
            query.with_filter(NAME_FIELD, name)
        query.apply_pagination(limit, page_token, settings=self._pagination)

        async with self._uow.transaction() as tx:
            products = await tx.repository(ProductRepository).list(query)

        next_page_token = None
        if products and len(products) == query.limit:
            next_page_token = CursorCodec.create_token(products[-1])

        self._lazy.debug(
            lambda: f"service.list_products(limit={query.limit}, name={name!r}) -> "
            f"{len(products)} items, more={next_page_token is not None}"
        )
        return products, next_page_token


__all__ = ["ProductService"]
