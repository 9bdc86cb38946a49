"""API router for the products feature."""
from __future__ import annotations

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from outbox_service.core.database import UnitOfWork
from outbox_service.core.dependencies.database import get_unit_of_work
from outbox_service.features.products.schemas import (
    DeleteResponse,
    ProductCreate,
    ProductListResponse,
    ProductResponse,
)
from outbox_service.features.products.service import ProductService
from outbox_service.infra.logging import get_lazy_logger

router = APIRouter(prefix="/products", tags=["products"])

# Standard logger for INFO/WARNING/ERROR
logger = logging.getLogger(__name__)
# Lazy logger for DEBUG (zero overhead when DEBUG disabled)
lazy_logger = get_lazy_logger(__name__)


def get_product_service(
    unit_of_work: Annotated[UnitOfWork, Depends(get_unit_of_work)],
) -> ProductService:
    """FastAPI dependency building the product service."""
    return ProductService(unit_of_work)


ProductServiceDep = Annotated[ProductService, Depends(get_product_service)]


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a product",
    description="Create a product and stage a `product.created` event in the same transaction.",
)
async def create_product(payload: ProductCreate, service: ProductServiceDep) -> ProductResponse:
    """Create a new product.

    Args:
        payload: Product fields
        service: Product service

    Returns:
        The created product
    """
    product = await service.create_product(payload)
    return ProductResponse.model_validate(product)


@router.get(
    "",
    response_model=ProductListResponse,
    summary="List products",
    description="""
List products newest first using cursor pagination.

**Usage:**
1. First request: `GET /products?limit=20`
2. Next page: `GET /products?limit=20&page_token={next_page_token}`
3. Repeat until `next_page_token` is null

The token is opaque - pass it back unchanged.
""",
)
async def list_products(
    service: ProductServiceDep,
    limit: Annotated[int | None, Query(description="Page size (default 50, max 1000)")] = None,
    page_token: Annotated[str | None, Query(description="Token from the previous page")] = None,
    name: Annotated[str | None, Query(max_length=255, description="Exact product name")] = None,
) -> ProductListResponse:
    """List one page of products."""
    products, next_page_token = await service.list_products(
        limit=limit,
        page_token=page_token,
        name=name,
    )

    lazy_logger.debug(
        lambda: f"router.list_products(limit={limit}, name={name!r}) -> {len(products)} items"
    )
    return ProductListResponse(
        products=[ProductResponse.model_validate(p) for p in products],
        next_page_token=next_page_token,
    )


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Get a product",
)
async def get_product(product_id: UUID, service: ProductServiceDep) -> ProductResponse:
    """Fetch one product by id."""
    product = await service.get_product(product_id)
    return ProductResponse.model_validate(product)


@router.delete(
    "/{product_id}",
    response_model=DeleteResponse,
    summary="Delete a product",
    description="Delete a product and stage a `product.deleted` event in the same transaction.",
)
async def delete_product(product_id: UUID, service: ProductServiceDep) -> DeleteResponse:
    """Delete a product by id."""
    await service.delete_product(product_id)
    return DeleteResponse(message="product deleted successfully")


__all__ = ["get_product_service", "router"]
