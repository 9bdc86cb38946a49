"""Pydantic schemas for the products feature."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

if TYPE_CHECKING:
    from outbox_service.features.products.models import Product

# Largest value the Numeric(10, 2) price column holds
MAX_PRICE = 99_999_999.99


class ProductBase(BaseModel):
    """Shared attributes for product payloads."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(default="", max_length=5000)
    price: float = Field(..., gt=0, le=MAX_PRICE, description="Unit price, two decimal places")


class ProductCreate(ProductBase):
    """Payload used when creating a product."""

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v

    @field_validator("price")
    @classmethod
    def round_price(cls, v: float) -> float:
        return round(v, 2)


class ProductResponse(ProductBase):
    """Representation returned from the API."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    created_at: datetime
    updated_at: datetime


class ProductListResponse(BaseModel):
    """One page of products."""

    products: list[ProductResponse]
    next_page_token: str | None = Field(
        default=None,
        description="Pass as page_token to fetch the next page; null on the last page",
    )


class DeleteResponse(BaseModel):
    """Acknowledgement returned after a delete."""

    message: str


class ProductMessage(BaseModel):
    """Payload of product outbox events and of the published message.

    Carries everything a consumer needs, so publishing never reads the
    product row (which may already be gone for deletions).
    """

    action: Literal["created", "deleted"]
    product_id: UUID
    name: str
    price: float

    @classmethod
    def from_product(cls, product: Product, action: Literal["created", "deleted"]) -> ProductMessage:
        return cls(action=action, product_id=product.id, name=product.name, price=product.price)


__all__ = [
    "DeleteResponse",
    "ProductBase",
    "ProductCreate",
    "ProductListResponse",
    "ProductMessage",
    "ProductResponse",
]
