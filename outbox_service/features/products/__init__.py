"""Products feature: catalogue entries whose changes are announced via the outbox."""

from .events import PRODUCT_CREATED, PRODUCT_DELETED
from .models import Product
from .repository import ProductRepository
from .schemas import ProductCreate, ProductListResponse, ProductMessage, ProductResponse
from .service import ProductService

__all__ = [
    "PRODUCT_CREATED",
    "PRODUCT_DELETED",
    "Product",
    "ProductCreate",
    "ProductListResponse",
    "ProductMessage",
    "ProductRepository",
    "ProductResponse",
    "ProductService",
]
