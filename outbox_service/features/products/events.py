"""Outbox event types for the products feature.

Both event types carry a ``ProductMessage``; registering them lets the
outbox worker rebuild the message from the stored event data.
"""

from __future__ import annotations

from outbox_service.features.products.schemas import ProductMessage
from outbox_service.infra.events.outbox import message_registry

PRODUCT_CREATED = "product.created"
PRODUCT_DELETED = "product.deleted"

message_registry.register(PRODUCT_CREATED, ProductMessage)
message_registry.register(PRODUCT_DELETED, ProductMessage)

__all__ = ["PRODUCT_CREATED", "PRODUCT_DELETED"]
