"""Import every mapped model so ``Base.metadata`` knows all tables."""

from __future__ import annotations


def import_models() -> None:
    """Register all models with the declarative base."""
    import outbox_service.features.products.models
    import outbox_service.features.users.models
    import outbox_service.infra.events.outbox.models  # noqa: F401
