"""Modular Pydantic Settings v2 configuration.

Each domain (app/db/broker/logging/pagination/outbox) has its own frozen
settings model read from environment variables, loaded once through an
LRU-cached loader:

    from outbox_service.core.settings import get_outbox_settings

    interval = get_outbox_settings().poll_interval
"""

from __future__ import annotations

from .loader import (
    clear_settings_cache,
    get_app_settings,
    get_db_settings,
    get_logging_settings,
    get_outbox_settings,
    get_pagination_settings,
    get_rabbit_settings,
)

__all__ = [
    "clear_settings_cache",
    "get_app_settings",
    "get_db_settings",
    "get_logging_settings",
    "get_outbox_settings",
    "get_pagination_settings",
    "get_rabbit_settings",
]
