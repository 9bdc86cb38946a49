"""Outbox worker settings.

Environment variables use OUTBOX_ prefix.
Example: OUTBOX_POLL_INTERVAL=2.0, OUTBOX_BATCH_SIZE=100
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class OutboxSettings(BaseSettings):
    """Polling configuration for the background outbox worker."""

    enabled: bool = Field(
        default=True,
        description="Start the outbox worker with the application.",
    )
    poll_interval: float = Field(
        default=2.0,
        gt=0,
        le=3600.0,
        description="Seconds to sleep between polling ticks.",
    )
    batch_size: int = Field(
        default=100,
        ge=1,
        le=1000,
        description="Maximum number of pending events handled per tick.",
    )
    shutdown_timeout: float = Field(
        default=30.0,
        gt=0,
        le=600.0,
        description="Seconds to wait for an in-flight tick before cancelling the worker task.",
    )

    model_config = SettingsConfigDict(
        env_prefix="OUTBOX_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )
