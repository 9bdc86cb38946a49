"""Pagination settings for list endpoints and repository queries.

Environment variables use PAGINATION_ prefix.
Example: PAGINATION_DEFAULT_LIMIT=50, PAGINATION_MAX_LIMIT=1000
"""

from __future__ import annotations

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PaginationSettings(BaseSettings):
    """Pagination configuration settings.

    Attributes:
        default_limit: Page size used when the caller does not ask for one
            (or asks for a non-positive one).
        max_limit: Hard cap applied to any requested page size.

    Example:
        settings = PaginationSettings()
        limit = min(requested_limit, settings.max_limit)
    """

    default_limit: int = Field(
        default=50,
        ge=1,
        le=10000,
        description="Default page size when limit not specified",
    )
    max_limit: int = Field(
        default=1000,
        ge=1,
        le=10000,
        description="Maximum allowed page size (hard limit)",
    )

    model_config = SettingsConfigDict(
        env_prefix="PAGINATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )

    @model_validator(mode="after")
    def _check_bounds(self) -> PaginationSettings:
        if self.default_limit > self.max_limit:
            msg = (
                f"default_limit ({self.default_limit}) must not exceed "
                f"max_limit ({self.max_limit})"
            )
            raise ValueError(msg)
        return self

    def clamp(self, limit: int | None) -> int:
        """Normalize a requested page size.

        Args:
            limit: Requested size; ``None`` or anything below 1 selects the default.

        Returns:
            A page size between 1 and ``max_limit``.
        """
        if limit is None or limit <= 0:
            return self.default_limit
        return min(limit, self.max_limit)
