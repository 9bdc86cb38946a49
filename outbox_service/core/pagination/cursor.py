"""Cursor encoding and decoding for keyset pagination.

A cursor is the ``(created_at, id)`` pair of the last row a client has
seen. The pair is a total order even when timestamps collide, so the next
query can seek directly past it.

Token format: URL-safe base64 of ``"<ISO-8601 timestamp>,<uuid>"``.

Example:
    2025-01-15T10:30:00.123456+00:00,0b8e4c0e-6a55-4a0c-9d1f-3f7a1c2f9e11
    -> MjAyNS0wMS0xNVQxMDozMDowMC4xMjM0NTYrMDA6MDAsMGI4ZTRjMGUt...

Tokens are not signed; they only make paging resumable without exposing
row offsets.
"""

from __future__ import annotations

import base64
import binascii
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict

FIELD_SEPARATOR = ","


class InvalidPaginationTokenError(ValueError):
    """A page token could not be decoded into a cursor.

    Raised for malformed base64, a wrong field count, an unparsable
    timestamp or an unparsable identifier. Surfaced to API callers as a
    client error.
    """

    def __init__(self, reason: str = "token is invalid") -> None:
        self.reason = reason
        super().__init__(f"invalid page token: {reason}")


class PageCursor(BaseModel):
    """Position of the last row seen, as a ``(created_at, id)`` pair.

    Attributes:
        created_at: Creation timestamp of the last row (microsecond precision).
        id: Primary key of the last row, breaking timestamp ties.
    """

    created_at: datetime
    id: UUID

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_row(cls, row: Any) -> PageCursor:
        """Build a cursor from any object with ``created_at`` and ``id``."""
        return cls(created_at=row.created_at, id=row.id)


class CursorCodec:
    """Encode and decode page tokens.

    Usage:
        token = CursorCodec.encode(PageCursor.from_row(products[-1]))
        cursor = CursorCodec.decode(token)
    """

    @staticmethod
    def encode(cursor: PageCursor) -> str:
        """Encode a cursor to an opaque token.

        Encoding is deterministic for a given cursor. Aware timestamps are
        normalized to UTC first.

        Args:
            cursor: Position to encode

        Returns:
            URL-safe base64 encoded string
        """
        created_at = cursor.created_at
        if created_at.tzinfo is not None:
            created_at = created_at.astimezone(UTC)
        raw = f"{created_at.isoformat()}{FIELD_SEPARATOR}{cursor.id}"
        return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii")

    @staticmethod
    def decode(token: str) -> PageCursor:
        """Decode a token back to a cursor.

        Args:
            token: Token previously produced by ``encode``

        Returns:
            The decoded cursor

        Raises:
            InvalidPaginationTokenError: If the token is malformed in any way.
        """
        try:
            raw = base64.b64decode(token, altchars=b"-_", validate=True).decode("utf-8")
        except (binascii.Error, ValueError) as e:
            raise InvalidPaginationTokenError("malformed base64") from e

        parts = raw.split(FIELD_SEPARATOR)
        if len(parts) != 2:
            raise InvalidPaginationTokenError("token is invalid")

        timestamp, identifier = parts
        try:
            created_at = datetime.fromisoformat(timestamp)
        except ValueError as e:
            raise InvalidPaginationTokenError("invalid timestamp") from e
        try:
            row_id = UUID(identifier)
        except ValueError as e:
            raise InvalidPaginationTokenError("invalid identifier") from e

        return PageCursor(created_at=created_at, id=row_id)

    @staticmethod
    def create_token(row: Any) -> str:
        """Create a token pointing just past ``row``."""
        return CursorCodec.encode(PageCursor.from_row(row))


def encode_page_token(cursor: PageCursor) -> str:
    """Module-level alias for ``CursorCodec.encode``."""
    return CursorCodec.encode(cursor)


def decode_page_token(token: str) -> PageCursor:
    """Module-level alias for ``CursorCodec.decode``."""
    return CursorCodec.decode(token)


__all__ = [
    "CursorCodec",
    "InvalidPaginationTokenError",
    "PageCursor",
    "decode_page_token",
    "encode_page_token",
]
