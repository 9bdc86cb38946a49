"""Keyset pagination: opaque page tokens and list queries."""

from .cursor import (
    CursorCodec,
    InvalidPaginationTokenError,
    PageCursor,
    decode_page_token,
    encode_page_token,
)
from .query import Query

__all__ = [
    "CursorCodec",
    "InvalidPaginationTokenError",
    "PageCursor",
    "Query",
    "decode_page_token",
    "encode_page_token",
]
