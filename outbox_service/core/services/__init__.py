"""Shared service-layer building blocks."""

from .base import BaseService

__all__ = ["BaseService"]
