"""Users feature: persistence only, no HTTP surface."""

from .models import User
from .repository import UserRepository

__all__ = ["User", "UserRepository"]
