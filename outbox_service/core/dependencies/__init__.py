"""FastAPI dependencies shared across features."""

from .database import get_db_session, get_unit_of_work

__all__ = ["get_db_session", "get_unit_of_work"]
