"""SQLAlchemy models for the products feature."""
from __future__ import annotations

from sqlalchemy import Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from outbox_service.core.database import Base, TimestampMixin, UUIDPKMixin


class Product(Base, UUIDPKMixin, TimestampMixin):
    """Product persisted in the database.

    Every create and delete is accompanied by an outbox event written in
    the same transaction.
    """

    __tablename__ = "products"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text(), nullable=False, default="")
    price: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)

    def __repr__(self) -> str:
        return f"Product(id={self.id}, name={self.name!r}, price={self.price})"


__all__ = ["Product"]
