"""Tests for repository errors and HTTP application exceptions."""
from __future__ import annotations

from types import SimpleNamespace

import pytest
from sqlalchemy.exc import IntegrityError

from outbox_service.core.database.exceptions import (
    InvalidFilterError,
    NotFoundError,
    RepositoryError,
    TransactionError,
    UniqueConstraintError,
    is_unique_violation,
    translate_integrity_error,
)
from outbox_service.core.exceptions import (
    AppException,
    BadRequestException,
    ConflictException,
    NotFoundException,
)


def _integrity_error(orig: object) -> IntegrityError:
    return IntegrityError("INSERT ...", {}, orig)  # type: ignore[arg-type]


# ──────────────────────────────────────────────────────────────
# Repository errors
# ──────────────────────────────────────────────────────────────


class TestRepositoryErrors:
    def test_str_includes_details(self):
        err = RepositoryError("boom", details={"table": "products"})

        assert str(err) == "boom (table='products')"

    def test_not_found_message(self):
        err = NotFoundError("Product", {"id": 42})

        assert err.message == "Product not found with id=42"
        assert err.model_name == "Product"
        assert err.details == {"model": "Product", "id": 42}

    def test_unique_constraint_message(self):
        err = UniqueConstraintError("Key (email)=(a@b.c) already exists.", model_name="User")

        assert err.message == "resource must be unique: Key (email)=(a@b.c) already exists."
        assert err.details == {"model": "User"}

    def test_invalid_filter_records_name(self):
        err = InvalidFilterError("Cannot filter User by 'email'", filter_name="email")

        assert err.details == {"filter": "email"}

    def test_transaction_error_keeps_original(self):
        original = RuntimeError("write failed")
        err = TransactionError("failed to rollback transaction", original_error=original)

        assert err.original_error is original
        assert "write failed" in str(err)


class TestIntegrityTranslation:
    def test_postgres_unique_violation_by_sqlstate(self):
        """SQLSTATE 23505 is a unique violation; diag detail becomes the message."""
        orig = SimpleNamespace(
            sqlstate="23505",
            diag=SimpleNamespace(message_detail="Key (email)=(a@b.c) already exists."),
        )

        translated = translate_integrity_error(_integrity_error(orig), "User")

        assert isinstance(translated, UniqueConstraintError)
        assert translated.detail == "Key (email)=(a@b.c) already exists."

    def test_other_sqlstate_is_generic(self):
        orig = SimpleNamespace(sqlstate="23503", diag=None)

        translated = translate_integrity_error(_integrity_error(orig), "Product")

        assert not isinstance(translated, UniqueConstraintError)
        assert isinstance(translated, RepositoryError)

    def test_sqlite_message_detection(self):
        """Drivers without SQLSTATE are recognised by message."""
        orig = Exception("UNIQUE constraint failed: users.email")

        assert is_unique_violation(_integrity_error(orig)) is True


# ──────────────────────────────────────────────────────────────
# Application exceptions
# ──────────────────────────────────────────────────────────────


class TestAppExceptions:
    @pytest.mark.parametrize(
        ("exc", "status_code", "title"),
        [
            (NotFoundException("missing"), 404, "Not Found"),
            (ConflictException("duplicate"), 409, "Conflict"),
            (BadRequestException("bad token"), 400, "Bad Request"),
        ],
    )
    def test_subclass_status_and_title(self, exc: AppException, status_code: int, title: str):
        assert exc.status_code == status_code
        assert exc.title == title

    def test_default_title_from_status(self):
        exc = AppException(status_code=503, detail="down")

        assert exc.title == "Service Unavailable"
        assert exc.type == "about:blank"
        assert exc.extra == {}

    def test_unknown_status_title(self):
        assert AppException(status_code=418, detail="teapot").title == "Error"
