"""Tests for application exception handlers."""

from __future__ import annotations

import json
import uuid

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.testclient import TestClient
import pytest
from starlette.requests import Request

from outbox_service.app.exception_handlers import (
    PROBLEM_JSON,
    app_exception_handler,
    bad_request_error_handler,
    configure_exception_handlers,
    generic_exception_handler,
    not_found_error_handler,
    unique_constraint_error_handler,
    validation_exception_handler,
)
from outbox_service.core.database.exceptions import (
    InvalidFilterError,
    NotFoundError,
    UniqueConstraintError,
)
from outbox_service.core.exceptions import AppException, ConflictException
from outbox_service.core.pagination import InvalidPaginationTokenError


def _build_request(path: str = "/test") -> Request:
    """Create a minimal ASGI request for handler tests."""
    scope = {
        "type": "http",
        "method": "GET",
        "path": path,
        "headers": [],
        "query_string": b"",
        "client": ("test", 1234),
        "server": ("test", 80),
    }
    return Request(scope, lambda: None)


def _body(response) -> dict:
    return json.loads(response.body)


async def test_app_exception_handler_renders_problem_details() -> None:
    """App exceptions become RFC 7807 bodies with the request path as instance."""
    exc = ConflictException(detail="duplicate", type="unique-constraint", extra={"field": "email"})

    response = await app_exception_handler(_build_request("/users"), exc)

    assert response.status_code == 409
    assert response.media_type == PROBLEM_JSON
    assert _body(response) == {
        "type": "unique-constraint",
        "title": "Conflict",
        "status": 409,
        "detail": "duplicate",
        "instance": "/users",
        "field": "email",
    }


async def test_not_found_error_handler() -> None:
    """Repository NotFoundError maps to 404 with a model-specific type."""
    product_id = uuid.uuid4()

    response = await not_found_error_handler(
        _build_request(f"/products/{product_id}"), NotFoundError("Product", {"id": product_id})
    )

    assert response.status_code == 404
    payload = _body(response)
    assert payload["type"] == "product-not-found"
    assert payload["detail"] == f"Product not found with id={product_id}"


async def test_unique_constraint_error_handler() -> None:
    response = await unique_constraint_error_handler(
        _build_request(), UniqueConstraintError("Key (email)=(a@b.c) already exists.")
    )

    assert response.status_code == 409
    assert _body(response)["type"] == "unique-constraint"
    assert _body(response)["detail"].startswith("resource must be unique")


@pytest.mark.parametrize(
    ("exc", "expected_type"),
    [
        (InvalidPaginationTokenError("malformed base64"), "invalid-page-token"),
        (InvalidFilterError("Cannot filter Product by 'price'", filter_name="price"), "invalid-filter"),
    ],
)
async def test_bad_request_error_handler(exc: Exception, expected_type: str) -> None:
    response = await bad_request_error_handler(_build_request("/products"), exc)

    assert response.status_code == 400
    payload = _body(response)
    assert payload["type"] == expected_type
    assert payload["title"] == "Bad Request"


async def test_validation_exception_handler_formats_errors() -> None:
    """Validation errors include field-level details."""
    exc = RequestValidationError(
        [
            {"loc": ("body", "price"), "msg": "Input should be greater than 0", "type": "greater_than"},
        ],
    )

    response = await validation_exception_handler(_build_request("/products"), exc)

    assert response.status_code == 422
    payload = _body(response)
    assert payload["type"] == "validation-error"
    assert payload["errors"] == [
        {"field": "body.price", "message": "Input should be greater than 0", "type": "greater_than"}
    ]


async def test_generic_exception_handler_hides_details() -> None:
    """Unhandled exceptions return 500 without leaking the message."""
    response = await generic_exception_handler(_build_request("/boom"), RuntimeError("secret"))

    assert response.status_code == 500
    payload = _body(response)
    assert payload["type"] == "internal-error"
    assert "secret" not in payload["detail"]


def test_configure_exception_handlers_registers_handlers() -> None:
    """Smoke test to ensure handlers are wired on a FastAPI app."""
    app = FastAPI()
    configure_exception_handlers(app)

    @app.get("/app-exc")
    def raise_app_exc() -> None:
        raise AppException(status_code=418, detail="teapot")

    @app.get("/missing")
    def raise_not_found() -> None:
        raise NotFoundError("Product", {"id": 1})

    @app.get("/token")
    def raise_token() -> None:
        raise InvalidPaginationTokenError()

    client = TestClient(app)
    assert client.get("/app-exc").status_code == 418
    assert client.get("/missing").status_code == 404
    resp = client.get("/token")
    assert resp.status_code == 400
    assert resp.headers["content-type"].startswith(PROBLEM_JSON)
