"""Unit tests for the error hierarchy and FastAPI exception handlers."""

from __future__ import annotations

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from iconfetch.middleware.error_handler import (
    CacheDirectoryError,
    ConversionError,
    EmptyResponseError,
    FetchError,
    IconFetchError,
    InvalidRequestError,
    register_error_handlers,
)


# ---------------------------------------------------------------------------
# Test app fixture
# ---------------------------------------------------------------------------


def _make_app() -> FastAPI:
    """Build a minimal FastAPI app with error handlers registered."""
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/raise-base")
    async def _raise_base():
        raise IconFetchError()

    @app.get("/raise-invalid")
    async def _raise_invalid():
        raise InvalidRequestError()

    @app.get("/raise-fetch")
    async def _raise_fetch():
        raise FetchError("Failed to fetch http://x", url="http://x", attempts=3)

    @app.get("/raise-cache-dir")
    async def _raise_cache_dir():
        raise CacheDirectoryError(path="/nope")

    @app.get("/raise-unhandled")
    async def _raise_unhandled():
        raise RuntimeError("something unexpected")

    @app.get("/typed")
    async def _typed(count: int):
        return {"count": count}

    return app


@pytest.fixture()
def client():
    return TestClient(_make_app(), raise_server_exceptions=False)


# ---------------------------------------------------------------------------
# Error hierarchy tests
# ---------------------------------------------------------------------------


class TestErrorHierarchy:
    """All custom errors are subclasses of IconFetchError."""

    def test_all_subclass_base(self):
        for cls in (InvalidRequestError, FetchError, EmptyResponseError, ConversionError, CacheDirectoryError):
            assert issubclass(cls, IconFetchError)

    @pytest.mark.parametrize(
        "cls, status",
        [
            (IconFetchError, 500),
            (InvalidRequestError, 400),
            (FetchError, 502),
            (EmptyResponseError, 502),
            (ConversionError, 422),
            (CacheDirectoryError, 500),
        ],
    )
    def test_status_codes(self, cls, status):
        assert cls.status_code == status

    def test_default_message(self):
        assert str(ConversionError()) == "Image conversion failed"

    def test_custom_message_and_details(self):
        err = EmptyResponseError("empty!", url="http://x")
        assert err.message == "empty!"
        assert err.details == {"url": "http://x"}

    def test_fetch_error_last_error(self):
        cause = httpx.ConnectError("refused")
        assert FetchError(last_error=cause).last_error is cause
        assert FetchError().last_error is None


# ---------------------------------------------------------------------------
# Handler tests
# ---------------------------------------------------------------------------


class TestHandlers:
    """Errors become the JSON envelope."""

    def test_base_error(self, client):
        response = client.get("/raise-base")
        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "data": None,
            "error": "Internal server error",
            "meta": None,
        }

    def test_invalid_request(self, client):
        response = client.get("/raise-invalid")
        assert response.status_code == 400
        assert response.json()["error"] == "URL parameter is required"

    def test_details_in_meta(self, client):
        response = client.get("/raise-fetch")
        assert response.status_code == 502
        assert response.json()["meta"] == {"url": "http://x", "attempts": "3"}

    def test_cache_directory(self, client):
        response = client.get("/raise-cache-dir")
        assert response.status_code == 500
        assert response.json()["meta"] == {"path": "/nope"}

    def test_validation_error(self, client):
        response = client.get("/typed", params={"count": "many"})
        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "Validation error"
        assert body["meta"]["fields"][0]["field"] == "query -> count"

    def test_unhandled_error(self, client):
        response = client.get("/raise-unhandled")
        assert response.status_code == 500
        assert response.json()["error"] == "Internal server error"
        assert "unexpected" not in response.text
