"""Tests for structured logging and the global exception handler."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from unittest.mock import patch

import pytest
from fastapi import FastAPI, HTTPException, status
from fastapi.exceptions import RequestValidationError
from fastapi.testclient import TestClient
from pydantic import BaseModel, Field
from sqlalchemy.exc import OperationalError

from cosmic_clash.core.error_handler import (
    CorrelationIdMiddleware,
    ExceptionNormalizationMiddleware,
    StructuredLogger,
    global_exception_handler,
    set_correlation_id,
)
from cosmic_clash.core.exceptions import ContestRejectedError


ClientFactory = Callable[[str], TestClient]


class Item(BaseModel):
    name: str = Field(min_length=3)


def build_test_app() -> TestClient:
    app = FastAPI()
    app.add_middleware(ExceptionNormalizationMiddleware)
    app.add_middleware(CorrelationIdMiddleware)
    app.add_exception_handler(Exception, global_exception_handler)
    app.add_exception_handler(HTTPException, global_exception_handler)
    app.add_exception_handler(RequestValidationError, global_exception_handler)

    @app.post("/items")
    async def create_item(item: Item):  # pragma: no cover - executed via client
        return {"ok": True}

    @app.get("/domain")
    async def domain():
        raise ContestRejectedError("A contest is already running.")

    @app.get("/storage")
    async def storage():
        raise OperationalError("SELECT 1", {}, Exception("disk I/O error"))

    @app.get("/boom")
    async def boom():
        raise RuntimeError("Exploded with api_key=should_not_leak")

    @app.get("/missing")
    async def missing():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Nope")

    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def make_client() -> Iterator[ClientFactory]:
    """Build the test app with ``ENVIRONMENT`` patched for the error handler."""
    with patch("cosmic_clash.core.error_handler.get_settings") as mocked:

        def factory(env: str) -> TestClient:
            mocked.return_value.ENVIRONMENT = env
            return build_test_app()

        yield factory


class TestGlobalExceptionHandler:
    def test_validation_error_production(self, make_client: ClientFactory) -> None:
        client = make_client("production")
        resp = client.post("/items", json={"name": "ab"})
        assert resp.status_code == 422
        data = resp.json()
        assert data["error"]["type"] == "validation_error"
        assert "validation_errors" not in data["error"]

    def test_validation_error_development(self, make_client: ClientFactory) -> None:
        client = make_client("development")
        resp = client.post("/items", json={"name": "ab"})
        assert resp.status_code == 422
        assert "validation_errors" in resp.json()["error"]

    def test_domain_error_is_conflict(self, make_client: ClientFactory) -> None:
        client = make_client("production")
        resp = client.get("/domain")
        assert resp.status_code == 409
        data = resp.json()
        assert data["error"]["type"] == "domain_error"
        assert data["message"] == "A contest is already running."

    def test_storage_error(self, make_client: ClientFactory) -> None:
        client = make_client("production")
        resp = client.get("/storage")
        assert resp.status_code == 500
        data = resp.json()
        assert data["error"]["type"] == "storage_error"
        assert data["message"] == "A storage error occurred"

    def test_generic_exception_production_hides_details(
        self, make_client: ClientFactory
    ) -> None:
        client = make_client("production")
        resp = client.get("/boom")
        assert resp.status_code == 500
        data = resp.json()
        assert data["error"]["type"] == "internal_server_error"
        assert "traceback" not in data["error"]
        assert "should_not_leak" not in resp.text

    def test_generic_exception_development_has_traceback(
        self, make_client: ClientFactory
    ) -> None:
        client = make_client("development")
        resp = client.get("/boom")
        data = resp.json()
        assert data["error"]["exception_type"] == "RuntimeError"
        assert "traceback" in data["error"]

    def test_http_error_keeps_client_message(self, make_client: ClientFactory) -> None:
        client = make_client("production")
        resp = client.get("/missing")
        assert resp.status_code == 404
        data = resp.json()
        assert data["message"] == "Nope"
        assert data["error"]["type"] == "http_error"
        assert "details" not in data["error"]

    def test_correlation_id_in_body_and_header(self, make_client: ClientFactory) -> None:
        client = make_client("production")
        resp = client.get("/domain", headers={"X-Correlation-ID": "corr-1"})
        assert resp.headers["X-Correlation-ID"] == "corr-1"
        assert resp.json()["error"]["correlation_id"] == "corr-1"


class TestStructuredLogger:
    def test_redacts_credentials(self, caplog: pytest.LogCaptureFixture) -> None:
        set_correlation_id("log-1")
        logger = StructuredLogger("cosmic_clash.tests")

        with caplog.at_level(logging.INFO, logger="cosmic_clash.tests"):
            logger.info("Calling oracle", api_key="secret-value", model="gemini")

        record = caplog.records[-1]
        data = record.structured_data  # type: ignore[attr-defined]
        assert data["api_key"] == "[REDACTED]"
        assert data["model"] == "gemini"
        assert data["correlation_id"] == "log-1"
        assert "[log-1]" in record.getMessage()

    def test_truncates_artwork_and_sanitizes_nested(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        logger = StructuredLogger("cosmic_clash.tests")
        image = "data:image/jpeg;base64," + "A" * 500

        with caplog.at_level(logging.INFO, logger="cosmic_clash.tests"):
            logger.info(
                "Image ready",
                image=image,
                request={"headers": [{"authorization": "Bearer x"}]},
            )

        data = caplog.records[-1].structured_data  # type: ignore[attr-defined]
        assert data["image"].endswith(f"... ({len(image)} chars)")
        assert len(data["image"]) < 100
        assert data["request"]["headers"][0]["authorization"] == "[REDACTED]"
