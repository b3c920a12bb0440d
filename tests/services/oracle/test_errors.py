"""Tests for oracle failure classification."""

from __future__ import annotations

import asyncio
import logging

import httpx
import pytest

from cosmic_clash.services.oracle.errors import (
    ERROR_MESSAGES,
    ClassifiedError,
    EmptyResponseError,
    ErrorKind,
    MalformedResponseError,
    classify_error,
)


class AbortError(Exception):
    """Stand-in for an aborted request."""


class TestClassifyError:
    """Each failure lands in exactly one kind, in priority order."""

    @pytest.mark.parametrize(
        "exc",
        [
            TimeoutError(),
            asyncio.CancelledError(),
            httpx.ReadTimeout("read timed out"),
            AbortError("signal"),
            RuntimeError("The operation was aborted"),
            RuntimeError("504 DEADLINE_EXCEEDED"),
        ],
    )
    def test_timeouts(self, exc: BaseException) -> None:
        assert classify_error(exc, "fetching tier for X").kind is ErrorKind.TIMEOUT

    @pytest.mark.parametrize(
        "context", ["fetching tier for Goku", "analyzing the contest between A and B"]
    )
    def test_resource_exhausted_is_rate_limited_regardless_of_context(
        self, context: str
    ) -> None:
        error = classify_error(RuntimeError("RESOURCE_EXHAUSTED: quota"), context)
        assert error.kind is ErrorKind.RATE_LIMITED
        assert error.message == ERROR_MESSAGES[ErrorKind.RATE_LIMITED]

    def test_http_429_is_rate_limited(self) -> None:
        error = classify_error(RuntimeError("429 Too Many Requests"), "x")
        assert error.kind is ErrorKind.RATE_LIMITED

    @pytest.mark.parametrize(
        "text", ["400 API key not valid. Please pass a valid API key.", "API_KEY_INVALID"]
    )
    def test_invalid_credentials(self, text: str) -> None:
        assert classify_error(RuntimeError(text), "x").kind is ErrorKind.AUTH_INVALID

    @pytest.mark.parametrize(
        "exc",
        [
            httpx.ConnectError("connection refused"),
            ConnectionResetError("peer reset"),
            RuntimeError("TypeError: Failed to fetch"),
        ],
    )
    def test_network_errors(self, exc: Exception) -> None:
        assert classify_error(exc, "x").kind is ErrorKind.NETWORK_ERROR

    def test_safety_block(self) -> None:
        error = classify_error(RuntimeError("Candidate blocked: SAFETY"), "x")
        assert error.kind is ErrorKind.SAFETY_BLOCKED
        assert error.message == "The prompt was blocked due to safety settings."

    def test_malformed_response(self) -> None:
        error = classify_error(MalformedResponseError(raw_text="nope"), "x")
        assert error.kind is ErrorKind.MALFORMED_RESPONSE

    def test_invalid_response_format_text_is_malformed(self) -> None:
        error = classify_error(ValueError("invalid response format"), "x")
        assert error.kind is ErrorKind.MALFORMED_RESPONSE

    def test_unknown_uses_context(self) -> None:
        error = classify_error(KeyError("boom"), "fetching tier for Goku")
        assert error.kind is ErrorKind.UNKNOWN
        assert error.message == (
            "An unexpected error occurred while fetching tier for Goku. Please try again."
        )

    def test_empty_response_is_unknown(self) -> None:
        error = classify_error(EmptyResponseError(), "fetching lore for Goku")
        assert error.kind is ErrorKind.UNKNOWN

    def test_rate_limit_wins_over_later_kinds(self) -> None:
        error = classify_error(RuntimeError("429 SAFETY invalid response format"), "x")
        assert error.kind is ErrorKind.RATE_LIMITED

    def test_timeout_wins_over_rate_limit(self) -> None:
        error = classify_error(TimeoutError("429"), "x")
        assert error.kind is ErrorKind.TIMEOUT

    def test_raw_text_never_reaches_message(self) -> None:
        secret = "internal stack detail 0xDEADBEEF"
        for exc in (RuntimeError(secret), MalformedResponseError(raw_text=secret)):
            assert secret not in classify_error(exc, "x").message

    def test_logs_context_and_raw_failure(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.ERROR):
            classify_error(RuntimeError("socket closed"), "fetching tier for Goku")
        assert "fetching tier for Goku" in caplog.text
        assert "socket closed" in caplog.text

    def test_empty_and_malformed_log_distinct_lines(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.ERROR):
            classify_error(EmptyResponseError(), "ctx")
            classify_error(MalformedResponseError(), "ctx")
        messages = [r.getMessage() for r in caplog.records]
        assert any("Empty oracle response" in m for m in messages)
        assert any("Unparsable oracle response" in m for m in messages)

    def test_to_dict(self) -> None:
        error = ClassifiedError(kind=ErrorKind.TIMEOUT, message="m")
        assert error.to_dict() == {"kind": "Timeout", "message": "m"}
