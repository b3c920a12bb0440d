"""Oracle failure taxonomy.

Two layers live here:

* Exceptions raised while turning oracle text into records
  (``EmptyResponseError`` and ``MalformedResponseError``). They are kept
  distinct so logs can tell an empty generation (often a silent safety
  filter) apart from text that simply would not parse.
* ``classify_error`` which maps *any* raw failure raised by an oracle call
  or by the normalizer to a ``ClassifiedError``: one ``ErrorKind`` plus a
  fixed, user-readable message. Only ``classify_error`` builds
  ``ClassifiedError`` values; raw diagnostic text goes to the log and never
  into the message.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum

import httpx


logger = logging.getLogger(__name__)


@dataclass(slots=True, eq=False)
class OracleResponseError(Exception):
    """Base class for failures while reading an oracle reply."""

    message: str
    error_code: str

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.error_code}: {self.message}"


class EmptyResponseError(OracleResponseError):
    def __init__(
        self,
        message: str = (
            "The AI returned an empty response. This could be due to safety "
            "filters or a content generation issue."
        ),
    ) -> None:
        super().__init__(message=message, error_code="empty_response")


class MalformedResponseError(OracleResponseError):
    def __init__(
        self,
        message: str = (
            "The AI returned an invalid response format that could not be parsed."
        ),
        raw_text: str | None = None,
    ) -> None:
        super().__init__(message=message, error_code="malformed_response")
        self.raw_text = raw_text


class ErrorKind(str, Enum):
    TIMEOUT = "Timeout"
    RATE_LIMITED = "RateLimited"
    AUTH_INVALID = "AuthInvalid"
    NETWORK_ERROR = "NetworkError"
    SAFETY_BLOCKED = "SafetyBlocked"
    MALFORMED_RESPONSE = "MalformedResponse"
    UNKNOWN = "Unknown"


ERROR_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.TIMEOUT: (
        "The request to the AI timed out. This can happen with complex matchups "
        "or network issues. Please try again."
    ),
    ErrorKind.RATE_LIMITED: (
        "The simulator is experiencing high traffic. Please try again after a "
        "short wait."
    ),
    ErrorKind.AUTH_INVALID: (
        "The provided API Key is invalid. Please check your configuration."
    ),
    ErrorKind.NETWORK_ERROR: (
        "A network error occurred. Please check your internet connection and "
        "try again."
    ),
    ErrorKind.SAFETY_BLOCKED: "The prompt was blocked due to safety settings.",
    ErrorKind.MALFORMED_RESPONSE: (
        "The AI's analysis was malformed. This can be a temporary issue. "
        "Please try again."
    ),
    ErrorKind.UNKNOWN: (
        "An unexpected error occurred while {context}. Please try again."
    ),
}


@dataclass(frozen=True, slots=True)
class ClassifiedError:
    """A failure reduced to a kind and a message safe to show a user."""

    kind: ErrorKind
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind.value, "message": self.message}


_TIMEOUT_MARKERS = ("The operation was aborted", "timed out", "DEADLINE_EXCEEDED")
_RATE_LIMIT_MARKERS = ("429", "RESOURCE_EXHAUSTED")
_AUTH_MARKERS = ("API key not valid", "API_KEY_INVALID")


def _signal_text(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


def _is_timeout(exc: BaseException, text: str) -> bool:
    if isinstance(exc, TimeoutError | asyncio.CancelledError | httpx.TimeoutException):
        return True
    name = exc.__class__.__name__
    if "Abort" in name or "Timeout" in name:
        return True
    return any(marker in text for marker in _TIMEOUT_MARKERS)


def _is_network(exc: BaseException, text: str) -> bool:
    if isinstance(exc, httpx.TransportError | ConnectionError):
        return True
    return "failed to fetch" in text.lower()


def _is_malformed(exc: BaseException, text: str) -> bool:
    return isinstance(exc, MalformedResponseError) or "invalid response format" in text


def _kind_for(exc: BaseException) -> ErrorKind:
    text = _signal_text(exc)
    if _is_timeout(exc, text):
        return ErrorKind.TIMEOUT
    if any(marker in text for marker in _RATE_LIMIT_MARKERS):
        return ErrorKind.RATE_LIMITED
    if any(marker in text for marker in _AUTH_MARKERS):
        return ErrorKind.AUTH_INVALID
    if _is_network(exc, text):
        return ErrorKind.NETWORK_ERROR
    if "SAFETY" in text:
        return ErrorKind.SAFETY_BLOCKED
    if _is_malformed(exc, text):
        return ErrorKind.MALFORMED_RESPONSE
    return ErrorKind.UNKNOWN


def classify_error(exc: BaseException, context: str) -> ClassifiedError:
    """Map a raw oracle failure to a ``ClassifiedError``.

    Args:
        exc: The exception raised by the oracle call or the normalizer.
        context: Short phrase naming the operation, e.g.
            ``"fetching tier for Goku"``. Only ``Unknown`` uses it.

    Returns:
        The first matching kind in priority order: timeout, rate limit,
        invalid credentials, transport, safety block, malformed response,
        unknown.
    """
    kind = _kind_for(exc)
    if isinstance(exc, EmptyResponseError):
        logger.error(
            f"Empty oracle response during {context} (possible safety block): {exc}"
        )
    elif isinstance(exc, MalformedResponseError):
        logger.error(f"Unparsable oracle response during {context}: {exc}")
    else:
        logger.error(f"Error during {context}: {exc!r}")
    logger.debug(f"Classified failure during {context} as {kind.value}")

    message = ERROR_MESSAGES[kind]
    if kind is ErrorKind.UNKNOWN:
        message = message.format(context=context)
    return ClassifiedError(kind=kind, message=message)
