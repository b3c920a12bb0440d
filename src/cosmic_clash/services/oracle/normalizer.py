"""Extract structured records from free-form oracle text.

The oracle is asked for "only raw JSON" but routinely wraps it in markdown
fences or conversational prose. ``extract`` tries, in order:

1. the inner content of the first fenced block (```json ... ``` or ``` ... ```)
2. the substring between the first ``{`` and the last ``}``

and returns the first candidate that parses. ``parse`` additionally checks
the record against a pydantic model so incomplete records are rejected as a
whole instead of being partially consumed.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from cosmic_clash.services.oracle.errors import (
    EmptyResponseError,
    MalformedResponseError,
)


logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_FENCE_RE = re.compile(r"```(json)?([\s\S]*?)```")


def _from_fence(text: str) -> Any | None:
    match = _FENCE_RE.search(text)
    if not match or not match.group(2):
        return None
    candidate = match.group(2).strip()
    try:
        return json.loads(candidate)
    except json.JSONDecodeError:
        logger.warning("Failed to parse JSON from fenced block, trying raw braces")
        return None


def _from_braces(text: str) -> Any | None:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end <= start:
        return None
    candidate = text[start : end + 1].strip()
    try:
        return json.loads(candidate)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse extracted JSON object: {e}")
        return None


def extract(raw_text: str | None) -> Any:
    """Return the first JSON value recoverable from ``raw_text``.

    Raises:
        EmptyResponseError: ``raw_text`` is missing or blank.
        MalformedResponseError: no extraction strategy produced valid JSON.
            The original text is attached as ``raw_text``.
    """
    if raw_text is None or not raw_text.strip():
        logger.error(
            "Oracle response text is empty. This might be due to a blocked "
            "response for safety reasons."
        )
        raise EmptyResponseError()

    for strategy in (_from_fence, _from_braces):
        record = strategy(raw_text)
        if record is not None:
            return record

    logger.error("Failed to parse JSON from oracle response; no extraction worked")
    logger.debug(f"Raw oracle response text: {raw_text}")
    raise MalformedResponseError(raw_text=raw_text)


def parse(raw_text: str | None, model: type[ModelT]) -> ModelT:
    """Extract a record and validate it against ``model``.

    A record that parses but misses required fields (or carries values of
    the wrong shape) is a ``MalformedResponseError`` just like unparsable
    text.
    """
    record = extract(raw_text)
    if not isinstance(record, dict):
        raise MalformedResponseError(
            message=(
                "The AI returned an invalid response format: expected an object, "
                f"got {type(record).__name__}."
            ),
            raw_text=raw_text,
        )
    try:
        return model.model_validate(record)
    except ValidationError as e:
        missing = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
        logger.error(f"Incomplete {model.__name__} from oracle; problems at {missing}")
        raise MalformedResponseError(
            message=(
                f"The AI returned an invalid response format for {model.__name__}."
            ),
            raw_text=raw_text,
        ) from e
