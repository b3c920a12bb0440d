"""Per-slot debounced classification.

Each of the two slots owns a name, an optional classification and an
optional classified error. Typing restarts a debounce timer; when it fires
the oracle is asked to classify the name captured at that moment. Results
are applied only while the slot still holds that same name, so a response
for an outdated name can never overwrite state belonging to a newer one.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass

from cosmic_clash.core.exceptions import SlotNotFoundError
from cosmic_clash.schemas.oracle import Classification
from cosmic_clash.services.oracle.errors import ClassifiedError, classify_error
from cosmic_clash.services.oracle.interfaces import OracleProtocol


logger = logging.getLogger(__name__)

SLOT_IDS: tuple[int, int] = (1, 2)

EMPTY_NAME_MESSAGE = "Challenger name cannot be empty."
SHORT_NAME_MESSAGE = "Name must be at least 2 characters."


@dataclass
class Slot:
    slot_id: int
    name: str = ""
    validation_error: str | None = None
    classification: Classification | None = None
    classification_error: ClassifiedError | None = None
    is_classifying: bool = False


def validate_name(name: str) -> str | None:
    """Return the validation message for ``name``, or None when acceptable."""
    trimmed = name.strip()
    if not trimmed:
        return EMPTY_NAME_MESSAGE
    if len(trimmed) < 2:
        return SHORT_NAME_MESSAGE
    return None


class SlotClassifier:
    """Owns both slots and their debounce, auto-clear and request lifecycles."""

    def __init__(
        self,
        oracle: OracleProtocol,
        *,
        debounce_seconds: float = 0.75,
        error_ttl_seconds: float = 7.0,
        on_invalidate: Callable[[int], None] | None = None,
    ) -> None:
        self._oracle = oracle
        self._debounce_seconds = debounce_seconds
        self._error_ttl_seconds = error_ttl_seconds
        self._on_invalidate = on_invalidate
        self._slots: dict[int, Slot] = {sid: Slot(slot_id=sid) for sid in SLOT_IDS}
        self._debounce: dict[int, asyncio.TimerHandle] = {}
        self._error_expiry: dict[int, asyncio.TimerHandle] = {}
        self._tasks: set[asyncio.Task[None]] = set()

    def slot(self, slot_id: int) -> Slot:
        try:
            return self._slots[slot_id]
        except KeyError:
            raise SlotNotFoundError(f"Unknown slot {slot_id}; expected 1 or 2") from None

    @property
    def slots(self) -> tuple[Slot, Slot]:
        return self._slots[1], self._slots[2]

    def on_name_change(self, slot_id: int, raw_value: str) -> None:
        """Record an edit and (re)schedule classification for the slot."""
        slot = self.slot(slot_id)
        slot.name = raw_value
        slot.classification = None
        slot.classification_error = None
        self._cancel_error_expiry(slot_id)
        self._invalidate(slot_id)

        if slot.validation_error:
            slot.validation_error = validate_name(raw_value)

        self._cancel_debounce(slot_id)
        if len(raw_value.strip()) > 1:
            loop = asyncio.get_running_loop()
            self._debounce[slot_id] = loop.call_later(
                self._debounce_seconds, self._fire, slot_id
            )
        else:
            slot.is_classifying = False

    def clear(self, slot_id: int) -> None:
        """Empty the slot and drop everything that depended on it."""
        slot = self.slot(slot_id)
        self._cancel_debounce(slot_id)
        self._cancel_error_expiry(slot_id)
        slot.name = ""
        slot.validation_error = None
        slot.classification = None
        slot.classification_error = None
        slot.is_classifying = False
        self._invalidate(slot_id)

    def validate(self, slot_id: int) -> bool:
        slot = self.slot(slot_id)
        slot.validation_error = validate_name(slot.name)
        return slot.validation_error is None

    def cancel_all(self) -> None:
        """Cancel every timer and in-flight request. Teardown only."""
        for slot_id in SLOT_IDS:
            self._cancel_debounce(slot_id)
            self._cancel_error_expiry(slot_id)
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()

    async def wait(self) -> None:
        """Await classification requests currently in flight."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _invalidate(self, slot_id: int) -> None:
        if self._on_invalidate is not None:
            self._on_invalidate(slot_id)

    def _cancel_debounce(self, slot_id: int) -> None:
        handle = self._debounce.pop(slot_id, None)
        if handle is not None:
            handle.cancel()

    def _cancel_error_expiry(self, slot_id: int) -> None:
        handle = self._error_expiry.pop(slot_id, None)
        if handle is not None:
            handle.cancel()

    def _fire(self, slot_id: int) -> None:
        self._debounce.pop(slot_id, None)
        slot = self._slots[slot_id]
        captured = slot.name
        slot.is_classifying = True
        slot.classification = None
        slot.classification_error = None

        task = asyncio.create_task(self._classify(slot_id, captured))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _classify(self, slot_id: int, captured: str) -> None:
        slot = self._slots[slot_id]
        try:
            classification = await self._oracle.classify_entity(captured.strip())
        except Exception as e:
            if slot.name != captured:
                logger.debug(f"Discarding failed classification for stale name '{captured}'")
                return
            error = classify_error(e, f"fetching tier for {captured}")
            slot.classification_error = error
            slot.is_classifying = False
            self._schedule_error_expiry(slot_id, error)
            return

        if slot.name != captured:
            logger.debug(f"Discarding classification for stale name '{captured}'")
            return
        slot.classification = classification
        slot.is_classifying = False

    def _schedule_error_expiry(self, slot_id: int, error: ClassifiedError) -> None:
        self._cancel_error_expiry(slot_id)
        loop = asyncio.get_running_loop()
        self._error_expiry[slot_id] = loop.call_later(
            self._error_ttl_seconds, self._expire_error, slot_id, error
        )

    def _expire_error(self, slot_id: int, error: ClassifiedError) -> None:
        self._error_expiry.pop(slot_id, None)
        slot = self._slots[slot_id]
        if slot.classification_error is error:
            slot.classification_error = None
