"""Tests for debounced per-slot classification."""

import asyncio
from collections.abc import AsyncGenerator
from unittest.mock import MagicMock

import pytest
import pytest_asyncio

from cosmic_clash.core.exceptions import SlotNotFoundError
from cosmic_clash.schemas.oracle import Classification
from cosmic_clash.services.oracle.errors import ErrorKind
from cosmic_clash.services.slot_classifier import (
    EMPTY_NAME_MESSAGE,
    SHORT_NAME_MESSAGE,
    SlotClassifier,
    validate_name,
)
from factories import FakeOracle, make_classification


DEBOUNCE = 0.01
ERROR_TTL = 0.05


@pytest_asyncio.fixture
async def classifier(oracle: FakeOracle) -> AsyncGenerator[SlotClassifier, None]:
    classifier = SlotClassifier(
        oracle,  # type: ignore[arg-type]
        debounce_seconds=DEBOUNCE,
        error_ttl_seconds=ERROR_TTL,
    )
    yield classifier
    classifier.cancel_all()


async def settle(classifier: SlotClassifier) -> None:
    """Let the debounce fire, then wait for the request it started."""
    await asyncio.sleep(DEBOUNCE * 3)
    await classifier.wait()


async def settle_slot(classifier: SlotClassifier, slot_id: int) -> None:
    """Wait for the slot's current request only, ignoring stale ones still blocked."""
    await asyncio.sleep(DEBOUNCE * 3)
    async with asyncio.timeout(1):
        while classifier.slot(slot_id).is_classifying:
            await asyncio.sleep(DEBOUNCE)


class TestValidateName:
    @pytest.mark.parametrize("name", ["", "   "])
    def test_empty(self, name: str) -> None:
        assert validate_name(name) == EMPTY_NAME_MESSAGE

    def test_single_character(self) -> None:
        assert validate_name(" a ") == SHORT_NAME_MESSAGE

    def test_acceptable(self) -> None:
        assert validate_name("Goku") is None


class TestDebounce:
    @pytest.mark.asyncio
    async def test_rapid_edits_send_one_request_for_final_value(
        self, classifier: SlotClassifier, oracle: FakeOracle
    ) -> None:
        for partial in ("Go", "Gok", "Goku"):
            classifier.on_name_change(1, partial)
        await settle(classifier)

        oracle.classify_entity.assert_awaited_once_with("Goku")
        slot = classifier.slot(1)
        assert isinstance(slot.classification, Classification)
        assert slot.is_classifying is False

    @pytest.mark.asyncio
    async def test_oracle_receives_trimmed_name(
        self, classifier: SlotClassifier, oracle: FakeOracle
    ) -> None:
        classifier.on_name_change(2, "  Superman ")
        await settle(classifier)

        oracle.classify_entity.assert_awaited_once_with("Superman")
        assert classifier.slot(2).classification is not None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["", "a", "  b  "])
    async def test_short_names_are_never_classified(
        self, classifier: SlotClassifier, oracle: FakeOracle, name: str
    ) -> None:
        classifier.on_name_change(1, name)
        await settle(classifier)

        oracle.classify_entity.assert_not_awaited()
        assert classifier.slot(1).is_classifying is False

    @pytest.mark.asyncio
    async def test_edit_clears_previous_classification(
        self, classifier: SlotClassifier
    ) -> None:
        classifier.on_name_change(1, "Goku")
        await settle(classifier)
        assert classifier.slot(1).classification is not None

        classifier.on_name_change(1, "Vegeta")
        assert classifier.slot(1).classification is None

    @pytest.mark.asyncio
    async def test_slots_are_independent(
        self, classifier: SlotClassifier, oracle: FakeOracle
    ) -> None:
        classifier.on_name_change(1, "Goku")
        classifier.on_name_change(2, "Superman")
        await settle(classifier)

        assert oracle.classify_entity.await_count == 2
        assert all(slot.classification is not None for slot in classifier.slots)


class TestStaleResponses:
    @pytest.mark.asyncio
    async def test_stale_success_is_discarded(
        self, classifier: SlotClassifier, oracle: FakeOracle
    ) -> None:
        release = asyncio.Event()
        late = make_classification(3.0)
        fresh = make_classification(9.0)

        async def classify(name: str) -> Classification:
            if name == "Goku":
                await release.wait()
                return late
            return fresh

        oracle.classify_entity.side_effect = classify
        classifier.on_name_change(1, "Goku")
        await asyncio.sleep(DEBOUNCE * 3)
        assert classifier.slot(1).is_classifying is True

        classifier.on_name_change(1, "Krillin")
        await settle_slot(classifier, 1)
        assert classifier.slot(1).classification is fresh

        release.set()
        await classifier.wait()
        assert classifier.slot(1).classification is fresh
        assert classifier.slot(1).name == "Krillin"

    @pytest.mark.asyncio
    async def test_stale_failure_is_discarded(
        self, classifier: SlotClassifier, oracle: FakeOracle
    ) -> None:
        release = asyncio.Event()

        async def classify(name: str) -> Classification:
            if name == "Goku":
                await release.wait()
                raise RuntimeError("429 Too Many Requests")
            return make_classification()

        oracle.classify_entity.side_effect = classify
        classifier.on_name_change(1, "Goku")
        await asyncio.sleep(DEBOUNCE * 3)
        classifier.on_name_change(1, "Gohan")
        await settle_slot(classifier, 1)

        release.set()
        await classifier.wait()
        slot = classifier.slot(1)
        assert slot.classification_error is None
        assert slot.classification is not None


class TestClassificationErrors:
    @pytest.mark.asyncio
    async def test_failure_is_classified_then_auto_clears(
        self, classifier: SlotClassifier, oracle: FakeOracle
    ) -> None:
        oracle.classify_entity.side_effect = RuntimeError("API key not valid")
        classifier.on_name_change(1, "Goku")
        await settle(classifier)

        slot = classifier.slot(1)
        assert slot.classification_error is not None
        assert slot.classification_error.kind is ErrorKind.AUTH_INVALID
        assert slot.is_classifying is False

        await asyncio.sleep(ERROR_TTL * 3)
        assert slot.classification_error is None

    @pytest.mark.asyncio
    async def test_newer_error_survives_older_expiry(
        self, oracle: FakeOracle
    ) -> None:
        classifier = SlotClassifier(
            oracle,  # type: ignore[arg-type]
            debounce_seconds=DEBOUNCE,
            error_ttl_seconds=0.2,
        )
        try:
            oracle.classify_entity.side_effect = RuntimeError("429")
            classifier.on_name_change(1, "Goku")
            await settle(classifier)
            first = classifier.slot(1).classification_error
            assert first is not None

            # Stand-in for a newer failure that replaced the first one.
            replacement = MagicMock()
            classifier.slot(1).classification_error = replacement
            classifier._expire_error(1, first)

            assert classifier.slot(1).classification_error is replacement
        finally:
            classifier.cancel_all()

    @pytest.mark.asyncio
    async def test_edit_clears_error_immediately(
        self, classifier: SlotClassifier, oracle: FakeOracle
    ) -> None:
        oracle.classify_entity.side_effect = RuntimeError("network error")
        classifier.on_name_change(1, "Goku")
        await settle(classifier)
        assert classifier.slot(1).classification_error is not None

        classifier.on_name_change(1, "Goku!")
        assert classifier.slot(1).classification_error is None


class TestClearAndValidate:
    @pytest.mark.asyncio
    async def test_clear_cancels_pending_debounce(
        self, classifier: SlotClassifier, oracle: FakeOracle
    ) -> None:
        classifier.on_name_change(1, "Goku")
        classifier.clear(1)
        await settle(classifier)

        oracle.classify_entity.assert_not_awaited()
        slot = classifier.slot(1)
        assert slot.name == ""
        assert slot.classification is None
        assert slot.validation_error is None

    @pytest.mark.asyncio
    async def test_validation_error_is_revalidated_while_shown(
        self, classifier: SlotClassifier
    ) -> None:
        assert classifier.validate(1) is False
        assert classifier.slot(1).validation_error == EMPTY_NAME_MESSAGE

        classifier.on_name_change(1, "G")
        assert classifier.slot(1).validation_error == SHORT_NAME_MESSAGE
        classifier.on_name_change(1, "Goku")
        assert classifier.slot(1).validation_error is None

    @pytest.mark.asyncio
    async def test_validation_error_not_shown_until_requested(
        self, classifier: SlotClassifier
    ) -> None:
        classifier.on_name_change(1, "G")
        assert classifier.slot(1).validation_error is None

    @pytest.mark.asyncio
    async def test_unknown_slot_raises(self, classifier: SlotClassifier) -> None:
        with pytest.raises(SlotNotFoundError):
            classifier.slot(3)

    @pytest.mark.asyncio
    async def test_invalidate_callback_runs_on_edit_and_clear(
        self, oracle: FakeOracle
    ) -> None:
        invalidated: list[int] = []
        classifier = SlotClassifier(
            oracle,  # type: ignore[arg-type]
            debounce_seconds=DEBOUNCE,
            on_invalidate=invalidated.append,
        )
        try:
            classifier.on_name_change(2, "Goku")
            classifier.clear(1)
        finally:
            classifier.cancel_all()

        assert invalidated == [2, 1]


class TestCancelAll:
    @pytest.mark.asyncio
    async def test_no_timer_fires_after_teardown(
        self, classifier: SlotClassifier, oracle: FakeOracle
    ) -> None:
        classifier.on_name_change(1, "Goku")
        classifier.on_name_change(2, "Superman")
        classifier.cancel_all()
        await asyncio.sleep(DEBOUNCE * 5)

        oracle.classify_entity.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_in_flight_request_is_cancelled(
        self, classifier: SlotClassifier, oracle: FakeOracle
    ) -> None:
        never = asyncio.Event()

        async def classify(name: str) -> Classification:
            await never.wait()
            return make_classification()

        oracle.classify_entity.side_effect = classify
        classifier.on_name_change(1, "Goku")
        await asyncio.sleep(DEBOUNCE * 3)
        classifier.cancel_all()
        await asyncio.sleep(0)

        assert classifier.slot(1).classification is None
