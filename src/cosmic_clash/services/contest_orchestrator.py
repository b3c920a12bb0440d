"""Contest run orchestration.

A run moves through ``Idle -> Validating -> Running`` and ends ``Completed``,
``Cancelled`` or ``Failed``; completed and failed runs then sit in
``Cooldown`` for a fixed number of seconds before returning to ``Idle``.

Every run captures the current generation token. Any continuation (the
verdict, a failure, an image) whose captured token no longer matches is
dropped without side effects. ``cancel()`` bumps the token, which is how an
in-flight oracle call is abandoned: the call itself runs to completion and
its effects are discarded.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from enum import Enum

from cosmic_clash.schemas.arena import ImageOptions
from cosmic_clash.schemas.oracle import ContestResult
from cosmic_clash.services.history_store import HistoryStore
from cosmic_clash.services.oracle.errors import (
    ClassifiedError,
    MalformedResponseError,
    classify_error,
)
from cosmic_clash.services.oracle.interfaces import OracleProtocol
from cosmic_clash.services.path_resolver import ContestPath, is_ready, resolve
from cosmic_clash.services.slot_classifier import SlotClassifier


logger = logging.getLogger(__name__)

LOADING_MESSAGES: tuple[str, ...] = (
    "Analyzing power levels...",
    "Calculating combat speed...",
    "Simulating battle outcomes...",
    "Consulting the cosmic archives...",
    "Gauging dimensional tiers...",
    "Evaluating hax abilities...",
)

FIGHTERS: tuple[int, int] = (1, 2)


class ContestPhase(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    RUNNING = "running"
    COOLDOWN = "cooldown"


class ContestOutcome(str, Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class ContestOrchestrator:
    """Runs contests for the two slots owned by ``SlotClassifier``."""

    def __init__(
        self,
        oracle: OracleProtocol,
        slots: SlotClassifier,
        history: HistoryStore,
        *,
        cooldown_seconds: int = 10,
        tick_seconds: float = 1.0,
        loading_interval_seconds: float = 2.0,
        on_run_start: Callable[[], None] | None = None,
    ) -> None:
        self._oracle = oracle
        self._slots = slots
        self._history = history
        self._cooldown_seconds = cooldown_seconds
        self._tick_seconds = tick_seconds
        self._loading_interval = loading_interval_seconds
        self._on_run_start = on_run_start

        self.phase = ContestPhase.IDLE
        self.last_outcome: ContestOutcome | None = None
        self.last_rejection: str | None = None
        self.generation = 0
        self.result: ContestResult | None = None
        self.error: ClassifiedError | None = None
        self.images: dict[int, str | None] = {fighter: None for fighter in FIGHTERS}
        self.image_options = ImageOptions()
        self.cooldown_remaining = 0
        self.loading_message: str | None = None

        self._run_task: asyncio.Task[None] | None = None
        self._cooldown_task: asyncio.Task[None] | None = None
        self._loading_task: asyncio.Task[None] | None = None
        self._image_tasks: set[asyncio.Task[None]] = set()

    @property
    def is_running(self) -> bool:
        return self.phase is ContestPhase.RUNNING

    def current_path(self) -> ContestPath:
        first, second = self._slots.slots
        return resolve(first.classification, second.classification)

    def start(self) -> bool:
        """Try to start a run. Returns False (staying idle) when rejected."""
        if self.phase is ContestPhase.RUNNING:
            return self._reject("A contest is already running.")
        if self.cooldown_remaining > 0:
            return self._reject(
                f"Please wait {self.cooldown_remaining}s before the next contest."
            )

        self.phase = ContestPhase.VALIDATING
        valid = [self._slots.validate(slot_id) for slot_id in FIGHTERS]
        if not all(valid):
            self.phase = ContestPhase.IDLE
            return self._reject("Both challengers need valid names.")
        path = self.current_path()
        if not is_ready(path):
            self.phase = ContestPhase.IDLE
            return self._reject(f"Contest path is not ready: {path.value}.")

        self.last_rejection = None
        self.generation += 1
        generation = self.generation
        first, second = self._slots.slots
        self.phase = ContestPhase.RUNNING
        self.result = None
        self.error = None
        self._clear_images()
        if self._on_run_start is not None:
            self._on_run_start()
        self._start_loading_messages()

        self._run_task = asyncio.create_task(
            self._run(generation, first.name, second.name, path)
        )
        return True

    async def wait(self) -> None:
        """Await the current run task, if any."""
        if self._run_task is not None:
            await asyncio.gather(self._run_task, return_exceptions=True)

    async def wait_images(self) -> None:
        """Await image tasks currently in flight."""
        if self._image_tasks:
            await asyncio.gather(*list(self._image_tasks), return_exceptions=True)

    def cancel(self) -> bool:
        """Abandon the running contest. Returns False when nothing is running."""
        if self.phase is not ContestPhase.RUNNING:
            return False
        self.generation += 1
        self.error = None
        self._stop_loading_messages()
        self.phase = ContestPhase.IDLE
        self.last_outcome = ContestOutcome.CANCELLED
        logger.info(f"Contest cancelled; generation advanced to {self.generation}")
        return True

    def dismiss_error(self) -> None:
        self.error = None

    def clear_result(self) -> None:
        self.result = None
        self._clear_images()

    def clear_image(self, fighter: int) -> None:
        self.images[fighter] = None

    def replace_image(self, fighter_name: str, image: str) -> bool:
        """Swap the artwork of the result fighter named ``fighter_name``."""
        if self.result is None:
            return False
        if self.result.fighter1.name == fighter_name:
            self.images[1] = image
        elif self.result.fighter2.name == fighter_name:
            self.images[2] = image
        else:
            return False
        return True

    def cancel_all(self) -> None:
        """Cancel timers and background tasks. Teardown only."""
        self._stop_loading_messages()
        if self._cooldown_task is not None:
            self._cooldown_task.cancel()
            self._cooldown_task = None
        if self._run_task is not None:
            self._run_task.cancel()
            self._run_task = None
        for task in list(self._image_tasks):
            task.cancel()
        self._image_tasks.clear()

    def _reject(self, reason: str) -> bool:
        self.last_rejection = reason
        logger.debug(f"Contest start rejected: {reason}")
        return False

    def _clear_images(self) -> None:
        for fighter in FIGHTERS:
            self.images[fighter] = None

    async def _run(
        self, generation: int, name1: str, name2: str, path: ContestPath
    ) -> None:
        completed: ContestResult | None = None
        try:
            result = await self._oracle.run_contest(name1, name2, path)
            if generation != self.generation:
                logger.debug(f"Discarding verdict for superseded contest {generation}")
                return
            self._check_complete(result)
        except Exception as e:
            if generation != self.generation:
                logger.debug(f"Discarding failure of superseded contest {generation}")
                return
            self.error = classify_error(
                e, f"analyzing the contest between {name1} and {name2}"
            )
            self.last_outcome = ContestOutcome.FAILED
        else:
            self.result = completed = result
            self.last_outcome = ContestOutcome.COMPLETED
            self._launch_images(generation, result)

        self._stop_loading_messages()
        self._start_cooldown()
        if completed is not None:
            await self._history.append(
                completed.fighter1.name, completed.fighter2.name, completed.winner
            )

    @staticmethod
    def _check_complete(result: ContestResult) -> None:
        if (
            not result.winner.strip()
            or not result.fighter1.name.strip()
            or not result.fighter2.name.strip()
        ):
            logger.error(f"Incomplete contest result from oracle: {result!r}")
            raise MalformedResponseError(
                "The AI returned an invalid response format: incomplete analysis."
            )

    def _launch_images(self, generation: int, result: ContestResult) -> None:
        options = self.image_options
        for fighter, data in ((1, result.fighter1), (2, result.fighter2)):
            if not data.image_query:
                continue
            task = asyncio.create_task(
                self._generate_image(generation, result, fighter, data.image_query, options)
            )
            self._image_tasks.add(task)
            task.add_done_callback(self._image_tasks.discard)

    async def _generate_image(
        self,
        generation: int,
        result: ContestResult,
        fighter: int,
        query: str,
        options: ImageOptions,
    ) -> None:
        try:
            image = await self._oracle.generate_image(
                query,
                options.aspect_ratio.value,
                options.style.value,
                options.mood.value,
            )
        except Exception as e:
            logger.error(f"Fighter {fighter} image generation failed: {e!r}")
            return
        if generation != self.generation or self.result is not result:
            logger.debug(f"Discarding fighter {fighter} image for stale contest")
            return
        self.images[fighter] = image

    def _start_loading_messages(self) -> None:
        self._stop_loading_messages()
        self.loading_message = LOADING_MESSAGES[0]
        self._loading_task = asyncio.create_task(self._rotate_loading_messages())

    async def _rotate_loading_messages(self) -> None:
        index = 1
        while True:
            await asyncio.sleep(self._loading_interval)
            self.loading_message = LOADING_MESSAGES[index % len(LOADING_MESSAGES)]
            index += 1

    def _stop_loading_messages(self) -> None:
        if self._loading_task is not None:
            self._loading_task.cancel()
            self._loading_task = None
        self.loading_message = None

    def _start_cooldown(self) -> None:
        if self._cooldown_task is not None:
            self._cooldown_task.cancel()
        self.cooldown_remaining = self._cooldown_seconds
        if self.cooldown_remaining <= 0:
            self.phase = ContestPhase.IDLE
            return
        self.phase = ContestPhase.COOLDOWN
        self._cooldown_task = asyncio.create_task(self._count_down())

    async def _count_down(self) -> None:
        while self.cooldown_remaining > 0:
            await asyncio.sleep(self._tick_seconds)
            self.cooldown_remaining -= 1
        self.phase = ContestPhase.IDLE
        self._cooldown_task = None
