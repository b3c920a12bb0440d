"""The arena session: two slots, the contest orchestrator and the secondary
panels (random matchup, profile, lore, lore connection, image editor,
export).

Oracle failures in the secondary panels are classified here and returned to
the caller as ``ClassifiedError`` values; they are never raised.
"""

from __future__ import annotations

import logging
import re

from cosmic_clash.core.config import Settings, get_settings
from cosmic_clash.core.exceptions import (
    ContestNotRunningError,
    ContestRejectedError,
    HistoryEntryNotFoundError,
    NoImageToEditError,
    NothingToExportError,
)
from cosmic_clash.schemas.arena import (
    ArenaSnapshot,
    ContestView,
    ExportBundle,
    ImageEditTarget,
    ImageOptions,
    SlotView,
    ViewState,
    ViewUpdate,
)
from cosmic_clash.schemas.history import HistoryEntry
from cosmic_clash.schemas.oracle import Connection, Lore, Profile, RandomPair
from cosmic_clash.services.contest_orchestrator import ContestOrchestrator
from cosmic_clash.services.history_store import HistoryStore
from cosmic_clash.services.oracle.errors import ClassifiedError, classify_error
from cosmic_clash.services.oracle.interfaces import OracleProtocol
from cosmic_clash.services.path_resolver import (
    abilities_by_category,
    describe_tier,
    is_ready,
)
from cosmic_clash.services.preferences import PreferencesStore
from cosmic_clash.services.slot_classifier import Slot, SlotClassifier


logger = logging.getLogger(__name__)


def export_filename(name1: str, name2: str) -> str:
    def _clean(name: str) -> str:
        name = re.sub(r"[\s()]", "_", name.lower())
        return re.sub(r"[^a-z0-9_]", "", name)

    return f"cosmic_clash_{_clean(name1)}_vs_{_clean(name2)}.json"


class Arena:
    """Single-user session facade over the classification and contest engine."""

    def __init__(
        self,
        oracle: OracleProtocol,
        history: HistoryStore,
        preferences: PreferencesStore,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or get_settings()
        self._oracle = oracle
        self.history = history
        self.preferences = preferences
        self.view = ViewState()
        self._suggesting = False

        self.slots = SlotClassifier(
            oracle,
            debounce_seconds=settings.CLASSIFY_DEBOUNCE_SECONDS,
            error_ttl_seconds=settings.CLASSIFICATION_ERROR_TTL_SECONDS,
            on_invalidate=self._on_slot_invalidated,
        )
        self.contest = ContestOrchestrator(
            oracle,
            self.slots,
            history,
            cooldown_seconds=settings.CONTEST_COOLDOWN_SECONDS,
            loading_interval_seconds=settings.LOADING_MESSAGE_INTERVAL_SECONDS,
            on_run_start=self._reset_view,
        )

    async def load(self) -> None:
        """Restore persisted history and preferences."""
        await self.history.load()
        await self.preferences.load()

    def cancel_all(self) -> None:
        self.slots.cancel_all()
        self.contest.cancel_all()

    # Slots

    def set_name(self, slot_id: int, name: str) -> Slot:
        self.slots.on_name_change(slot_id, name)
        return self.slots.slot(slot_id)

    def clear_slot(self, slot_id: int) -> Slot:
        self.slots.clear(slot_id)
        return self.slots.slot(slot_id)

    def _on_slot_invalidated(self, slot_id: int) -> None:
        self.contest.clear_result()
        self.view.image_editor = None
        self.view.lore_connection_open = False

    # Contest

    def start_contest(self) -> None:
        if not self.contest.start():
            raise ContestRejectedError(
                self.contest.last_rejection or "Contest could not be started."
            )

    def cancel_contest(self) -> None:
        if not self.contest.cancel():
            raise ContestNotRunningError("No contest is running.")

    def dismiss_error(self) -> None:
        self.contest.dismiss_error()

    def set_image_options(self, options: ImageOptions) -> ImageOptions:
        self.contest.image_options = options
        return options

    def _reset_view(self) -> None:
        self.view = ViewState()

    def update_view(self, update: ViewUpdate) -> ViewState:
        if update.active_view is not None:
            self.view.active_view = update.active_view
        if update.active_stat_tab is not None:
            self.view.active_stat_tab = update.active_stat_tab
        if update.toggle_analysis_source is not None:
            key = update.toggle_analysis_source
            self.view.expanded_analysis_source = (
                None if self.view.expanded_analysis_source == key else key
            )
        if update.close_image_editor:
            self.close_image_editor()
        if update.close_lore_connection:
            self.close_connection()
        return self.view

    # Secondary panels

    async def random_matchup(self) -> RandomPair | ClassifiedError:
        """Ask the oracle for a matchup and load it into both slots."""
        if self.contest.is_running or self._suggesting:
            raise ContestRejectedError("A contest or matchup request is in progress.")
        self._suggesting = True
        self.contest.dismiss_error()
        self.slots.clear(1)
        self.slots.clear(2)
        try:
            pair = await self._oracle.suggest_random_pair()
        except Exception as e:
            error = classify_error(e, "generating a random matchup")
            self.contest.error = error
            return error
        finally:
            self._suggesting = False

        self.slots.on_name_change(1, pair.name1)
        self.slots.on_name_change(2, pair.name2)
        return pair

    async def profile(self, name: str) -> Profile | ClassifiedError:
        try:
            return await self._oracle.fetch_profile(name)
        except Exception as e:
            return classify_error(e, f"fetching profile for {name}")

    async def lore(self, name: str) -> Lore | ClassifiedError:
        try:
            return await self._oracle.fetch_lore(name)
        except Exception as e:
            return classify_error(e, f"fetching lore for {name}")

    async def connection(
        self, name1: str | None = None, name2: str | None = None
    ) -> Connection | ClassifiedError:
        first, second = self.slots.slots
        name1 = name1 or first.name
        name2 = name2 or second.name
        if not name1.strip() or not name2.strip():
            raise ContestRejectedError(
                "Both challengers must be named to explore their connection."
            )
        self.view.lore_connection_open = True
        try:
            return await self._oracle.fetch_connection(name1, name2)
        except Exception as e:
            return classify_error(
                e, f"fetching lore connections for {name1} and {name2}"
            )

    def close_connection(self) -> None:
        self.view.lore_connection_open = False

    def open_image_editor(self, fighter: int) -> ImageEditTarget:
        result = self.contest.result
        image = self.contest.images.get(fighter)
        if result is None or image is None:
            raise NoImageToEditError(f"No artwork for fighter {fighter} to edit.")
        data = result.fighter1 if fighter == 1 else result.fighter2
        options = self.contest.image_options
        target = ImageEditTarget(
            fighter=fighter,
            fighter_name=data.name,
            original_query=data.image_query,
            image=image,
            aspect_ratio=options.aspect_ratio,
            style=options.style,
            mood=options.mood,
        )
        self.view.image_editor = target
        return target

    def close_image_editor(self) -> None:
        self.view.image_editor = None

    async def edit_image(self, fighter: int, edit_prompt: str) -> str | ClassifiedError:
        target = self.view.image_editor
        if target is None or target.fighter != fighter:
            target = self.open_image_editor(fighter)
        try:
            image = await self._oracle.edit_image(
                target.original_query,
                edit_prompt,
                target.aspect_ratio.value,
                target.style.value,
                target.mood.value,
            )
        except Exception as e:
            return classify_error(e, "editing an image")

        target.image = image
        if not self.contest.replace_image(target.fighter_name, image):
            logger.info(
                f"Edited image for '{target.fighter_name}' no longer matches the result"
            )
        return image

    def export(self) -> ExportBundle:
        result = self.contest.result
        first, second = self.slots.slots
        if result is None or first.classification is None or second.classification is None:
            raise NothingToExportError("Cannot export results: contest data is incomplete.")

        data = {
            "contestSummary": {
                "fighter1": result.fighter1.name,
                "fighter2": result.fighter2.name,
                "winner": result.winner,
                "confidence": result.confidence.value,
                "confidenceScore": result.confidence_score,
                "verdict": result.verdict_summary,
            },
            "contestAnalysis": result.analysis.model_dump(),
            "nlfConsiderations": result.nlf_considerations,
            "fighter1Details": {
                "name": result.fighter1.name,
                "tierInfo": first.classification.model_dump(mode="json", by_alias=True),
                "stats": result.fighter1.stats.model_dump(by_alias=True),
            },
            "fighter2Details": {
                "name": result.fighter2.name,
                "tierInfo": second.classification.model_dump(mode="json", by_alias=True),
                "stats": result.fighter2.stats.model_dump(by_alias=True),
            },
            "sources": (
                [s.model_dump() for s in result.sources] if result.sources else None
            ),
        }
        return ExportBundle(
            filename=export_filename(result.fighter1.name, result.fighter2.name),
            data=data,
        )

    # History

    async def rerun(self, entry_id: str) -> HistoryEntry:
        entry = self.history.get(entry_id)
        if entry is None:
            raise HistoryEntryNotFoundError(f"History entry {entry_id} not found")
        self.slots.on_name_change(1, entry.name1)
        self.slots.on_name_change(2, entry.name2)
        return entry

    # Snapshot

    def snapshot(self) -> ArenaSnapshot:
        path = self.contest.current_path()
        contest = self.contest
        return ArenaSnapshot(
            slots=[self._slot_view(slot) for slot in self.slots.slots],
            path=path.value,
            ready=is_ready(path),
            contest=ContestView(
                phase=contest.phase.value,
                last_outcome=contest.last_outcome.value if contest.last_outcome else None,
                generation=contest.generation,
                cooldown_remaining=contest.cooldown_remaining,
                loading_message=contest.loading_message,
                result=contest.result,
                images=dict(contest.images),
                error=contest.error.to_dict() if contest.error else None,
            ),
            view=self.view,
            image_options=contest.image_options,
        )

    @staticmethod
    def _slot_view(slot: Slot) -> SlotView:
        return SlotView(
            slot_id=slot.slot_id,
            name=slot.name,
            validation_error=slot.validation_error,
            classification=slot.classification,
            classification_error=(
                slot.classification_error.to_dict()
                if slot.classification_error
                else None
            ),
            is_classifying=slot.is_classifying,
            tier_description=(
                describe_tier(slot.classification.tier_value)
                if slot.classification
                else None
            ),
            bypass_by_category=(
                {
                    category.value: abilities
                    for category, abilities in abilities_by_category(
                        slot.classification.bypass_abilities
                    ).items()
                }
                if slot.classification
                else {}
            ),
        )
