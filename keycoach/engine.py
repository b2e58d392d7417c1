"""Decides whether and which shortcut to suggest for an interaction.

Decision sequence for every event:

1. cooldown gate
2. catalog lookup for the event type
3. context filter
4. learned exclusion
5. session budget (once exhausted, only already-shown shortcuts may repeat)
6. selection
7. commit the cooldown timestamp and session entry
8. present, and record the shortcut as learned on an explicit acknowledge

Steps 1-7 run under the engine lock, so a second event arriving while a prompt
is outstanding already sees the committed state. The prompt itself is awaited
outside the lock.
"""

from __future__ import annotations

import asyncio
import random
import time
from dataclasses import dataclass, field
from typing import Callable

from instrukt_ai_logging import get_logger

from keycoach.catalog import ShortcutCatalog, ShortcutIdentity, ShortcutRecord
from keycoach.events import InteractionEvent, InteractionType
from keycoach.filters import ContextFilter, EditorFilterStrategy, apply_context_filter, build_context_filters
from keycoach.ledger import LearnedLedger
from keycoach.presentation import (
    ACKNOWLEDGE_LABEL,
    DISMISS_LABEL,
    PresentationSink,
    SinkResponse,
    format_message,
)
from keycoach.selection import select_shortcut

logger = get_logger(__name__)

DEFAULT_COOLDOWN_S = 300.0
DEFAULT_SESSION_LIMIT = 3

Clock = Callable[[], float]
DiagnosticsHook = Callable[[InteractionEvent, list[ShortcutRecord], list[ShortcutRecord]], None]


@dataclass
class EngineState:
    last_recommendation_time: float = 0.0
    shown_this_session: set[ShortcutIdentity] = field(default_factory=set)


@dataclass(frozen=True)
class Recommendation:
    record: ShortcutRecord
    message: str
    response: SinkResponse | None
    learned: bool


class RecommendationEngine:
    def __init__(
        self,
        catalog: ShortcutCatalog,
        ledger: LearnedLedger,
        sink: PresentationSink,
        *,
        cooldown_interval_s: float = DEFAULT_COOLDOWN_S,
        session_recommendation_limit: int = DEFAULT_SESSION_LIMIT,
        editor_filter: EditorFilterStrategy = EditorFilterStrategy.SHORTCUT_GROUPS,
        clock: Clock = time.time,
        rng: random.Random | None = None,
        diagnostics: DiagnosticsHook | None = None,
    ) -> None:
        self._catalog = catalog
        self._ledger = ledger
        self._sink = sink
        self._cooldown_interval_s = cooldown_interval_s
        self._session_limit = session_recommendation_limit
        self._editor_filter = editor_filter
        self._filters: dict[str, ContextFilter] = build_context_filters(editor_filter)
        self._clock = clock
        self._rng = rng or random.Random()
        self._diagnostics = diagnostics
        self._lock = asyncio.Lock()
        self.state = EngineState()

    @property
    def editor_filter(self) -> EditorFilterStrategy:
        return self._editor_filter

    async def on_interaction(self, event: InteractionEvent) -> Recommendation | None:
        async with self._lock:
            selected = self._decide(event)
        if selected is None:
            return None
        return await self._present(selected, event)

    async def tip_of_the_day(self) -> Recommendation | None:
        return await self.on_interaction(InteractionEvent.of(InteractionType.TIP_OF_THE_DAY))

    def _decide(self, event: InteractionEvent) -> ShortcutRecord | None:
        now = self._clock()
        state = self.state

        if now - state.last_recommendation_time < self._cooldown_interval_s:
            logger.debug("skip: cooldown active", event_type=event.type)
            return None

        matching = self._catalog.shortcuts_for_type(event.type)
        if not matching:
            if event.known_type is None:
                logger.debug("skip: unknown interaction type", event_type=event.type)
            return None

        filtered = apply_context_filter(self._filters, event.type, matching, event.typed_context())
        self._report_filter(event, matching, filtered)
        if not filtered:
            return None

        unlearned = [s for s in filtered if not self._ledger.is_learned(s.identity)]
        if not unlearned:
            logger.debug("skip: all candidates learned", event_type=event.type)
            return None

        candidates = unlearned
        if len(state.shown_this_session) >= self._session_limit:
            candidates = [s for s in unlearned if s.identity in state.shown_this_session]
            if not candidates:
                logger.debug("skip: session budget exhausted", event_type=event.type)
                return None

        selected = select_shortcut(event.type, candidates, self._rng)

        # Commit before presenting: the prompt may wait on the user indefinitely.
        state.last_recommendation_time = now
        state.shown_this_session.add(selected.identity)
        return selected

    def _report_filter(
        self,
        event: InteractionEvent,
        before: list[ShortcutRecord],
        after: list[ShortcutRecord],
    ) -> None:
        logger.debug("context filter applied", event_type=event.type, before=len(before), after=len(after))
        if self._diagnostics is None:
            return
        try:
            self._diagnostics(event, list(before), list(after))
        except Exception:  # pylint: disable=broad-exception-caught
            logger.exception("diagnostics hook failed", event_type=event.type)

    async def _present(self, record: ShortcutRecord, event: InteractionEvent) -> Recommendation:
        message = format_message(record)
        logger.info("recommendation presented", event_type=event.type, keys=record.shortcut_keys)
        response = await self._sink.present(message, (ACKNOWLEDGE_LABEL, DISMISS_LABEL))

        learned = False
        if response == SinkResponse.ACKNOWLEDGE:
            await self._ledger.mark_learned(record.identity)
            learned = True
        return Recommendation(record=record, message=message, response=response, learned=learned)
