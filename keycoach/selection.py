"""Pick the one shortcut to suggest among the surviving candidates."""

from __future__ import annotations

import random

from keycoach.catalog import ShortcutRecord
from keycoach.events import InteractionType

# Canonical shortcut preferred for a type whenever it is still a candidate.
PREFERRED_SHORTCUTS: dict[str, str] = {
    InteractionType.WINDOW_STATE_CHANGE.value: "Alt+Tab",
    InteractionType.ACTIVE_TERMINAL_CHANGE.value: "Ctrl+`",
}

FIRST_CANDIDATE_WEIGHT = 0.75


def select_random(candidates: list[ShortcutRecord], rng: random.Random) -> ShortcutRecord:
    return candidates[rng.randrange(len(candidates))]


def select_shortcut(event_type: str, candidates: list[ShortcutRecord], rng: random.Random) -> ShortcutRecord:
    """Choose one of ``candidates`` (non-empty, in catalog order).

    Editor changes favour the first remaining candidate 75% of the time and
    otherwise draw uniformly; types with a canonical shortcut prefer it; every
    other type draws uniformly.
    """
    if not candidates:
        raise ValueError("select_shortcut requires at least one candidate")

    if event_type == InteractionType.ACTIVE_EDITOR_CHANGE.value:
        if rng.random() < FIRST_CANDIDATE_WEIGHT:
            return candidates[0]
        return select_random(candidates, rng)

    preferred = PREFERRED_SHORTCUTS.get(event_type)
    if preferred is not None:
        match = next((c for c in candidates if c.shortcut_keys == preferred), None)
        if match is not None:
            return match

    return select_random(candidates, rng)
