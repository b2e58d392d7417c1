"""Tests for candidate selection."""

from __future__ import annotations

import random

import pytest

from keycoach.catalog import ShortcutRecord
from keycoach.selection import select_shortcut


class StubRandom(random.Random):
    """Random with a fixed ``random()`` draw and a scripted ``randrange``."""

    def __init__(self, draw: float, index: int = 0) -> None:
        super().__init__(0)
        self.draw = draw
        self.index = index

    def random(self) -> float:
        return self.draw

    def randrange(self, *args, **kwargs) -> int:  # type: ignore[override]
        return self.index


def _make_records(event_type: str, *keys: str) -> list[ShortcutRecord]:
    return [
        ShortcutRecord(interaction_type=event_type, shortcut_keys=k, action_description=f"action {k}", implemented=True)
        for k in keys
    ]


def test_empty_candidates_raise() -> None:
    with pytest.raises(ValueError):
        select_shortcut("fileSave", [], random.Random(1))


def test_window_state_prefers_alt_tab() -> None:
    candidates = _make_records("windowStateChange", "Ctrl+Shift+N", "Alt+Tab", "Ctrl+R")
    for seed in range(20):
        assert select_shortcut("windowStateChange", candidates, random.Random(seed)).shortcut_keys == "Alt+Tab"


def test_terminal_prefers_backtick_toggle() -> None:
    candidates = _make_records("activeTerminalChange", "Ctrl+Shift+`", "Ctrl+`")
    assert select_shortcut("activeTerminalChange", candidates, StubRandom(0.0)).shortcut_keys == "Ctrl+`"


def test_preferred_missing_falls_back_to_random() -> None:
    candidates = _make_records("windowStateChange", "Ctrl+Shift+N", "Ctrl+R")
    assert select_shortcut("windowStateChange", candidates, StubRandom(0.0, index=1)).shortcut_keys == "Ctrl+R"


def test_editor_change_low_draw_takes_first() -> None:
    candidates = _make_records("activeEditorChange", "Ctrl+P", "Ctrl+N", "Ctrl+O")
    assert select_shortcut("activeEditorChange", candidates, StubRandom(0.74, index=2)).shortcut_keys == "Ctrl+P"


def test_editor_change_high_draw_picks_uniformly() -> None:
    candidates = _make_records("activeEditorChange", "Ctrl+P", "Ctrl+N", "Ctrl+O")
    assert select_shortcut("activeEditorChange", candidates, StubRandom(0.75, index=2)).shortcut_keys == "Ctrl+O"


def test_editor_change_first_candidate_dominates() -> None:
    candidates = _make_records("activeEditorChange", "Ctrl+P", "Ctrl+N", "Ctrl+O", "Ctrl+1")
    rng = random.Random(42)
    picks = [select_shortcut("activeEditorChange", candidates, rng).shortcut_keys for _ in range(2000)]
    share = picks.count("Ctrl+P") / len(picks)
    # 0.75 + 0.25 / 4
    assert 0.76 < share < 0.86


def test_other_types_reach_every_candidate() -> None:
    candidates = _make_records("fileSave", "Ctrl+S", "Ctrl+K S", "Ctrl+Shift+S")
    rng = random.Random(7)
    picks = {select_shortcut("fileSave", candidates, rng).shortcut_keys for _ in range(200)}
    assert picks == {"Ctrl+S", "Ctrl+K S", "Ctrl+Shift+S"}


def test_single_candidate_is_returned() -> None:
    candidates = _make_records("debugStart", "F5")
    assert select_shortcut("debugStart", candidates, random.Random()) is candidates[0]
