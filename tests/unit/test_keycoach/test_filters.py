"""Tests for per-type context filters and the editor filter strategies."""

from __future__ import annotations

from typing import Any

from keycoach.catalog import ShortcutCatalog, ShortcutRecord
from keycoach.events import InteractionEvent, InteractionType
from keycoach.filters import (
    EditorFilterStrategy,
    apply_context_filter,
    build_context_filters,
    is_markdown_preview,
)

EDITOR_CSV = """interactionType,implemented,shortcut,action
activeEditorChange,true,Ctrl+P,Quick open
activeEditorChange,true,Ctrl+N,New file
activeEditorChange,true,Ctrl+\\,Split editor
activeEditorChange,true,Ctrl+PageDown,Next editor
activeEditorChange,true,Alt+Left,Go back
activeEditorChange,true,Ctrl+Shift+V,Markdown preview
activeEditorChange,true,Ctrl+1,Focus first group
"""

EDITOR = ShortcutCatalog.from_text(EDITOR_CSV).shortcuts_for_type("activeEditorChange")


def _make_record(event_type: str, keys: str = "Ctrl+X", action: str = "do it") -> ShortcutRecord:
    return ShortcutRecord(interaction_type=event_type, shortcut_keys=keys, action_description=action, implemented=True)


def _editor_keys(context: dict[str, Any], strategy: EditorFilterStrategy = EditorFilterStrategy.SHORTCUT_GROUPS) -> list[str]:
    filters = build_context_filters(strategy)
    ctx = InteractionEvent.of(InteractionType.ACTIVE_EDITOR_CHANGE, context).typed_context()
    return [r.shortcut_keys for r in apply_context_filter(filters, "activeEditorChange", EDITOR, ctx)]


def _survives(event_type: InteractionType, context: dict[str, Any]) -> bool:
    filters = build_context_filters()
    record = _make_record(event_type.value)
    ctx = InteractionEvent.of(event_type, context).typed_context()
    return apply_context_filter(filters, event_type.value, [record], ctx) == [record]


# --- shortcut_groups ---


def test_new_untitled_tab_keeps_new_file_and_drops_open_file() -> None:
    keys = _editor_keys({"editor": {}, "isUntitled": True, "tabCountChanged": True, "tabCountIncreased": True})
    assert "Ctrl+N" in keys
    assert "Ctrl+P" not in keys


def test_new_titled_tab_keeps_open_file_and_drops_new_file() -> None:
    keys = _editor_keys({"editor": {}, "isUntitled": False, "tabCountChanged": True, "tabCountIncreased": True})
    assert "Ctrl+P" in keys
    assert "Ctrl+N" not in keys


def test_split_requires_new_tab_group() -> None:
    assert "Ctrl+\\" not in _editor_keys({"editor": {}})
    assert "Ctrl+\\" in _editor_keys({"editor": {}, "tabGroupCountIncreased": True})


def test_navigation_requires_unchanged_tab_count() -> None:
    keys = _editor_keys({"editor": {}})
    assert {"Ctrl+PageDown", "Alt+Left"} <= set(keys)

    keys = _editor_keys({"editor": {}, "tabCountChanged": True, "tabCountIncreased": True})
    assert "Ctrl+PageDown" not in keys
    assert "Alt+Left" not in keys


def test_ctrl_p_rule_does_not_catch_ctrl_pagedown() -> None:
    # Titled file, no tab count change: open-file drops, navigation stays.
    keys = _editor_keys({"editor": {}})
    assert "Ctrl+P" not in keys
    assert "Ctrl+PageDown" in keys


def test_markdown_preview_requires_markdown_file() -> None:
    assert "Ctrl+Shift+V" not in _editor_keys({"editor": {}, "fileName": "main.py"})
    assert "Ctrl+Shift+V" in _editor_keys({"editor": {}, "fileName": "README.md"})


def test_ungrouped_shortcut_passes_through() -> None:
    assert "Ctrl+1" in _editor_keys({"editor": {}, "tabCountChanged": True})


def test_editor_filter_requires_editor() -> None:
    assert _editor_keys({"isUntitled": True, "tabCountIncreased": True}) == []
    assert _editor_keys({}, EditorFilterStrategy.MARKDOWN_SPLIT) == []


# --- markdown_split ---


def test_markdown_split_on_markdown_keeps_only_preview() -> None:
    keys = _editor_keys({"editor": {}, "languageId": "markdown"}, EditorFilterStrategy.MARKDOWN_SPLIT)
    assert keys == ["Ctrl+Shift+V"]


def test_markdown_split_elsewhere_drops_preview() -> None:
    keys = _editor_keys({"editor": {}, "languageId": "python"}, EditorFilterStrategy.MARKDOWN_SPLIT)
    assert "Ctrl+Shift+V" not in keys
    assert len(keys) == len(EDITOR) - 1


def test_is_markdown_preview_matches_chord() -> None:
    assert is_markdown_preview(_make_record("activeEditorChange", "Ctrl+K V"))
    assert not is_markdown_preview(_make_record("activeEditorChange", "Ctrl+K Ctrl+V"))


# --- require filters ---


def test_terminal_change_requires_terminal() -> None:
    assert _survives(InteractionType.ACTIVE_TERMINAL_CHANGE, {"terminal": {"name": "bash"}})
    assert not _survives(InteractionType.ACTIVE_TERMINAL_CHANGE, {})


def test_save_and_close_require_document() -> None:
    assert _survives(InteractionType.FILE_SAVE, {"document": "a.py"})
    assert not _survives(InteractionType.FILE_SAVE, {})
    assert _survives(InteractionType.DOCUMENT_CLOSE, {"document": "a.py"})
    assert not _survives(InteractionType.DOCUMENT_CLOSE, {"document": None})


def test_selection_change_requires_editor_and_selections() -> None:
    assert _survives(InteractionType.SELECTION_CHANGE, {"editor": {}, "selections": [{"start": 0}]})
    assert not _survives(InteractionType.SELECTION_CHANGE, {"editor": {}, "selections": []})
    assert not _survives(InteractionType.SELECTION_CHANGE, {"selections": [{"start": 0}]})


def test_text_change_requires_changes() -> None:
    assert _survives(InteractionType.TEXT_CHANGE, {"document": "a.py", "changes": [{"text": "x"}]})
    assert not _survives(InteractionType.TEXT_CHANGE, {"document": "a.py", "changes": []})


def test_window_state_requires_state() -> None:
    assert _survives(InteractionType.WINDOW_STATE_CHANGE, {"state": {"focused": True}})
    assert not _survives(InteractionType.WINDOW_STATE_CHANGE, {})


def test_malformed_changes_count_as_absent() -> None:
    assert not _survives(InteractionType.TEXT_CHANGE, {"changes": "not a list"})
    assert not _survives(InteractionType.SELECTION_CHANGE, {"editor": {}, "selections": 7})


def test_null_editor_flag_only_affects_its_own_rule() -> None:
    filters = build_context_filters()
    candidates = [
        _make_record("activeEditorChange", "Ctrl+O", "Open a file"),
        _make_record("activeEditorChange", "Ctrl+N", "New file"),
        _make_record("activeEditorChange", "Ctrl+1", "Focus first group"),
    ]
    ctx = InteractionEvent.of(
        InteractionType.ACTIVE_EDITOR_CHANGE,
        {"editor": {"id": 1}, "isUntitled": None, "tabCountIncreased": True},
    ).typed_context()

    kept = apply_context_filter(filters, "activeEditorChange", candidates, ctx)

    assert [r.shortcut_keys for r in kept] == ["Ctrl+O", "Ctrl+1"]


def test_types_without_filter_pass_through() -> None:
    assert _survives(InteractionType.COMMAND_EXECUTION, {})
    assert _survives(InteractionType.DEBUG_START, {})

    filters = build_context_filters()
    record = _make_record("somethingNew")
    assert apply_context_filter(filters, "somethingNew", [record], InteractionEvent.of("somethingNew").typed_context()) == [record]


def test_filter_does_not_mutate_input() -> None:
    filters = build_context_filters()
    records = list(EDITOR)
    ctx = InteractionEvent.of(InteractionType.ACTIVE_EDITOR_CHANGE, {"editor": {}}).typed_context()
    apply_context_filter(filters, "activeEditorChange", records, ctx)
    assert records == EDITOR
