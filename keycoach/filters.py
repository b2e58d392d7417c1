"""Context filters that narrow catalog candidates to those relevant to an event.

Each interaction type maps to one pure filter function. Types without an entry
pass every candidate through, which keeps new host event kinds working without
changes here.

``activeEditorChange`` has two mutually exclusive strategies; an engine uses
exactly one of them:

``shortcut_groups``
    Rules keyed on the shortcut keys. Split-editor shortcuts need a new tab
    group, new-file shortcuts need an untitled document in a new tab, open-file
    shortcuts need a titled document in a new tab, history/tab navigation needs
    the tab count unchanged and markdown preview needs a markdown file.
    Shortcuts outside every group pass through.

``markdown_split``
    Markdown files keep only markdown-preview shortcuts; every other file keeps
    everything except markdown-preview shortcuts.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from keycoach.catalog import ShortcutRecord
from keycoach.events import (
    DocumentContext,
    EditorChangeContext,
    InteractionContext,
    InteractionType,
    SelectionChangeContext,
    TerminalContext,
    TextChangeContext,
    WindowStateContext,
)

ContextFilter = Callable[[list[ShortcutRecord], InteractionContext], list[ShortcutRecord]]


class EditorFilterStrategy(str, Enum):
    SHORTCUT_GROUPS = "shortcut_groups"
    MARKDOWN_SPLIT = "markdown_split"


def _keys_pattern(*alternatives: str) -> re.Pattern[str]:
    # A key token must not run on into a longer token (Ctrl+P vs Ctrl+PageUp).
    body = "|".join(re.escape(a) for a in alternatives)
    return re.compile(rf"(?<![\w+])(?:{body})(?![\w\\])")


SPLIT_EDITOR_KEYS = _keys_pattern("Ctrl+\\", "Ctrl+K Ctrl+\\")
NEW_FILE_KEYS = _keys_pattern("Ctrl+N", "Ctrl+Alt+Win+N")
OPEN_FILE_KEYS = _keys_pattern("Ctrl+O", "Ctrl+P")
NAVIGATION_KEYS = _keys_pattern(
    "Ctrl+Tab", "Ctrl+Shift+Tab", "Alt+Left", "Alt+Right", "Ctrl+PageUp", "Ctrl+PageDown", "Ctrl+-"
)
MARKDOWN_PREVIEW_KEYS = _keys_pattern("Ctrl+Shift+V", "Ctrl+K V")


@dataclass(frozen=True, slots=True)
class ShortcutGroupRule:
    name: str
    pattern: re.Pattern[str]
    applies: Callable[[EditorChangeContext], bool]

    def matches(self, record: ShortcutRecord) -> bool:
        return bool(self.pattern.search(record.shortcut_keys))


EDITOR_GROUP_RULES: tuple[ShortcutGroupRule, ...] = (
    ShortcutGroupRule("split_editor", SPLIT_EDITOR_KEYS, lambda c: c.tab_group_count_increased),
    ShortcutGroupRule("new_file", NEW_FILE_KEYS, lambda c: c.is_untitled and c.tab_count_increased),
    ShortcutGroupRule("open_file", OPEN_FILE_KEYS, lambda c: not c.is_untitled and c.tab_count_increased),
    ShortcutGroupRule("navigation", NAVIGATION_KEYS, lambda c: not c.tab_count_changed),
    ShortcutGroupRule("markdown_preview", MARKDOWN_PREVIEW_KEYS, lambda c: c.is_markdown),
)


def is_markdown_preview(record: ShortcutRecord) -> bool:
    return bool(MARKDOWN_PREVIEW_KEYS.search(record.shortcut_keys))


def _present(value: object) -> bool:
    return value is not None


def _editor_by_groups(shortcuts: list[ShortcutRecord], ctx: EditorChangeContext) -> list[ShortcutRecord]:
    kept: list[ShortcutRecord] = []
    for record in shortcuts:
        rule = next((r for r in EDITOR_GROUP_RULES if r.matches(record)), None)
        if rule is None or rule.applies(ctx):
            kept.append(record)
    return kept


def _editor_by_markdown_split(shortcuts: list[ShortcutRecord], ctx: EditorChangeContext) -> list[ShortcutRecord]:
    if ctx.is_markdown:
        return [s for s in shortcuts if is_markdown_preview(s)]
    return [s for s in shortcuts if not is_markdown_preview(s)]


_EDITOR_STRATEGIES: dict[EditorFilterStrategy, Callable[[list[ShortcutRecord], EditorChangeContext], list[ShortcutRecord]]] = {
    EditorFilterStrategy.SHORTCUT_GROUPS: _editor_by_groups,
    EditorFilterStrategy.MARKDOWN_SPLIT: _editor_by_markdown_split,
}


def editor_change_filter(strategy: EditorFilterStrategy) -> ContextFilter:
    narrow = _EDITOR_STRATEGIES[strategy]

    def _filter(shortcuts: list[ShortcutRecord], ctx: InteractionContext) -> list[ShortcutRecord]:
        if not isinstance(ctx, EditorChangeContext) or not _present(ctx.editor):
            return []
        return narrow(shortcuts, ctx)

    return _filter


def _require_terminal(shortcuts: list[ShortcutRecord], ctx: InteractionContext) -> list[ShortcutRecord]:
    if not isinstance(ctx, TerminalContext) or not _present(ctx.terminal):
        return []
    return shortcuts


def _require_document(shortcuts: list[ShortcutRecord], ctx: InteractionContext) -> list[ShortcutRecord]:
    if not isinstance(ctx, DocumentContext) or not _present(ctx.document):
        return []
    return shortcuts


def _require_selection(shortcuts: list[ShortcutRecord], ctx: InteractionContext) -> list[ShortcutRecord]:
    if not isinstance(ctx, SelectionChangeContext) or not _present(ctx.editor) or not ctx.selections:
        return []
    return shortcuts


def _require_changes(shortcuts: list[ShortcutRecord], ctx: InteractionContext) -> list[ShortcutRecord]:
    if not isinstance(ctx, TextChangeContext) or not ctx.changes:
        return []
    return shortcuts


def _require_state(shortcuts: list[ShortcutRecord], ctx: InteractionContext) -> list[ShortcutRecord]:
    if not isinstance(ctx, WindowStateContext) or not _present(ctx.state):
        return []
    return shortcuts


def build_context_filters(
    editor_strategy: EditorFilterStrategy = EditorFilterStrategy.SHORTCUT_GROUPS,
) -> dict[str, ContextFilter]:
    """Return the filter table keyed by interaction type name."""
    return {
        InteractionType.ACTIVE_EDITOR_CHANGE.value: editor_change_filter(editor_strategy),
        InteractionType.ACTIVE_TERMINAL_CHANGE.value: _require_terminal,
        InteractionType.DOCUMENT_CLOSE.value: _require_document,
        InteractionType.FILE_SAVE.value: _require_document,
        InteractionType.SELECTION_CHANGE.value: _require_selection,
        InteractionType.TEXT_CHANGE.value: _require_changes,
        InteractionType.WINDOW_STATE_CHANGE.value: _require_state,
    }


def apply_context_filter(
    filters: dict[str, ContextFilter],
    event_type: str,
    shortcuts: list[ShortcutRecord],
    ctx: InteractionContext,
) -> list[ShortcutRecord]:
    context_filter = filters.get(event_type)
    if context_filter is None:
        return list(shortcuts)
    return context_filter(list(shortcuts), ctx)
