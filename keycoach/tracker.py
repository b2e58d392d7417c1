"""Interaction tracker — in-process event source feeding interaction handlers.

Hosts call :meth:`InteractionTracker.emit` for plain events. Editor switches go
through :meth:`InteractionTracker.editor_changed`, which compares the new
editor snapshot with the previous one and adds the change flags the editor
filter relies on (tab group and tab count deltas, preview status).
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from instrukt_ai_logging import get_logger

from keycoach.events import InteractionEvent, InteractionType

logger = get_logger(__name__)

InteractionHandler = Callable[[InteractionEvent], Awaitable[object]]


@dataclass(frozen=True)
class EditorSnapshot:
    """Editor and tab layout as seen right after the active editor changed."""

    editor: Any = None
    document_uri: str | None = None
    view_column: int | None = None
    is_untitled: bool = False
    language_id: str | None = None
    file_name: str | None = None
    tab_group_count: int = 0
    active_tab_group_index: int = -1
    tab_count_in_active_group: int = 0
    is_preview: bool = False
    is_pinned: bool = False
    tab_label: str | None = None
    visible_editor_count: int = 0


def editor_change_context(current: EditorSnapshot, previous: EditorSnapshot) -> dict[str, Any]:
    """Build the camelCase ``activeEditorChange`` payload for ``current`` relative to ``previous``."""
    return {
        "editor": current.editor,
        "viewColumn": current.view_column,
        "isUntitled": current.is_untitled,
        "languageId": current.language_id,
        "fileName": current.file_name,
        "tabGroupCount": current.tab_group_count,
        "activeTabGroupIndex": current.active_tab_group_index,
        "tabCountInActiveGroup": current.tab_count_in_active_group,
        "isPreview": current.is_preview,
        "isPinned": current.is_pinned,
        "tabLabel": current.tab_label,
        "visibleEditorCount": current.visible_editor_count,
        "tabGroupCountChanged": current.tab_group_count != previous.tab_group_count,
        "tabGroupCountIncreased": current.tab_group_count > previous.tab_group_count,
        "tabGroupCountDecreased": current.tab_group_count < previous.tab_group_count,
        "viewColumnChanged": current.view_column != previous.view_column,
        "tabCountChanged": current.tab_count_in_active_group != previous.tab_count_in_active_group,
        "tabCountIncreased": current.tab_count_in_active_group > previous.tab_count_in_active_group,
        "previewStatusChanged": current.is_preview != previous.is_preview,
        "becameNonPreview": previous.is_preview and not current.is_preview,
        "sameDocument": current.document_uri == previous.document_uri,
    }


class InteractionTracker:
    def __init__(self) -> None:
        self._handlers: list[InteractionHandler] = []
        self._previous_editor = EditorSnapshot()

    def subscribe(self, handler: InteractionHandler) -> None:
        self._handlers.append(handler)

    def clear(self) -> None:
        """Drop all handlers and forget the previous editor snapshot."""
        self._handlers.clear()
        self._previous_editor = EditorSnapshot()

    async def emit(self, event_type: InteractionType | str, context: dict[str, Any] | None = None) -> InteractionEvent:
        event = InteractionEvent.of(event_type, context)
        await self.dispatch(event)
        return event

    async def dispatch(self, event: InteractionEvent) -> None:
        if not self._handlers:
            return
        results = await asyncio.gather(*(h(event) for h in self._handlers), return_exceptions=True)
        for index, result in enumerate(results):
            if isinstance(result, Exception):
                logger.error(
                    "interaction handler failed",
                    handler=index,
                    event_type=event.type,
                    exc_info=result,
                )

    async def editor_changed(self, snapshot: EditorSnapshot) -> InteractionEvent:
        context = editor_change_context(snapshot, self._previous_editor)
        # Advance first so a handler re-entering the tracker sees the new baseline.
        self._previous_editor = snapshot
        return await self.emit(InteractionType.ACTIVE_EDITOR_CHANGE, context)

    async def text_changed(self, document: Any, changes: list[Any]) -> InteractionEvent:
        return await self.emit(InteractionType.TEXT_CHANGE, {"document": document, "changes": changes})

    async def selection_changed(self, editor: Any, selections: list[Any]) -> InteractionEvent:
        return await self.emit(InteractionType.SELECTION_CHANGE, {"editor": editor, "selections": selections})

    async def document_saved(self, document: Any) -> InteractionEvent:
        return await self.emit(InteractionType.FILE_SAVE, {"document": document})

    async def document_closed(self, document: Any) -> InteractionEvent:
        return await self.emit(InteractionType.DOCUMENT_CLOSE, {"document": document})

    async def terminal_changed(self, terminal: Any) -> InteractionEvent:
        return await self.emit(InteractionType.ACTIVE_TERMINAL_CHANGE, {"terminal": terminal})

    async def window_state_changed(self, state: Any) -> InteractionEvent:
        return await self.emit(InteractionType.WINDOW_STATE_CHANGE, {"state": state})

    async def debug_started(self, session: Any) -> InteractionEvent:
        return await self.emit(InteractionType.DEBUG_START, {"session": session})

    async def debug_stopped(self, session: Any) -> InteractionEvent:
        return await self.emit(InteractionType.DEBUG_STOP, {"session": session})
