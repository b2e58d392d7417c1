"""Closed set of interaction kinds and their context payloads."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from instrukt_ai_logging import get_logger
from pydantic import BaseModel, ConfigDict, Field, ModelWrapValidatorHandler, ValidationError, model_validator
from pydantic.alias_generators import to_camel

logger = get_logger(__name__)


class InteractionType(str, Enum):
    ACTIVE_EDITOR_CHANGE = "activeEditorChange"
    TEXT_CHANGE = "textChange"
    SELECTION_CHANGE = "selectionChange"
    FILE_SAVE = "fileSave"
    DOCUMENT_CLOSE = "documentClose"
    ACTIVE_TERMINAL_CHANGE = "activeTerminalChange"
    WINDOW_STATE_CHANGE = "windowStateChange"
    COMMAND_EXECUTION = "commandExecution"
    PANEL_VISIBILITY_CHANGE = "panelVisibilityChange"
    INTELLISENSE_TRIGGER = "intelliSenseTrigger"
    PEEK_DEFINITION_TRIGGER = "peekDefinitionTrigger"
    QUICK_FIX_TRIGGER = "quickFixTrigger"
    REFERENCES_TRIGGER = "referencesTrigger"
    DEBUG_START = "debugStart"
    DEBUG_STOP = "debugStop"
    # Synthetic: raised on demand, never by the host.
    TIP_OF_THE_DAY = "tipOfTheDay"


class InteractionContext(BaseModel):
    """Base for per-type context payloads.

    Hosts send camelCase keys; snake_case is accepted too. Unknown keys are kept.
    A key whose value does not validate is dropped on its own, so that field
    takes its default while the rest of the payload survives.
    """

    model_config = ConfigDict(extra="allow", alias_generator=to_camel, populate_by_name=True)

    @model_validator(mode="wrap")
    @classmethod
    def _drop_invalid_fields(cls, data: Any, handler: ModelWrapValidatorHandler[Any]) -> Any:
        try:
            return handler(data)
        except ValidationError as exc:
            if not isinstance(data, dict):
                raise
            failed = {err["loc"][0] for err in exc.errors() if err["loc"]}
            rejected: set[str] = set()
            for name, info in cls.model_fields.items():
                if name in failed or info.alias in failed:
                    rejected.update({name, info.alias or name})
            logger.debug("context fields rejected", model=cls.__name__, fields=sorted(rejected))
            return handler({k: v for k, v in data.items() if k not in rejected})


class EditorChangeContext(InteractionContext):
    editor: Any = None
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
    tab_group_count_changed: bool = False
    tab_group_count_increased: bool = False
    tab_group_count_decreased: bool = False
    view_column_changed: bool = False
    tab_count_changed: bool = False
    tab_count_increased: bool = False
    preview_status_changed: bool = False
    became_non_preview: bool = False
    same_document: bool = False

    @property
    def is_markdown(self) -> bool:
        if self.language_id == "markdown":
            return True
        name = self.file_name or ""
        return name.endswith(".md") or name.endswith(".markdown")


class TextChangeContext(InteractionContext):
    document: Any = None
    changes: list[Any] = Field(default_factory=list)


class SelectionChangeContext(InteractionContext):
    editor: Any = None
    selections: list[Any] = Field(default_factory=list)


class DocumentContext(InteractionContext):
    document: Any = None


class TerminalContext(InteractionContext):
    terminal: Any = None


class WindowStateContext(InteractionContext):
    state: Any = None


class DebugSessionContext(InteractionContext):
    session: Any = None


CONTEXT_MODELS: dict[str, type[InteractionContext]] = {
    InteractionType.ACTIVE_EDITOR_CHANGE.value: EditorChangeContext,
    InteractionType.TEXT_CHANGE.value: TextChangeContext,
    InteractionType.SELECTION_CHANGE.value: SelectionChangeContext,
    InteractionType.FILE_SAVE.value: DocumentContext,
    InteractionType.DOCUMENT_CLOSE.value: DocumentContext,
    InteractionType.ACTIVE_TERMINAL_CHANGE.value: TerminalContext,
    InteractionType.WINDOW_STATE_CHANGE.value: WindowStateContext,
    InteractionType.DEBUG_START.value: DebugSessionContext,
    InteractionType.DEBUG_STOP.value: DebugSessionContext,
}


def event_type_name(value: InteractionType | str) -> str:
    return value.value if isinstance(value, InteractionType) else str(value)


class InteractionEvent(BaseModel):
    # Plain strings are accepted so new host event kinds flow through untouched.
    type: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    context: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def of(cls, event_type: InteractionType | str, context: dict[str, Any] | None = None, **kwargs: Any) -> "InteractionEvent":
        return cls(type=event_type_name(event_type), context=context or {}, **kwargs)

    @property
    def known_type(self) -> InteractionType | None:
        try:
            return InteractionType(self.type)
        except ValueError:
            return None

    def typed_context(self) -> InteractionContext:
        """Parse the raw payload into this type's context model.

        Invalid fields fall back to their defaults one by one. A payload that
        still fails validation yields the model's defaults, which every filter
        treats as "nothing present".
        """
        model = CONTEXT_MODELS.get(self.type, InteractionContext)
        try:
            return model.model_validate(self.context)
        except ValidationError as exc:
            logger.debug("context payload rejected", event_type=self.type, errors=exc.error_count())
            return model()
