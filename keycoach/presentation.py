"""Presentation sink — shows a suggestion and reports the user's answer."""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Awaitable, Callable, Protocol

from keycoach.catalog import ShortcutRecord

ACKNOWLEDGE_LABEL = "I got it! Don't show again"
DISMISS_LABEL = "OK"


class SinkResponse(str, Enum):
    ACKNOWLEDGE = "acknowledge"
    DISMISS = "dismiss"


class PresentationSink(Protocol):
    async def present(self, message: str, options: tuple[str, str]) -> SinkResponse | None: ...


def format_action(action: str) -> str:
    """Render an action description for inline use: no quotes, single line, lowercase initial."""
    formatted = action.replace('"', "").replace("\n", " ").strip()
    if formatted:
        formatted = formatted[0].lower() + formatted[1:]
    return formatted


def format_message(record: ShortcutRecord) -> str:
    return f"Shortcut Tip: Use {record.shortcut_keys} to {format_action(record.action_description)}"


def response_for_label(label: str | None) -> SinkResponse | None:
    if label == ACKNOWLEDGE_LABEL:
        return SinkResponse.ACKNOWLEDGE
    if label == DISMISS_LABEL:
        return SinkResponse.DISMISS
    return None


class CallbackPresentationSink:
    """Adapts a host prompt callback that returns the chosen option label (or None)."""

    def __init__(self, prompt_fn: Callable[[str, tuple[str, str]], Awaitable[str | None]]) -> None:
        self._prompt_fn = prompt_fn

    async def present(self, message: str, options: tuple[str, str]) -> SinkResponse | None:
        label = await self._prompt_fn(message, options)
        return response_for_label(label)


class ConsolePresentationSink:
    """Prompts on the terminal; reading stdin happens in a worker thread."""

    def __init__(
        self,
        input_fn: Callable[[str], str] = input,
        output_fn: Callable[[str], None] = print,
    ) -> None:
        self._input_fn = input_fn
        self._output_fn = output_fn

    async def present(self, message: str, options: tuple[str, str]) -> SinkResponse | None:
        self._output_fn(message)
        for index, label in enumerate(options, start=1):
            self._output_fn(f"  [{index}] {label}")
        try:
            raw = await asyncio.to_thread(self._input_fn, "Choice (Enter to skip): ")
        except EOFError:
            return None
        raw = raw.strip()
        if not raw.isdigit() or not 1 <= int(raw) <= len(options):
            return None
        return response_for_label(options[int(raw) - 1])
