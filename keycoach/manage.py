"""Management surface for learned shortcuts: list, search, unlearn, clear all."""

from __future__ import annotations

from typing import Awaitable, Callable, Iterable

from instrukt_ai_logging import get_logger

from keycoach.catalog import ShortcutIdentity
from keycoach.ledger import LearnedEntry, LearnedLedger

logger = get_logger(__name__)

CLEAR_ALL_WARNING = "Are you sure you want to unlearn all shortcuts? This will reset your learning progress."

Confirm = Callable[[str], Awaitable[bool]]


class LearnedShortcutsManager:
    def __init__(self, ledger: LearnedLedger) -> None:
        self._ledger = ledger

    def list_learned(self) -> list[LearnedEntry]:
        return self._ledger.detailed_learned()

    def search(self, query: str) -> list[LearnedEntry]:
        """Entries whose keys or action contain ``query``, ignoring case."""
        needle = query.strip().lower()
        return [
            e
            for e in self._ledger.detailed_learned()
            if needle in e.shortcut_keys.lower() or needle in e.action_description.lower()
        ]

    async def unlearn(self, shortcut_keys: str, action_description: str) -> None:
        await self._ledger.unlearn(ShortcutIdentity(shortcut_keys, action_description))

    async def unlearn_many(self, identities: Iterable[ShortcutIdentity], confirm: Confirm) -> list[ShortcutIdentity] | None:
        """Unlearn the selected shortcuts and return those removed.

        Selecting every learned shortcut is a clear all and needs ``confirm``;
        ``None`` means the user declined. Identities that are not learned are ignored.
        """
        selected = [i for i in dict.fromkeys(identities) if self._ledger.is_learned(i)]
        if not selected:
            return []
        if len(selected) == len(self._ledger):
            if not await self.clear_all(confirm):
                return None
            return selected
        await self._ledger.unlearn_many(selected)
        return selected

    async def clear_all(self, confirm: Confirm) -> bool:
        """Clear every learned shortcut once ``confirm`` approves; returns whether it ran."""
        if not await confirm(CLEAR_ALL_WARNING):
            logger.info("clear all learned shortcuts cancelled")
            return False
        await self._ledger.clear_all()
        return True
