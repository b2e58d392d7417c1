"""Learned ledger — durable set of shortcuts the user has acknowledged.

The ledger lives in one slot of the :class:`~keycoach.db.SlotStore`. Each entry
is the identity encoded as ``keys|action``; backslashes and pipes inside either
field are escaped with a backslash so any content round-trips. Identities
without those characters are stored verbatim.

The slot is read once when the ledger is opened. Every mutation rewrites the
whole slot under a single lock, and the in-memory set is only replaced after
the write succeeded.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Iterable

import aiosqlite
from instrukt_ai_logging import get_logger

from keycoach.catalog import ShortcutIdentity
from keycoach.db import SlotStore
from keycoach.errors import LedgerPersistenceError

logger = get_logger(__name__)

STORAGE_KEY = "learnedShortcuts"
SEPARATOR = "|"
_ESCAPE = "\\"


@dataclass(frozen=True, slots=True)
class LearnedEntry:
    shortcut_keys: str
    action_description: str


def _escape(value: str) -> str:
    return value.replace(_ESCAPE, _ESCAPE * 2).replace(SEPARATOR, _ESCAPE + SEPARATOR)


def encode_identity(identity: ShortcutIdentity) -> str:
    return f"{_escape(identity.shortcut_keys)}{SEPARATOR}{_escape(identity.action_description)}"


def decode_identity(encoded: str) -> ShortcutIdentity:
    """Split an encoded identity on its first unescaped separator.

    An entry without a separator decodes to keys with an empty action.
    """
    parts: list[str] = []
    current: list[str] = []
    chars = iter(encoded)
    for char in chars:
        if char == _ESCAPE:
            current.append(next(chars, ""))
        elif char == SEPARATOR and not parts:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    parts.append("".join(current))
    if len(parts) == 1:
        return ShortcutIdentity(parts[0], "")
    return ShortcutIdentity(parts[0], parts[1])


class LearnedLedger:
    def __init__(self, store: SlotStore, learned: list[ShortcutIdentity] | None = None) -> None:
        self._store = store
        # dict keeps insertion order for display
        self._learned: dict[ShortcutIdentity, None] = dict.fromkeys(learned or [])
        self._lock = asyncio.Lock()

    @classmethod
    async def open(cls, store: SlotStore) -> "LearnedLedger":
        stored = await store.get_slot(STORAGE_KEY)
        ledger = cls(store, [decode_identity(s) for s in stored])
        logger.debug("ledger loaded", learned=len(ledger._learned))
        return ledger

    def is_learned(self, identity: ShortcutIdentity) -> bool:
        return identity in self._learned

    def all_learned(self) -> set[ShortcutIdentity]:
        return set(self._learned)

    def detailed_learned(self) -> list[LearnedEntry]:
        return [LearnedEntry(i.shortcut_keys, i.action_description) for i in self._learned]

    def __len__(self) -> int:
        return len(self._learned)

    async def mark_learned(self, identity: ShortcutIdentity) -> None:
        async with self._lock:
            updated = dict(self._learned)
            updated[identity] = None
            await self._save(updated)
        logger.info("shortcut learned", keys=identity.shortcut_keys, action=identity.action_description)

    async def unlearn(self, identity: ShortcutIdentity) -> None:
        async with self._lock:
            updated = dict(self._learned)
            updated.pop(identity, None)
            await self._save(updated)
        logger.info("shortcut unlearned", keys=identity.shortcut_keys, action=identity.action_description)

    async def unlearn_many(self, identities: Iterable[ShortcutIdentity]) -> None:
        """Remove several identities with a single write; absent ones are ignored."""
        removed = set(identities)
        async with self._lock:
            await self._save({i: None for i in self._learned if i not in removed})
        logger.info("shortcuts unlearned", count=len(removed))

    async def clear_all(self) -> None:
        async with self._lock:
            await self._save({})
        logger.info("all learned shortcuts cleared")

    async def _save(self, updated: dict[ShortcutIdentity, None]) -> None:
        try:
            await self._store.put_slot(STORAGE_KEY, [encode_identity(i) for i in updated])
        except (aiosqlite.Error, OSError, RuntimeError) as exc:
            raise LedgerPersistenceError(f"Failed to persist learned shortcuts: {exc}") from exc
        self._learned = updated
