"""Shortcut catalog — immutable table of shortcut records grouped by interaction type."""

from __future__ import annotations

from dataclasses import dataclass
from importlib import resources
from pathlib import Path

from instrukt_ai_logging import get_logger
from pydantic import BaseModel, ConfigDict

from keycoach.errors import CatalogLoadError

logger = get_logger(__name__)

MIN_FIELDS = 4


@dataclass(frozen=True, slots=True)
class ShortcutIdentity:
    """Natural key of a shortcut: the key combination plus its action description."""

    shortcut_keys: str
    action_description: str


class ShortcutRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    interaction_type: str
    shortcut_keys: str
    action_description: str
    implemented: bool = False

    @property
    def identity(self) -> ShortcutIdentity:
        return ShortcutIdentity(self.shortcut_keys, self.action_description)


def parse_csv_line(line: str) -> list[str]:
    """Split one catalog line on commas, honouring double-quoted sections.

    A quote toggles the quoted state and is dropped from the field; commas inside
    quotes are kept. Every field is stripped.
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    fields.append("".join(current).strip())
    return fields


def _record_from_fields(fields: list[str]) -> ShortcutRecord | None:
    if len(fields) < MIN_FIELDS:
        return None
    return ShortcutRecord(
        interaction_type=fields[0],
        implemented=fields[1].lower() == "true",
        shortcut_keys=fields[2],
        action_description=fields[3],
    )


class ShortcutCatalog:
    def __init__(self, records: list[ShortcutRecord]) -> None:
        self._records: tuple[ShortcutRecord, ...] = tuple(records)
        grouped: dict[str, list[ShortcutRecord]] = {}
        for record in self._records:
            grouped.setdefault(record.interaction_type, []).append(record)
        self._by_type: dict[str, tuple[ShortcutRecord, ...]] = {k: tuple(v) for k, v in grouped.items()}

    @classmethod
    def from_text(cls, text: str) -> "ShortcutCatalog":
        records: list[ShortcutRecord] = []
        lines = text.split("\n")
        # First line is the header.
        for lineno, raw in enumerate(lines[1:], start=2):
            line = raw.strip()
            if not line:
                continue
            record = _record_from_fields(parse_csv_line(line))
            if record is None:
                logger.debug("catalog: skipping malformed row", line=lineno)
                continue
            records.append(record)
        return cls(records)

    @classmethod
    def load(cls, path: str | Path) -> "ShortcutCatalog":
        source = Path(path).expanduser()
        try:
            text = source.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise CatalogLoadError(f"Cannot read shortcut catalog {source}: {exc}") from exc
        catalog = cls.from_text(text)
        logger.info("catalog loaded", path=str(source), records=len(catalog), types=len(catalog._by_type))
        return catalog

    def shortcuts_for_type(self, interaction_type: str) -> list[ShortcutRecord]:
        return list(self._by_type.get(interaction_type, ()))

    def all_records(self) -> list[ShortcutRecord]:
        return list(self._records)

    def interaction_types(self) -> list[str]:
        return list(self._by_type)

    def __len__(self) -> int:
        return len(self._records)


def default_catalog_path() -> Path:
    return Path(str(resources.files("keycoach") / "data" / "shortcuts.csv"))


def load_default_catalog() -> ShortcutCatalog:
    return ShortcutCatalog.load(default_catalog_path())
