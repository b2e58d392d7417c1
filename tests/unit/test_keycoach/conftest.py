"""Shared fixtures for keycoach unit tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from keycoach.db import SlotStore
from keycoach.ledger import LearnedLedger
from keycoach.presentation import SinkResponse


class FakeClock:
    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSink:
    """Presentation sink that records prompts and answers with a fixed response."""

    def __init__(self, response: SinkResponse | None = SinkResponse.DISMISS) -> None:
        self.response = response
        self.messages: list[str] = []
        self.options: list[tuple[str, str]] = []

    async def present(self, message: str, options: tuple[str, str]) -> SinkResponse | None:
        self.messages.append(message)
        self.options.append(options)
        return self.response


@pytest.fixture
async def store(tmp_path: Path) -> SlotStore:  # type: ignore[misc]
    slot_store = SlotStore(db_path=tmp_path / "keycoach.db")
    await slot_store.init()
    yield slot_store  # type: ignore[misc]
    await slot_store.close()


@pytest.fixture
async def ledger(store: SlotStore) -> LearnedLedger:
    return await LearnedLedger.open(store)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()
