"""Keyboard shortcut suggestions driven by editor interactions."""

from keycoach.catalog import ShortcutCatalog, ShortcutIdentity, ShortcutRecord, load_default_catalog
from keycoach.db import SlotStore
from keycoach.engine import EngineState, Recommendation, RecommendationEngine
from keycoach.errors import CatalogLoadError, KeycoachError, LedgerPersistenceError, StorageError
from keycoach.events import InteractionEvent, InteractionType
from keycoach.filters import EditorFilterStrategy
from keycoach.ledger import LearnedEntry, LearnedLedger
from keycoach.manage import LearnedShortcutsManager
from keycoach.presentation import PresentationSink, SinkResponse
from keycoach.tracker import EditorSnapshot, InteractionTracker

__all__ = [
    "ShortcutCatalog",
    "ShortcutIdentity",
    "ShortcutRecord",
    "load_default_catalog",
    "SlotStore",
    "EngineState",
    "Recommendation",
    "RecommendationEngine",
    "KeycoachError",
    "CatalogLoadError",
    "LedgerPersistenceError",
    "StorageError",
    "InteractionEvent",
    "InteractionType",
    "EditorFilterStrategy",
    "LearnedEntry",
    "LearnedLedger",
    "LearnedShortcutsManager",
    "PresentationSink",
    "SinkResponse",
    "EditorSnapshot",
    "InteractionTracker",
]
