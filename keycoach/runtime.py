"""Runtime wiring: catalog, slot store, ledger and engine built from configuration."""

from __future__ import annotations

import random
import time
from dataclasses import dataclass
from typing import Optional

from instrukt_ai_logging import get_logger

from keycoach.catalog import ShortcutCatalog, load_default_catalog
from keycoach.config import KeycoachConfig
from keycoach.db import SlotStore
from keycoach.engine import Clock, DiagnosticsHook, RecommendationEngine
from keycoach.ledger import LearnedLedger
from keycoach.manage import LearnedShortcutsManager
from keycoach.presentation import PresentationSink

logger = get_logger(__name__)


def load_catalog(config: KeycoachConfig) -> ShortcutCatalog:
    """Load the configured catalog, or the bundled one. Raises CatalogLoadError."""
    if config.catalog_path:
        return ShortcutCatalog.load(config.catalog_path)
    return load_default_catalog()


@dataclass
class Runtime:
    config: KeycoachConfig
    catalog: ShortcutCatalog
    store: SlotStore
    ledger: LearnedLedger
    engine: RecommendationEngine

    @property
    def manager(self) -> LearnedShortcutsManager:
        return LearnedShortcutsManager(self.ledger)

    async def close(self) -> None:
        await self.store.close()


async def start_runtime(
    config: KeycoachConfig,
    sink: PresentationSink,
    *,
    clock: Clock = time.time,
    rng: Optional[random.Random] = None,
    diagnostics: Optional[DiagnosticsHook] = None,
) -> Runtime:
    """Build every component; the catalog loads before the store is opened."""
    catalog = load_catalog(config)

    store = SlotStore(config.database_path)
    await store.init()
    try:
        ledger = await LearnedLedger.open(store)
    except Exception:
        await store.close()
        raise

    engine = RecommendationEngine(
        catalog,
        ledger,
        sink,
        cooldown_interval_s=config.cooldown_interval_s,
        session_recommendation_limit=config.session_recommendation_limit,
        editor_filter=config.editor_filter,
        rng=rng,
        clock=clock,
        diagnostics=diagnostics,
    )
    logger.info(
        "runtime started",
        records=len(catalog),
        learned=len(ledger),
        cooldown_s=config.cooldown_interval_s,
        session_limit=config.session_recommendation_limit,
        editor_filter=config.editor_filter.value,
    )
    return Runtime(config=config, catalog=catalog, store=store, ledger=ledger, engine=engine)
