"""keycoach command line.

  keycoach learned list [--json] [--search TEXT]
  keycoach learned unlearn KEYS ACTION [KEYS ACTION ...] [--yes]
  keycoach learned clear [--yes]
  keycoach catalog [--type TYPE] [--json]
  keycoach replay EVENTS.jsonl

Exit codes: 0 ok, 1 catalog, ledger or storage failure, 2 usage error.
"""

from __future__ import annotations

import argparse
import asyncio
import json
from dataclasses import asdict
from pathlib import Path
from typing import Callable, Optional

from instrukt_ai_logging import get_logger
from pydantic import ValidationError

from keycoach.catalog import ShortcutCatalog, ShortcutIdentity
from keycoach.config import KeycoachConfig, load_config
from keycoach.db import SlotStore
from keycoach.errors import KeycoachError
from keycoach.events import InteractionEvent
from keycoach.ledger import LearnedLedger
from keycoach.logging_config import setup_logging
from keycoach.manage import Confirm, LearnedShortcutsManager
from keycoach.presentation import ConsolePresentationSink
from keycoach.runtime import load_catalog, start_runtime

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


class ReplayClock:
    """Clock that reports the timestamp of the event currently being replayed."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="keycoach", description="Keyboard shortcut suggestions for editor activity.")
    parser.add_argument("--config", type=Path, default=None, help="Path to keycoach.yml.")
    parser.add_argument("--log-level", default=None, help="Override KEYCOACH_LOG_LEVEL.")
    sub = parser.add_subparsers(dest="command", required=True)

    learned = sub.add_parser("learned", help="Manage learned shortcuts.")
    learned_sub = learned.add_subparsers(dest="learned_command", required=True)
    learned_list = learned_sub.add_parser("list", help="List learned shortcuts.")
    learned_list.add_argument("--json", action="store_true", help="Machine-readable output.")
    learned_list.add_argument("--search", default=None, help="Only entries whose keys or action contain this text.")
    unlearn = learned_sub.add_parser("unlearn", help="Unlearn one or more shortcuts.")
    unlearn.add_argument(
        "pairs",
        nargs="+",
        metavar="KEYS ACTION",
        help="Key combination and action description exactly as learned, repeated per shortcut.",
    )
    unlearn.add_argument("--yes", action="store_true", help="Skip the prompt when every shortcut is selected.")
    clear = learned_sub.add_parser("clear", help="Unlearn every shortcut.")
    clear.add_argument("--yes", action="store_true", help="Skip the confirmation prompt.")

    catalog = sub.add_parser("catalog", help="Show the shortcut catalog.")
    catalog.add_argument("--type", dest="interaction_type", default=None, help="Only this interaction type.")
    catalog.add_argument("--json", action="store_true", help="Machine-readable output.")

    replay = sub.add_parser("replay", help="Feed JSON-lines interaction events through the engine.")
    replay.add_argument("events", type=Path, help="File with one event object per line.")
    return parser


def _prompt_confirm(input_fn: Callable[[str], str]) -> Confirm:
    async def _confirm(message: str) -> bool:
        answer = await asyncio.to_thread(input_fn, f"{message} [y/N]: ")
        return answer.strip().lower() in {"y", "yes"}

    return _confirm


async def _yes(_message: str) -> bool:
    return True


def _identity_pairs(values: list[str]) -> list[ShortcutIdentity]:
    return [ShortcutIdentity(keys, action) for keys, action in zip(values[::2], values[1::2])]


async def _learned_command(args: argparse.Namespace, config: KeycoachConfig, input_fn: Callable[[str], str]) -> int:
    async with SlotStore(config.database_path) as store:
        manager = LearnedShortcutsManager(await LearnedLedger.open(store))

        if args.learned_command == "list":
            entries = manager.search(args.search) if args.search else manager.list_learned()
            if args.json:
                print(json.dumps([asdict(e) for e in entries], indent=2))
            elif not entries:
                print("No matching learned shortcuts." if args.search else "No learned shortcuts yet.")
            else:
                for entry in entries:
                    print(f"{entry.shortcut_keys}\t{entry.action_description}")
            return EXIT_OK

        if args.learned_command == "unlearn":
            confirm = _yes if args.yes else _prompt_confirm(input_fn)
            removed = await manager.unlearn_many(_identity_pairs(args.pairs), confirm)
            if removed is None:
                print("Cancelled.")
            elif not removed:
                print("Nothing to unlearn.")
            else:
                for identity in removed:
                    print(f"Unlearned: {identity.shortcut_keys}")
            return EXIT_OK

        confirm = _yes if args.yes else _prompt_confirm(input_fn)
        if await manager.clear_all(confirm):
            print("All shortcuts have been unlearned.")
        else:
            print("Cancelled.")
        return EXIT_OK


def _catalog_command(args: argparse.Namespace, catalog: ShortcutCatalog) -> int:
    records = catalog.shortcuts_for_type(args.interaction_type) if args.interaction_type else catalog.all_records()
    if args.json:
        print(json.dumps([r.model_dump() for r in records], indent=2))
        return EXIT_OK
    for record in records:
        print(f"{record.interaction_type}\t{record.shortcut_keys}\t{record.action_description}")
    return EXIT_OK


def read_events(path: Path) -> list[InteractionEvent]:
    """Parse a JSON-lines event file; blank lines are skipped, bad lines raise ValueError."""
    events: list[InteractionEvent] = []
    with open(path, "r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            if not line.strip():
                continue
            try:
                events.append(InteractionEvent.model_validate_json(line))
            except ValidationError as exc:
                raise ValueError(f"{path}:{lineno}: invalid event: {exc.error_count()} error(s)") from exc
    return events


async def _replay_command(args: argparse.Namespace, config: KeycoachConfig, input_fn: Callable[[str], str]) -> int:
    try:
        events = read_events(args.events)
    except (OSError, ValueError) as exc:
        print(f"Error: {exc}")
        return EXIT_USAGE

    clock = ReplayClock()
    runtime = await start_runtime(config, ConsolePresentationSink(input_fn=input_fn), clock=clock)
    shown = 0
    try:
        for event in events:
            clock.now = event.timestamp.timestamp()
            if await runtime.engine.on_interaction(event) is not None:
                shown += 1
    finally:
        await runtime.close()
    print(f"Replayed {len(events)} event(s), {shown} suggestion(s) shown.")
    return EXIT_OK


async def run(args: argparse.Namespace, config: KeycoachConfig, input_fn: Callable[[str], str] = input) -> int:
    if args.command == "learned":
        return await _learned_command(args, config, input_fn)
    if args.command == "catalog":
        return _catalog_command(args, load_catalog(config))
    return await _replay_command(args, config, input_fn)


def main(argv: Optional[list[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if getattr(args, "learned_command", None) == "unlearn" and len(args.pairs) % 2:
        parser.error("unlearn expects KEYS ACTION pairs")

    try:
        config = load_config(args.config)
    except ValidationError as exc:
        print(f"Error: invalid configuration: {exc}")
        return EXIT_USAGE

    setup_logging(args.log_level or config.log_level)

    try:
        return asyncio.run(run(args, config))
    except KeycoachError as exc:
        logger.error("keycoach command failed", command=args.command, error=str(exc))
        print(f"Error: {exc}")
        return EXIT_FAILURE


if __name__ == "__main__":
    raise SystemExit(main())
