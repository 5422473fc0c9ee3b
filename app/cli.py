"""
Command-line journal.

Usage:
    journal add "today I ran 5k"
    journal list --search run --tag fitness --view grid
    journal edit 3f2a9c1b "today I ran 10k"
    journal pin 3f2a9c1b
    journal tag add 3f2a9c1b fitness
    journal tag remove 3f2a9c1b fitness
    journal tags
    journal delete 3f2a9c1b
    journal theme toggle
    journal serve --port 8000

Entries are stored in JOURNAL_STORAGE_PATH (or --storage); reflections
come from the service at JOURNAL_API_URL (or --api-url). Entry ids can be
abbreviated to any unique prefix.
"""

import argparse
import asyncio
import logging
import shutil
import sys
from typing import List, Optional

from app.core.config import settings
from app.features.journaling import (
    EntryFilter,
    EntryStore,
    LocalStorage,
    Preferences,
    ReflectionClient,
    ServiceError,
)
from app.features.journaling.views import render
from app.shared.constants import VIEW_MODES
from app.shared.correlation import CorrelationContext
from app.shared.logging_config import setup_logging

logger = logging.getLogger("Journal.CLI")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="journal", description="AI journal with generated reflections")
    parser.add_argument("--storage", default=str(settings.JOURNAL_STORAGE_PATH), help="Storage file path")
    parser.add_argument("--api-url", default=settings.JOURNAL_API_URL, help="Reflection endpoint URL")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logs")

    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="Write a new entry")
    add.add_argument("text", nargs="+")

    edit = sub.add_parser("edit", help="Rewrite an entry and regenerate its reflection")
    edit.add_argument("id")
    edit.add_argument("text", nargs="+")

    delete = sub.add_parser("delete", help="Delete an entry")
    delete.add_argument("id")
    delete.add_argument("-y", "--yes", action="store_true", help="Skip confirmation")

    pin = sub.add_parser("pin", help="Pin or unpin an entry")
    pin.add_argument("id")

    tag = sub.add_parser("tag", help="Add or remove a tag")
    tag.add_argument("action", choices=["add", "remove"])
    tag.add_argument("id")
    tag.add_argument("tag")

    sub.add_parser("tags", help="List all tags")

    list_cmd = sub.add_parser("list", help="Show entries")
    list_cmd.add_argument("-s", "--search", default="", help="Case-insensitive text search")
    list_cmd.add_argument("-t", "--tag", action="append", default=[], help="Only entries with this tag (repeatable)")
    list_cmd.add_argument("--view", choices=VIEW_MODES, default="list")
    list_cmd.add_argument("--color", action="store_true", help="Colorize output using the theme")

    theme = sub.add_parser("theme", help="Show or change the dark mode preference")
    theme.add_argument("mode", nargs="?", choices=["on", "off", "toggle"])

    serve = sub.add_parser("serve", help="Run the reflection service")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8000)

    return parser


def resolve_id(store: EntryStore, ref: str) -> Optional[str]:
    """Full entry id for an exact id or a unique prefix."""
    if store.get(ref) is not None:
        return ref
    matches = [entry.id for entry in store.entries if entry.id.startswith(ref)]
    if len(matches) == 1:
        return matches[0]
    if matches:
        print(f"'{ref}' matches {len(matches)} entries, use a longer id", file=sys.stderr)
    else:
        print(f"No entry matches '{ref}'", file=sys.stderr)
    return None


def confirm(question: str) -> bool:
    try:
        answer = input(f"{question} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")


async def _reflect_and_store(store: EntryStore, args) -> int:
    try:
        if args.command == "add":
            entry = await store.create(" ".join(args.text))
        else:
            entry_id = resolve_id(store, args.id)
            if entry_id is None:
                return 1
            entry = await store.edit(entry_id, " ".join(args.text))
            if entry is None:
                print("Entry no longer exists", file=sys.stderr)
                return 1
    except ServiceError as e:
        print(f"Could not get a reflection: {e}", file=sys.stderr)
        return 1
    finally:
        await store.client.aclose()

    print(render([entry]))
    return 0


def _run_mutation(store: EntryStore, args) -> int:
    entry_id = resolve_id(store, args.id)
    if entry_id is None:
        return 1

    if args.command == "delete":
        if not args.yes and not confirm("Are you sure you want to delete this entry?"):
            print("Cancelled")
            return 0
        store.delete(entry_id)
        print(f"Deleted {entry_id}")
        return 0

    if args.command == "pin":
        entry = store.toggle_pin(entry_id)
        print("Pinned" if entry.is_pinned else "Unpinned")
        return 0

    if args.action == "add":
        entry = store.add_tag(entry_id, args.tag)
    else:
        entry = store.remove_tag(entry_id, args.tag)
    print("Tags: " + (", ".join(entry.tags) or "(none)"))
    return 0


def run(args) -> int:
    if args.command == "serve":
        import uvicorn
        uvicorn.run("main:app", host=args.host, port=args.port)
        return 0

    storage = LocalStorage(args.storage)

    if args.command == "theme":
        preferences = Preferences(storage)
        if args.mode == "toggle":
            preferences.toggle_dark_mode()
        elif args.mode is not None:
            preferences.set_dark_mode(args.mode == "on")
        print("Dark mode: " + ("on" if preferences.dark_mode else "off"))
        return 0

    store = EntryStore(storage, ReflectionClient(endpoint_url=args.api_url))

    if store.load_failed and args.command in ("add", "edit", "delete", "pin", "tag"):
        print(f"Stored entries in {args.storage} could not be read; fix or move the file first", file=sys.stderr)
        return 1

    if args.command in ("add", "edit"):
        return asyncio.run(_reflect_and_store(store, args))

    if args.command in ("delete", "pin", "tag"):
        return _run_mutation(store, args)

    if args.command == "tags":
        counts = store.tag_counts()
        if not counts:
            print("No tags.")
        for tag, count in counts.items():
            print(f"#{tag} ({count})")
        return 0

    entries = store.list(EntryFilter(search=args.search, tags=args.tag))
    width = shutil.get_terminal_size((80, 24)).columns
    print(render(
        entries,
        mode=args.view,
        width=width,
        dark_mode=Preferences(storage).dark_mode,
        color=args.color,
    ))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(
        service_name=settings.SERVICE_NAME,
        level="DEBUG" if args.verbose else "WARNING",
        json_output=False,
        stream=sys.stderr,
    )

    with CorrelationContext():
        return run(args)


if __name__ == "__main__":
    sys.exit(main())
