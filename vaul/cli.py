#!/usr/bin/env python3
"""
Vaul command-line entry point

Runs a saved command by alias, or manages the vault from the terminal.

Usage:
    vaul gs                                   # run the command aliased "gs"
    vaul --list                               # list saved commands
    vaul --search docker                      # filter by content/alias
    vaul --add "git status" --alias gs --category Git
    vaul --delete 20250101120000.000000001
    vaul --categories
    vaul --watch                              # live list, refreshed on change
"""

import argparse
import logging
import sys
import time
from typing import List, Optional

from .config import Config
from .emitter import WebhookEmitter
from .errors import ConfigError, NotFound, VaultError
from .runner import execute_command
from .schema import Command
from .store import CommandStore
from .watcher import StoreWatcher


# ── Formatting ─────────────────────────────────────────────────────────────

def format_commands(store: CommandStore, commands: List[Command], title: str = "Commands") -> str:
    """Render commands as an aligned, newest-first listing."""
    if not commands:
        return "No commands saved."
    lines = [f"{title} ({len(commands)}):"]
    for cmd in commands:
        alias = f"@{cmd.alias}" if cmd.alias else "-"
        category = store.category_name(cmd.category)
        lines.append(f"  {cmd.id}  {alias:<12} [{category}]  {cmd.content}")
    return "\n".join(lines)


def format_categories(store: CommandStore) -> str:
    categories = store.get_categories()
    if not categories:
        return "No categories."
    lines = [f"Categories ({len(categories)}):"]
    for cat in categories:
        count = len(store.get_commands_by_category(cat.id))
        color = f" {cat.color}" if cat.color else ""
        lines.append(f"  {cat.id}  {cat.name}{color}  ({count} commands)")
    return "\n".join(lines)


# ── Actions ────────────────────────────────────────────────────────────────

def build_store(cfg: Config) -> CommandStore:
    """Open the store and attach the webhook listener if configured."""
    store = CommandStore(cfg.data_dir)
    if cfg.notify_url:
        store.subscribe(WebhookEmitter(cfg.notify_url))
    return store


def run_alias(store: CommandStore, alias: str, shell: str = "") -> int:
    """Execute the command saved under `alias`. Returns the exit code."""
    try:
        cmd = store.get_command_by_alias(alias)
    except NotFound as e:
        print(f"Error: {e}\nUse 'vaul --list' to see saved commands.", file=sys.stderr)
        return 1

    try:
        return execute_command(cmd.content, shell)
    except OSError as e:
        print(f"Error executing command: {e}", file=sys.stderr)
        return 1


def add_command(store: CommandStore, content: str, alias: str = "",
                category_name: str = "", color: str = "") -> Command:
    """Save a command, creating its category by name if needed."""
    content = content.strip()
    if not content:
        raise ValueError("command content cannot be empty")
    category_id = ""
    if category_name.strip():
        category_id = store.create_category(category_name.strip(), color).id
    return store.add_command(content, category_id, alias.strip())


def watch(store: CommandStore, debounce_ms: int) -> int:
    """Print the list now and after every change, until Ctrl+C."""
    def _refresh():
        print(format_commands(store, store.get_commands()), flush=True)

    store.set_update_callback(_refresh)
    _refresh()
    with StoreWatcher(store, debounce_ms):
        print("Watching for changes. Ctrl+C to stop.", flush=True)
        try:
            while True:
                time.sleep(1)
        except KeyboardInterrupt:
            print("\nStopping...")
    return 0


# ── Entry point ────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="vaul",
        description="Vaul: store, organize and run terminal commands by alias",
    )
    ap.add_argument("alias", nargs="?", help="Run the command saved under this alias")

    actions = ap.add_mutually_exclusive_group()
    actions.add_argument("-l", "--list", action="store_true", help="List saved commands")
    actions.add_argument("-s", "--search", metavar="QUERY", help="Search commands by content or alias")
    actions.add_argument("--add", metavar="CONTENT", help="Save a new command")
    actions.add_argument("--delete", metavar="ID", help="Delete a command by id")
    actions.add_argument("--categories", action="store_true", help="List categories")
    actions.add_argument("--watch", action="store_true", help="Show the list and refresh on changes")

    ap.add_argument("--alias", dest="new_alias", default="", metavar="ALIAS",
                    help="Alias for --add")
    ap.add_argument("--category", default="", metavar="NAME",
                    help="Category name for --add (created if missing)")
    ap.add_argument("--color", default="", help="Color for a category created by --add")
    ap.add_argument("--config", default=None, help="Path to config.yaml")
    ap.add_argument("--data-dir", default=None, help="Directory holding commands.json/categories.json")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)

    has_action = any([args.list, args.search is not None, args.add is not None,
                      args.delete is not None, args.categories, args.watch])
    if args.alias and has_action:
        ap.error("an alias cannot be combined with other actions")
    if (args.new_alias or args.category) and args.add is None:
        ap.error("--alias and --category require --add")

    try:
        cfg = Config.load(args.config, strict=bool(args.config))
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    if args.data_dir:
        cfg.data_dir = args.data_dir
        cfg.resolve_paths()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else cfg.level,
        format="%(asctime)s [vaul] %(levelname)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    store = build_store(cfg)

    if args.alias:
        return run_alias(store, args.alias, cfg.shell)

    try:
        if args.add is not None:
            cmd = add_command(store, args.add, args.new_alias, args.category, args.color)
            print(f"Saved {cmd.id}" + (f" as @{cmd.alias}" if cmd.alias else ""))
        elif args.delete is not None:
            store.delete_command(args.delete)
            print(f"Deleted {args.delete}")
        elif args.search is not None:
            print(format_commands(store, store.search_commands(args.search), title="Matches"))
        elif args.categories:
            print(format_categories(store))
        elif args.watch:
            return watch(store, cfg.watch_debounce_ms)
        else:
            print(format_commands(store, store.get_commands()))
            if not args.list:
                print("\nRun a command with: vaul <alias>")
    except (VaultError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
