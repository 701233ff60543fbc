"""
Command store: JSON-file persistence for commands and categories.

Both collections are held in memory and each is mirrored to its own file
(commands.json, categories.json) in the data directory. Every mutation
builds a new collection, rewrites the whole file, swaps the new collection
in, then notifies listeners.
"""
import json
import logging
import threading
from contextlib import suppress
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from .config import default_data_dir
from .errors import DuplicateAlias, LoadError, NotFound, PersistError
from .events import UpdateCallback, UpdateNotifier
from .schema import UNCATEGORIZED, Category, Command, generate_id

logger = logging.getLogger(__name__)

COMMANDS_FILE = "commands.json"
CATEGORIES_FILE = "categories.json"


def _read_entries(path: Path) -> Optional[List[Dict[str, Any]]]:
    """Read a JSON array of objects. Returns None if the file does not exist."""
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as e:
        raise LoadError(path, str(e)) from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise LoadError(path, f"invalid JSON ({e})") from e

    if data is None:  # "null" is how an empty collection was once written
        return []
    if not isinstance(data, list) or not all(isinstance(d, dict) for d in data):
        raise LoadError(path, "expected a JSON array of objects")
    return data


def _write_entries(path: Path, entries: List[Dict[str, Any]]) -> None:
    """Rewrite a backing file. Atomic: write to temp, then rename."""
    tmp_file = path.with_name(path.name + ".tmp")
    try:
        payload = json.dumps(entries, indent=2, ensure_ascii=False)
        with open(tmp_file, "w", encoding="utf-8") as f:
            f.write(payload)
        tmp_file.replace(path)
    except (OSError, TypeError, ValueError) as e:
        with suppress(OSError):
            tmp_file.unlink(missing_ok=True)
        logger.error(f"Failed to write {path}: {e}")
        raise PersistError(path, e) from e


class CommandStore:
    """JSON-backed store for commands and categories."""

    def __init__(self, data_dir: Union[str, Path, None] = None):
        """Resolve file paths and load both collections."""
        self.notifier = UpdateNotifier()
        self._lock = threading.RLock()
        self.commands_path, self.categories_path = self._init_paths(data_dir)
        self._commands: List[Command] = self._load(self.commands_path, Command)
        self._categories: List[Category] = self._load(self.categories_path, Category)

    def _init_paths(self, data_dir) -> Tuple[Path, Path]:
        """Ensure the data directory exists; fall back to the working directory."""
        directory = Path(data_dir) if data_dir else default_data_dir()
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(
                f"Cannot create data directory {directory} ({e}); "
                "using the working directory instead"
            )
            return Path(COMMANDS_FILE), Path(CATEGORIES_FILE)
        return directory / COMMANDS_FILE, directory / CATEGORIES_FILE

    def _load(self, path: Path, model) -> list:
        """Load one collection. Missing or corrupt files start empty."""
        try:
            entries = _read_entries(path)
        except LoadError as e:
            logger.warning(f"{e}; starting with an empty collection")
            return []
        if entries is None:
            return []
        return [model.from_dict(d) for d in entries]

    def _commit(
        self,
        commands: Optional[List[Command]] = None,
        categories: Optional[List[Category]] = None,
    ) -> None:
        """
        Persist new collections, then swap them in.

        In-memory state is only replaced once every write succeeded. If the
        second write fails the first file is rewritten with its old content.
        """
        writes = []
        if categories is not None:
            writes.append((self.categories_path, categories, self._categories))
        if commands is not None:
            writes.append((self.commands_path, commands, self._commands))

        written = []
        for path, new, old in writes:
            try:
                _write_entries(path, [item.to_dict() for item in new])
            except PersistError:
                for done_path, done_old in written:
                    try:
                        _write_entries(done_path, [item.to_dict() for item in done_old])
                    except PersistError:
                        logger.error(f"Could not restore {done_path}; it no longer matches memory")
                raise
            written.append((path, old))

        if categories is not None:
            self._categories = categories
        if commands is not None:
            self._commands = commands

    # ── Listeners ─────────────────────────────────────────────────────────

    def set_update_callback(self, callback: Optional[UpdateCallback]) -> None:
        """Register the callback run after every successful mutation (last one wins)."""
        self.notifier.set_callback(callback)

    def subscribe(self, callback: UpdateCallback) -> UpdateCallback:
        return self.notifier.subscribe(callback)

    def unsubscribe(self, callback: UpdateCallback) -> None:
        self.notifier.unsubscribe(callback)

    # ── Commands ──────────────────────────────────────────────────────────

    def _command_index(self, command_id: str) -> int:
        for i, cmd in enumerate(self._commands):
            if cmd.id == command_id:
                return i
        raise NotFound("command", command_id)

    def _alias_free(self, alias: str, exclude_id: str) -> bool:
        if not alias:
            return True
        return not any(c.alias == alias and c.id != exclude_id for c in self._commands)

    def add_command(self, content: str, category: str = UNCATEGORIZED, alias: str = "") -> Command:
        """Create a command and put it first (newest-first order)."""
        with self._lock:
            if not self._alias_free(alias, ""):
                raise DuplicateAlias(alias)
            cmd = Command(id=generate_id(), content=content, category=category, alias=alias)
            self._commit(commands=[cmd] + self._commands)
        self.notifier.emit()
        return replace(cmd)

    def get_commands(self) -> List[Command]:
        """Snapshot of all commands, newest first."""
        with self._lock:
            return [replace(c) for c in self._commands]

    def get_command(self, command_id: str) -> Command:
        with self._lock:
            return replace(self._commands[self._command_index(command_id)])

    def delete_command(self, command_id: str) -> None:
        with self._lock:
            index = self._command_index(command_id)
            self._commit(commands=self._commands[:index] + self._commands[index + 1:])
        self.notifier.emit()

    def update_command(self, command_id: str, content: str, category: str, alias: str) -> Command:
        """Replace content, category and alias of an existing command."""
        with self._lock:
            index = self._command_index(command_id)
            current = self._commands[index]
            if alias and alias != current.alias and not self._alias_free(alias, command_id):
                raise DuplicateAlias(alias)
            updated = replace(current, content=content, category=category, alias=alias)
            commands = list(self._commands)
            commands[index] = updated
            self._commit(commands=commands)
        self.notifier.emit()
        return replace(updated)

    def update_command_category(self, command_id: str, category: str) -> None:
        with self._lock:
            index = self._command_index(command_id)
            commands = list(self._commands)
            commands[index] = replace(commands[index], category=category)
            self._commit(commands=commands)
        self.notifier.emit()

    def get_command_by_alias(self, alias: str) -> Command:
        """First command holding the alias. Empty aliases never match."""
        with self._lock:
            if alias:
                for cmd in self._commands:
                    if cmd.alias == alias:
                        return replace(cmd)
        raise NotFound("alias", alias)

    def validate_alias(self, alias: str, exclude_id: str = "") -> bool:
        """True if no command other than exclude_id holds the alias. Empty is always valid."""
        with self._lock:
            return self._alias_free(alias, exclude_id)

    def get_commands_by_category(self, category_id: str) -> List[Command]:
        """Commands in a category; "" selects uncategorized ones."""
        with self._lock:
            return [replace(c) for c in self._commands if c.category == category_id]

    def search_commands(self, query: str, category_id: Optional[str] = None) -> List[Command]:
        """Case-insensitive substring match on content and alias."""
        needle = query.strip().lower()
        with self._lock:
            results = []
            for cmd in self._commands:
                if category_id is not None and cmd.category != category_id:
                    continue
                if needle and needle not in cmd.content.lower() and needle not in cmd.alias.lower():
                    continue
                results.append(replace(cmd))
            return results

    # ── Categories ────────────────────────────────────────────────────────

    def _category_index(self, category_id: str) -> int:
        for i, cat in enumerate(self._categories):
            if cat.id == category_id:
                return i
        raise NotFound("category", category_id)

    def get_categories(self) -> List[Category]:
        """Snapshot of all categories, in creation order."""
        with self._lock:
            return [replace(c) for c in self._categories]

    def get_category(self, category_id: str) -> Category:
        with self._lock:
            return replace(self._categories[self._category_index(category_id)])

    def category_name(self, category_id: str) -> str:
        """Display name for a command's category field."""
        if not category_id:
            return "Uncategorized"
        with self._lock:
            for cat in self._categories:
                if cat.id == category_id:
                    return cat.name
        return "Unknown"

    def create_category(self, name: str, color: str = "") -> Category:
        """Create a category, or return the existing one with the same name."""
        with self._lock:
            for cat in self._categories:
                if cat.name == name:
                    return replace(cat)
            cat = Category(id=generate_id(), name=name, color=color)
            self._commit(categories=self._categories + [cat])
        self.notifier.emit()
        return replace(cat)

    def update_category(self, category_id: str, name: str, color: str) -> Category:
        with self._lock:
            index = self._category_index(category_id)
            updated = replace(self._categories[index], name=name, color=color)
            categories = list(self._categories)
            categories[index] = updated
            self._commit(categories=categories)
        self.notifier.emit()
        return replace(updated)

    def _remove_category(self, category_id: str, reassign_to: str) -> None:
        """Drop a category and move its commands to reassign_to. Caller holds the lock."""
        index = self._category_index(category_id)
        commands = [
            replace(c, category=reassign_to) if c.category == category_id else c
            for c in self._commands
        ]
        categories = self._categories[:index] + self._categories[index + 1:]
        self._commit(commands=commands, categories=categories)

    def delete_category(self, category_id: str, reassign_to: str = UNCATEGORIZED) -> None:
        """Delete a category; its commands move to reassign_to ("" = uncategorized)."""
        if reassign_to == category_id:
            raise ValueError("cannot reassign commands to the category being deleted")
        with self._lock:
            self._remove_category(category_id, reassign_to)
        self.notifier.emit()

    def merge_categories(self, source_id: str, target_id: str) -> None:
        """Move every command from source to target, then delete source."""
        if source_id == target_id:
            raise ValueError("cannot merge a category into itself")
        with self._lock:
            self._category_index(target_id)
            self._remove_category(source_id, target_id)
        self.notifier.emit()

    # ── Disk sync ─────────────────────────────────────────────────────────

    def reload(self) -> bool:
        """
        Re-read both backing files (e.g. after an external edit).

        Unreadable files leave the current state untouched. Listeners are
        notified only when the reloaded state differs. Returns True if it did.
        """
        with self._lock:
            try:
                command_entries = _read_entries(self.commands_path)
                category_entries = _read_entries(self.categories_path)
            except LoadError as e:
                logger.warning(f"{e}; keeping current state")
                return False
            commands = [Command.from_dict(d) for d in command_entries or []]
            categories = [Category.from_dict(d) for d in category_entries or []]
            if commands == self._commands and categories == self._categories:
                return False
            self._commands = commands
            self._categories = categories
        logger.info("Reloaded store from disk")
        self.notifier.emit()
        return True
