"""
Command and category schema.

Both collections are stored as JSON arrays. Optional string fields are
omitted from the JSON when empty so files written by older versions (which
had no category or alias) still load, and files written here stay readable
by them.

  commands.json:   [{"id", "content", "category"?, "alias"?, "createdAt"}, ...]
  categories.json: [{"id", "name", "color"?, "createdAt"}, ...]
"""
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional


UNCATEGORIZED = ""

# createdAt for entries whose timestamp is missing or unreadable
ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

_id_lock = threading.Lock()
_last_id_ns = 0


def now() -> datetime:
    """Timezone-aware local timestamp."""
    return datetime.now().astimezone()


def generate_id() -> str:
    """
    Generate a time-based ID (YYYYMMDDHHMMSS.nnnnnnnnn, local time).

    IDs are strictly increasing within the process: a call landing on the
    same nanosecond as the previous one is bumped forward.
    """
    global _last_id_ns
    with _id_lock:
        ns = max(time.time_ns(), _last_id_ns + 1)
        _last_id_ns = ns
    secs, frac = divmod(ns, 1_000_000_000)
    return datetime.fromtimestamp(secs).strftime("%Y%m%d%H%M%S") + f".{frac:09d}"


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an RFC3339-like timestamp. Returns None if unparseable."""
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def format_timestamp(value: datetime) -> str:
    return value.isoformat() if isinstance(value, datetime) else str(value)


def _str_field(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    return value if isinstance(value, str) else ""


@dataclass
class Command:
    """A stored text snippet, usually a shell command line."""

    id: str
    content: str
    category: str = UNCATEGORIZED   # "" = uncategorized, else a Category id
    alias: str = ""                 # optional, unique when non-empty
    created_at: datetime = field(default_factory=now)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"id": self.id, "content": self.content}
        if self.category:
            data["category"] = self.category
        if self.alias:
            data["alias"] = self.alias
        data["createdAt"] = format_timestamp(self.created_at)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Command":
        # category/alias are absent in files written before they existed
        return cls(
            id=_str_field(data, "id"),
            content=_str_field(data, "content"),
            category=_str_field(data, "category"),
            alias=_str_field(data, "alias"),
            created_at=parse_timestamp(data.get("createdAt")) or ZERO_TIME,
        )


@dataclass
class Category:
    """A named, optionally colored grouping for commands."""

    id: str
    name: str
    color: str = ""                 # display hint, e.g. "#ff0000"
    created_at: datetime = field(default_factory=now)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"id": self.id, "name": self.name}
        if self.color:
            data["color"] = self.color
        data["createdAt"] = format_timestamp(self.created_at)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Category":
        return cls(
            id=_str_field(data, "id"),
            name=_str_field(data, "name"),
            color=_str_field(data, "color"),
            created_at=parse_timestamp(data.get("createdAt")) or ZERO_TIME,
        )
