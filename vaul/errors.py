"""
Errors raised by the command store.

Every store failure is a VaultError so callers can catch one type.
"""
from typing import Optional


class VaultError(Exception):
    """Base class for command store failures."""
    pass


class DuplicateAlias(VaultError):
    """Raised when an alias is already held by another command."""

    def __init__(self, alias: str):
        self.alias = alias
        super().__init__(f"alias '{alias}' already exists")


class NotFound(VaultError):
    """Raised when a referenced command, category or alias does not exist."""

    def __init__(self, kind: str, key: str):
        self.kind = kind
        self.key = key
        field = "alias" if kind == "alias" else "id"
        noun = "command" if kind == "alias" else kind
        super().__init__(f"{noun} with {field} '{key}' not found")


class PersistError(VaultError):
    """Raised when a backing file cannot be written."""

    def __init__(self, path, cause: Optional[BaseException] = None):
        self.path = str(path)
        self.cause = cause
        msg = f"failed to write {self.path}"
        if cause is not None:
            msg += f": {cause}"
        super().__init__(msg)


class LoadError(VaultError):
    """Raised when a backing file exists but cannot be read or parsed."""

    def __init__(self, path, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"cannot load {self.path}: {reason}")


class ConfigError(Exception):
    """Raised when an explicitly requested config file is missing or invalid."""
    pass
