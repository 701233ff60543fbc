# Vaul configuration
# Override paths and endpoints via config.yaml, VAUL_* environment variables or CLI args.

import logging
import os
import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Mapping, Optional

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)

APP_NAME = "vaul"
CONFIG_FILE = "config.yaml"


def user_config_dir(platform: Optional[str] = None, env: Optional[Mapping[str, str]] = None) -> Path:
    """
    Per-user configuration root for the current platform.

    %APPDATA% on Windows, ~/Library/Application Support on macOS,
    $XDG_CONFIG_HOME or ~/.config elsewhere. Falls back to "." when
    the location cannot be determined.
    """
    platform = platform or sys.platform
    env = os.environ if env is None else env
    try:
        if platform == "win32":
            appdata = env.get("APPDATA")
            if not appdata:
                raise ValueError("%APPDATA% is not set")
            return Path(appdata)

        home = Path(env["HOME"]) if env.get("HOME") else Path.home()
        if platform == "darwin":
            return home / "Library" / "Application Support"

        xdg = env.get("XDG_CONFIG_HOME", "")
        if xdg and Path(xdg).is_absolute():
            return Path(xdg)
        return home / ".config"
    except (RuntimeError, ValueError) as e:
        logger.warning(f"Cannot determine user config directory ({e}); using '.'")
        return Path(".")


def default_data_dir() -> Path:
    return user_config_dir() / APP_NAME


def default_config_path() -> Path:
    return default_data_dir() / CONFIG_FILE


@dataclass
class Config:
    """Runtime configuration for the vault."""

    # Storage (commands.json / categories.json live here)
    data_dir: str = ""

    # Optional webhook notified after every store update
    notify_url: Optional[str] = None

    # Behavior
    log_level: str = "WARNING"
    shell: str = ""                 # "" = $SHELL, then /bin/sh (cmd.exe on Windows)
    watch_debounce_ms: int = 200

    def apply_env(self, env: Optional[Mapping[str, str]] = None):
        """Let VAUL_* environment variables override file values."""
        env = os.environ if env is None else env
        if env.get("VAUL_DATA_DIR"):
            self.data_dir = env["VAUL_DATA_DIR"]
        if env.get("VAUL_NOTIFY_URL"):
            self.notify_url = env["VAUL_NOTIFY_URL"]
        if env.get("VAUL_LOG_LEVEL"):
            self.log_level = env["VAUL_LOG_LEVEL"]

    def resolve_paths(self):
        """Expand ~ and fill in the platform default data directory."""
        if self.data_dir:
            self.data_dir = str(Path(self.data_dir).expanduser())
        else:
            self.data_dir = str(default_data_dir())

    @property
    def level(self) -> int:
        """log_level as a logging constant (WARNING if unrecognized)."""
        value = logging.getLevelName(str(self.log_level).upper())
        return value if isinstance(value, int) else logging.WARNING

    @classmethod
    def load(cls, path: Optional[str] = None, strict: bool = False) -> "Config":
        """
        Load config from YAML file, falling back to defaults.

        With strict=True a missing or invalid file raises ConfigError
        instead of being ignored.
        """
        cfg_path = Path(path or os.environ.get("VAUL_CONFIG") or default_config_path()).expanduser()
        known = {f.name for f in fields(cls)}
        cfg = None
        if cfg_path.exists():
            try:
                with open(cfg_path, "r", encoding="utf-8") as f:
                    data = yaml.safe_load(f) or {}
                if not isinstance(data, dict):
                    raise ConfigError(f"{cfg_path}: expected a mapping at the top level")
                cfg = cls(**{k: v for k, v in data.items() if k in known})
            except (OSError, yaml.YAMLError, ConfigError) as e:
                if strict:
                    raise ConfigError(f"Invalid config {cfg_path}: {e}") from e
                logger.warning(f"Ignoring config {cfg_path}: {e}")
        elif strict:
            raise ConfigError(f"Config file not found: {cfg_path}")

        if cfg is None:
            cfg = cls()
        cfg.apply_env()
        cfg.resolve_paths()
        return cfg
