from __future__ import annotations
from pathlib import Path
import fcntl
import os
from typing import Any, Dict
import yaml

from guildstore.util.logger import get_logger

logger = get_logger("app_configuration")


CONFIG_PATH = Path(os.environ.get("GUILDSTORE_CONFIG", "./config/app_config.yml")).resolve()

DEFAULT_DATABASE_PATH = "./data/guildstore.db"
DEFAULT_BUSY_TIMEOUT_MS = 5000


class AppConfig:
    """File-lock based accessor around the YAML application configuration.

    Caches the contents of the config file and exposes dictionary-like access
    plus typed shortcuts for the database settings. Reads take an fcntl
    shared lock so a concurrent writer never hands us a half-written file.
    """

    def __init__(self, config_path: Path) -> None:
        self.config_path = config_path
        self._data: Dict[str, Any] = {}
        self.reload()

    # --------------------------
    # Private helpers
    # --------------------------
    def load_from_disk(self) -> Dict[str, Any]:
        try:
            with self.config_path.open("r", encoding="utf-8") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_SH)
                try:
                    data = yaml.safe_load(f)
                finally:
                    fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        except FileNotFoundError:
            logger.error("[APP CONFIGURATION] Config file %s not found.", self.config_path)
            return {}
        except (OSError, yaml.YAMLError) as exc:
            logger.error("[APP CONFIGURATION] Failed to load config %s: %s", self.config_path, exc)
            return {}

        if not isinstance(data, dict):
            if data is not None:
                logger.error(
                    "[APP CONFIGURATION] Config %s must be a mapping, got %s",
                    self.config_path,
                    type(data).__name__,
                )
            return {}
        return data

    def _database_section(self) -> Dict[str, Any]:
        section = self._data.get("database", {})
        return section if isinstance(section, dict) else {}

    # --------------------------
    # Public API
    # --------------------------
    def reload(self) -> Dict[str, Any]:
        """Re-read the YAML file, replace the cache and return it.

        On a missing or malformed file the cache becomes an empty dict.
        """
        self._data = self.load_from_disk()
        return self._data

    @property
    def data(self) -> Dict[str, Any]:
        """The cached configuration mapping. Do not mutate it."""
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        """Safe lookup for top-level configuration keys."""
        return self._data.get(key, default)

    # --------------------------
    # High-level shortcuts
    # --------------------------
    @property
    def database_path(self) -> Path:
        """Path of the SQLite file holding guild settings.

        Relative paths resolve against the current working directory.
        """
        value = self._database_section().get("path") or DEFAULT_DATABASE_PATH
        return Path(str(value)).resolve()

    @property
    def busy_timeout_ms(self) -> int:
        """How long SQLite waits on a locked database before failing."""
        value = self._database_section().get("busy_timeout_ms", DEFAULT_BUSY_TIMEOUT_MS)
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning(
                "[APP CONFIGURATION] Invalid busy_timeout_ms %r, using %d",
                value,
                DEFAULT_BUSY_TIMEOUT_MS,
            )
            return DEFAULT_BUSY_TIMEOUT_MS


# Shared application-wide configuration instance
app_config = AppConfig(CONFIG_PATH)
