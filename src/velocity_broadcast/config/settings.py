# velocity_broadcast/config/settings.py
"""Manages the plugin's settings file.

This module provides the `Settings` class, which owns the single
``config.yml`` in the plugin's data directory. It creates the file with
defaults on first run, migrates it when the stored plugin version differs
from the running one, and exposes typed getters and setters. Every setter
persists the file immediately.

I/O failures never reach the caller: they are logged and the affected value
falls back to its compiled-in default.
"""
import os
import logging
import tempfile
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from velocity_broadcast.config.const import PLUGIN_VERSION, SETTINGS_FILE_NAME
from velocity_broadcast.config.schema import (
    DEBUG_KEY,
    DEFAULTS,
    PREFIX_KEY,
    UPDATE_CHECK_KEY,
    VERSION_KEY,
    default_settings,
    migrate_settings,
    needs_migration,
    normalize_settings,
    parse_settings,
    preserved_keys,
    render_settings,
    stored_version,
)
from velocity_broadcast.error import ConfigIOError, ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MigrationReport:
    """What a settings migration changed."""

    from_version: Optional[str]
    to_version: str
    preserved_keys: List[str]


class Settings:
    """Loads, migrates, exposes and saves the plugin settings.

    One instance is created by the plugin and handed to every component that
    needs configuration. File mutation is serialized by an internal lock, so
    concurrent setter calls from different host threads cannot interleave
    their writes.
    """

    def __init__(self, data_dir: str, version: str = PLUGIN_VERSION):
        """Initializes the Settings object without touching the filesystem.

        Args:
            data_dir: The plugin's data directory, which holds ``config.yml``.
            version: The running plugin version, used as the schema tag.
        """
        self._data_dir = os.fspath(data_dir)
        self._version = version
        self.config_path = os.path.join(self._data_dir, SETTINGS_FILE_NAME)
        self._lock = threading.RLock()
        self._settings: Dict[str, Any] = default_settings(version)
        # Set by `load` when it rewrote the file for a new version.
        self.last_migration: Optional[MigrationReport] = None

    def initialize(self):
        """Prepares the data directory and loads the settings file.

        Creates the directory if needed, writes defaults if no settings file
        exists, and migrates the file if its stored version differs from the
        running one. Safe to call repeatedly; a current file is left untouched.
        """
        logger.debug(f"Initializing settings in {self._data_dir}")
        self._ensure_data_dir()
        self.load()

    def reload(self):
        """Re-reads the settings file from disk, replacing in-memory state."""
        logger.info(f"Reloading settings from {self.config_path}")
        self.load()

    def load(self):
        """Loads the settings file, creating or migrating it as needed.

        A file that cannot be read or parsed is left as it is on disk, so no
        operator value is lost; in-memory settings fall back to defaults.
        """
        with self._lock:
            self.last_migration = None
            if not os.path.exists(self.config_path):
                logger.info(
                    f"Settings file not found at {self.config_path}. "
                    "Creating with default settings."
                )
                self._settings = default_settings(self._version)
                self._save()
                return

            try:
                raw = self._read_config()
            except ConfigurationError as e:
                logger.warning(
                    f"Could not load settings: {e}. Using default settings; "
                    "the file on disk was not modified."
                )
                self._settings = default_settings(self._version)
                return

            if needs_migration(raw, self._version):
                self._settings = migrate_settings(raw, self._version)
                self.last_migration = MigrationReport(
                    from_version=stored_version(raw),
                    to_version=self._version,
                    preserved_keys=preserved_keys(raw),
                )
                self._save()
            else:
                self._settings = normalize_settings(raw, self._version)

    def _ensure_data_dir(self):
        try:
            os.makedirs(self._data_dir, exist_ok=True)
        except OSError as e:
            logger.error(
                f"Could not create data directory: {os.path.abspath(self._data_dir)}: {e}"
            )

    def _read_config(self) -> Dict[str, Any]:
        """Reads and parses the settings file.

        Raises:
            ConfigIOError: If the file cannot be read or is not UTF-8 text.
            ConfigurationError: If its content is not a YAML mapping.
        """
        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                text = f.read()
        except OSError as e:
            raise ConfigIOError(self.config_path, f"Failed to read settings ({e})") from e
        except UnicodeDecodeError as e:
            raise ConfigIOError(
                self.config_path, f"Settings file is not valid UTF-8 ({e})"
            ) from e
        return parse_settings(text)

    def _write_config(self):
        """Writes the in-memory settings to disk, replacing the file atomically.

        Raises:
            ConfigIOError: If writing the settings file fails.
        """
        text = render_settings(self._settings)
        tmp_path = None
        try:
            os.makedirs(self._data_dir, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self._data_dir, prefix=".config-", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp_path, self.config_path)
            tmp_path = None
        except OSError as e:
            raise ConfigIOError(self.config_path, f"Failed to write settings ({e})") from e
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.remove(tmp_path)

    def _save(self):
        """Writes settings, logging instead of raising on failure.

        The in-memory state is kept even when the write fails.
        """
        try:
            self._write_config()
            logger.debug(f"Settings saved to {self.config_path}")
        except ConfigIOError as e:
            logger.error(f"{e}. In-memory settings remain active.")

    def get(self, key: str, default: Any = None) -> Any:
        """Retrieves a raw setting value by its file key."""
        with self._lock:
            return self._settings.get(key, default)

    def set(self, key: str, value: Any):
        """Sets a setting by its file key and saves the file immediately.

        Raises:
            ConfigurationError: If `key` is not part of the schema or is the
                managed version tag.
        """
        if key not in DEFAULTS or key == VERSION_KEY:
            raise ConfigurationError(f"Unknown or read-only setting '{key}'.")
        with self._lock:
            self._settings[key] = value
            logger.info(f"Setting '{key}' updated to '{value}'. Saving configuration.")
            self._save()

    def get_prefix(self) -> str:
        """The broadcast prefix, always with exactly one trailing space."""
        prefix = self.get(PREFIX_KEY, DEFAULTS[PREFIX_KEY])
        return str(prefix).rstrip() + " "

    def set_prefix(self, prefix: str):
        """Stores a new prefix. Trailing whitespace is trimmed before storing."""
        self.set(PREFIX_KEY, prefix.rstrip())

    def is_update_check_enabled(self) -> bool:
        return bool(self.get(UPDATE_CHECK_KEY, DEFAULTS[UPDATE_CHECK_KEY]))

    def set_update_check_enabled(self, enabled: bool):
        self.set(UPDATE_CHECK_KEY, bool(enabled))

    def is_debug_enabled(self) -> bool:
        return bool(self.get(DEBUG_KEY, DEFAULTS[DEBUG_KEY]))

    def as_dict(self) -> Dict[str, Any]:
        """A copy of the current in-memory settings."""
        with self._lock:
            return dict(self._settings)
