# velocity_broadcast/config/schema.py
"""Describes the settings file schema and the pure migration logic.

The settings file is a small, human-editable YAML document headed by a
comment block. Its keys have changed across plugin revisions, so this module
keeps the table of current keys with their defaults, the legacy key names
that map onto them, and the functions that turn whatever is on disk into a
complete, current settings mapping.

Nothing in here touches the filesystem; `velocity_broadcast.config.settings`
owns all file I/O.
"""
import logging
from typing import Any, Dict, List, Optional

import yaml

from velocity_broadcast.config.const import app_name_title
from velocity_broadcast.error import ConfigurationError

logger = logging.getLogger(__name__)

VERSION_KEY = "Plugin Version"
PREFIX_KEY = "prefix"
UPDATE_CHECK_KEY = "version-check-enabled"
DEBUG_KEY = "debug-messages-enabled"

DEFAULT_PREFIX = "&9&l[&3&lServer&9&l]&r"

# Current keys in the order they are written to disk.
DEFAULTS: Dict[str, Any] = {
    VERSION_KEY: "",
    PREFIX_KEY: DEFAULT_PREFIX,
    UPDATE_CHECK_KEY: True,
    DEBUG_KEY: False,
}

# Legacy key name -> current key name.
KEY_ALIASES: Dict[str, str] = {
    "update-check-enabled": UPDATE_CHECK_KEY,
}

HEADER = (
    f"# {app_name_title} configuration\n"
    "# 'Plugin Version' is managed by the plugin. Do not edit it by hand:\n"
    "# a mismatch triggers a rewrite of this file on the next start.\n"
)


def default_settings(version: str) -> Dict[str, Any]:
    """Returns a fresh settings mapping holding only defaults, tagged with `version`."""
    settings = dict(DEFAULTS)
    settings[VERSION_KEY] = version
    return settings


def coerce_value(key: str, value: Any) -> Optional[Any]:
    """Converts a stored value to the type the schema expects for `key`.

    Booleans also accept the strings ``"true"`` and ``"false"`` and the
    integers 0 and 1; strings accept plain numbers, which YAML would
    otherwise hand back as int/float.

    Returns:
        The coerced value, or ``None`` if `value` cannot be used for `key`.
    """
    expected = type(DEFAULTS[key])
    if expected is bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, int) and value in (0, 1):
            return bool(value)
        if isinstance(value, str) and value.strip().lower() in ("true", "false"):
            return value.strip().lower() == "true"
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def stored_version(raw: Dict[str, Any]) -> Optional[str]:
    value = raw.get(VERSION_KEY)
    if value is None:
        return None
    return str(value)


def needs_migration(raw: Dict[str, Any], version: str) -> bool:
    """Whether the stored schema tag differs from the running `version`."""
    return stored_version(raw) != version


def normalize_settings(raw: Dict[str, Any], version: str) -> Dict[str, Any]:
    """Builds a complete settings mapping from `raw`, filling gaps with defaults.

    Recognized keys (current names first, then legacy aliases) keep their
    stored value when it is usable. Unrecognized keys are dropped. The result
    is tagged with `version`.

    Args:
        raw: The mapping as parsed from disk.
        version: The schema tag to write into the result.

    Returns:
        A new mapping with exactly the keys of `DEFAULTS`, in schema order.
    """
    current_to_legacy = {current: legacy for legacy, current in KEY_ALIASES.items()}
    result: Dict[str, Any] = {}
    for key, default in DEFAULTS.items():
        if key == VERSION_KEY:
            result[key] = version
            continue

        if key in raw:
            source_key = key
        elif current_to_legacy.get(key) in raw:
            source_key = current_to_legacy[key]
        else:
            result[key] = default
            continue

        value = coerce_value(key, raw[source_key])
        if value is None:
            logger.warning(
                f"Setting '{source_key}' has an unusable value {raw[source_key]!r}. "
                f"Using default {default!r}."
            )
            value = default
        result[key] = value
    return result


def preserved_keys(raw: Dict[str, Any]) -> List[str]:
    """The recognized keys in `raw` that a migration carries over, sorted."""
    return sorted(
        key
        for key in raw
        if key != VERSION_KEY and (key in DEFAULTS or key in KEY_ALIASES)
    )


def migrate_settings(raw: Dict[str, Any], version: str) -> Dict[str, Any]:
    """Migrates a stored settings mapping to the schema of `version`.

    The result is the union of every recognized key already present in
    `raw` with the defaults for keys that were introduced since. Legacy key
    names are carried over to their current name. Migrating an already
    migrated mapping returns an equal mapping.
    """
    old_version = stored_version(raw)
    migrated = normalize_settings(raw, version)
    carried = preserved_keys(raw)
    logger.info(
        f"Migrating settings from version '{old_version}' to '{version}'. "
        f"Preserved keys: {carried or 'none'}."
    )
    return migrated


def parse_settings(text: str) -> Dict[str, Any]:
    """Parses settings file text into a mapping.

    Raises:
        ConfigurationError: If the text is not valid YAML or is not a mapping.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Settings file is not valid YAML: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Settings file must contain a mapping, found {type(data).__name__}."
        )
    return data


def render_settings(settings: Dict[str, Any]) -> str:
    """Renders a settings mapping as file text. Equal input gives identical output."""
    ordered = {key: settings.get(key, default) for key, default in DEFAULTS.items()}
    body = yaml.safe_dump(
        ordered,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )
    return HEADER + body
