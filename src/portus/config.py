"""Global settings tier: process-wide defaults read from a YAML file."""

import locale
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV = "PORTUS_CONFIG"

_BOOLEAN_KEYS = {
    "show-add-list",
    "show-archive-all",
    "show-view-as-markdown",
    "show-board-settings",
    "show-search",
    "show-set-view",
    "link-date-to-daily-note",
    "move-dates",
    "move-tags",
    "move-task-metadata",
    "archive-with-date",
    "append-archive-date",
    "time-12h",
}


@dataclass(frozen=True)
class HostLocale:
    """Host-provided hints used to compute default date and time formats."""

    daily_note_format: str | None = None
    uses_12_hour: bool | None = None


def default_config_path() -> Path:
    """Return the global settings path, honouring $PORTUS_CONFIG."""
    env = os.environ.get(CONFIG_ENV)
    if env:
        return Path(env).expanduser()
    return Path("~/.config/portus/settings.yaml").expanduser()


def _coerce(key: str, value: Any) -> Any:
    """Type-coerce string booleans the way YAML users tend to write them."""
    if key in _BOOLEAN_KEYS and isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1", "on")
    if key == "metadata-keys" and isinstance(value, str):
        return [value]
    return value


def read_global_settings(path: str | Path | None = None) -> dict[str, Any]:
    """Read the global settings mapping.

    A missing file is an empty tier. A file that isn't a YAML mapping is
    logged and treated as empty, so a broken global file never blocks
    opening a board.
    """
    path = Path(path) if path is not None else default_config_path()
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        logger.warning("ignoring unreadable settings file %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("ignoring settings file %s: expected a mapping", path)
        return {}
    return {str(k): _coerce(str(k), v) for k, v in data.items()}


def _detect_12_hour() -> bool:
    """Guess whether the process locale prefers a 12-hour clock."""
    try:
        time_fmt = locale.nl_langinfo(locale.T_FMT)
    except (AttributeError, ValueError):
        return False
    return "%p" in time_fmt or "%I" in time_fmt or "%r" in time_fmt


def host_locale(settings: dict[str, Any] | None = None) -> HostLocale:
    """Build the HostLocale from global settings, falling back to the locale module."""
    settings = settings or {}
    uses_12_hour = settings.get("time-12h")
    if uses_12_hour is None:
        uses_12_hour = _detect_12_hour()
    return HostLocale(
        daily_note_format=settings.get("daily-note-format") or None,
        uses_12_hour=bool(uses_12_hour),
    )
