"""Settings compiler: resolve local, global and supplied settings into one dict."""

from typing import Any

from portus.config import HostLocale
from portus.constants import (
    DEFAULT_DATE_FORMAT,
    DEFAULT_DATE_TRIGGER,
    DEFAULT_METADATA_POSITION,
    DEFAULT_TIME_FORMAT,
    DEFAULT_TIME_TRIGGER,
    FRONTMATTER_KEY,
)

Settings = dict[str, Any]

DISPLAY_TOGGLES = (
    "show-add-list",
    "show-archive-all",
    "show-view-as-markdown",
    "show-board-settings",
    "show-search",
    "show-set-view",
)

LIST_DEFAULTS = ("tag-colors", "tag-sort", "date-colors")

PASSTHROUGH = (
    "link-date-to-daily-note",
    "move-dates",
    "move-tags",
    "move-task-metadata",
    "archive-with-date",
    "append-archive-date",
    "new-line-trigger",
    "lane-width",
)

# Keys whose value changes how card text is parsed. A change to any of
# these forces a full reparse of the document.
REPARSE_KEYS = (
    "date-trigger",
    "time-trigger",
    "date-format",
    "time-format",
    "link-date-to-daily-note",
    "metadata-keys",
    "inline-metadata-position",
    "move-dates",
    "move-tags",
    "move-task-metadata",
)


def default_date_format(host: HostLocale | None) -> str:
    """Date format derived from the host, or the hard-coded fallback."""
    if host is not None and host.daily_note_format:
        return host.daily_note_format
    return DEFAULT_DATE_FORMAT


def default_time_format(host: HostLocale | None) -> str:
    """Time format derived from the host clock preference, or the fallback."""
    if host is not None and host.uses_12_hour:
        return "h:mm A"
    return DEFAULT_TIME_FORMAT


def _union(*lists: Any) -> list:
    """Order-preserving union of several optional lists."""
    seen: list = []
    for values in lists:
        for value in values or ():
            if value not in seen:
                seen.append(value)
    return seen


def resolve_raw(
    key: str,
    local: Settings | None,
    global_settings: Settings | None,
    supplied: Settings | None = None,
) -> Any:
    """Return the first non-None value for key: supplied, local, then global."""
    for tier in (supplied, local, global_settings):
        if tier and tier.get(key) is not None:
            return tier[key]
    return None


def compile_settings(
    local: Settings | None,
    global_settings: Settings | None,
    supplied: Settings | None = None,
    host: HostLocale | None = None,
) -> Settings:
    """Compile every recognised key with defaults applied.

    List-valued metadata keys are unioned across the global and local
    tiers. Display toggles default to True when unset at every tier.
    """

    def raw(key: str) -> Any:
        return resolve_raw(key, local, global_settings, supplied)

    global_keys = (global_settings or {}).get("metadata-keys")
    local_keys = resolve_raw("metadata-keys", local, None, supplied)
    metadata_keys = _union(global_keys, local_keys)

    date_format = raw("date-format") or default_date_format(host)
    date_display_format = raw("date-display-format") or date_format
    time_format = raw("time-format") or default_time_format(host)
    archive_date_format = raw("archive-date-format") or f"{date_format} {time_format}"

    compiled: Settings = {
        FRONTMATTER_KEY: raw(FRONTMATTER_KEY) or "board",
        "date-format": date_format,
        "date-display-format": date_display_format,
        "date-time-display-format": f"{date_display_format} {time_format}",
        "date-trigger": raw("date-trigger") or DEFAULT_DATE_TRIGGER,
        "time-format": time_format,
        "time-trigger": raw("time-trigger") or DEFAULT_TIME_TRIGGER,
        "inline-metadata-position": raw("inline-metadata-position") or DEFAULT_METADATA_POSITION,
        "metadata-keys": metadata_keys,
        "archive-date-format": archive_date_format,
        "archive-date-separator": raw("archive-date-separator") or "",
        "tag-action": raw("tag-action") or "obsidian",
    }
    for key in DISPLAY_TOGGLES:
        value = raw(key)
        compiled[key] = True if value is None else value
    for key in LIST_DEFAULTS:
        value = raw(key)
        compiled[key] = [] if value is None else value
    for key in PASSTHROUGH:
        compiled[key] = raw(key)
    return compiled


def should_refresh_board(old: Settings, new: Settings) -> bool:
    """True if the settings change affects how the document is parsed."""
    return any(old.get(key) != new.get(key) for key in REPARSE_KEYS)


def changed_keys(old: Settings | None, new: Settings) -> list[str]:
    """Keys whose resolved value differs between two compilations."""
    if old is None:
        return list(new.keys())
    keys = list(new.keys()) + [k for k in old.keys() if k not in new]
    return [k for k in keys if old.get(k) != new.get(k)]
