"""Moment-style date format strings (``YYYY-MM-DD HH:mm``) for datetime.

Board documents store their date and time formats in the token syntax
used by moment.js, so formatting and parsing go through this module
rather than strftime.
"""

import calendar
import re
from datetime import datetime

_TOKEN = re.compile(r"\[([^\]]*)\]|YYYY|YY|MMMM|MMM|MM|Mo|M|DD|Do|D|dddd|ddd|HH|H|hh|h|mm|m|ss|s|A|a")

_MONTHS = [calendar.month_name[i] for i in range(1, 13)]
_MONTHS_ABBR = [calendar.month_abbr[i] for i in range(1, 13)]
_DAYS = [calendar.day_name[i] for i in range(7)]
_DAYS_ABBR = [calendar.day_abbr[i] for i in range(7)]


def _ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        return f"{n}th"
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def _hour12(hour: int) -> int:
    return hour % 12 or 12


def _render(token: str, dt: datetime) -> str:
    renderers = {
        "YYYY": lambda: f"{dt.year:04d}",
        "YY": lambda: f"{dt.year % 100:02d}",
        "MMMM": lambda: _MONTHS[dt.month - 1],
        "MMM": lambda: _MONTHS_ABBR[dt.month - 1],
        "MM": lambda: f"{dt.month:02d}",
        "Mo": lambda: _ordinal(dt.month),
        "M": lambda: str(dt.month),
        "DD": lambda: f"{dt.day:02d}",
        "Do": lambda: _ordinal(dt.day),
        "D": lambda: str(dt.day),
        "dddd": lambda: _DAYS[dt.weekday()],
        "ddd": lambda: _DAYS_ABBR[dt.weekday()],
        "HH": lambda: f"{dt.hour:02d}",
        "H": lambda: str(dt.hour),
        "hh": lambda: f"{_hour12(dt.hour):02d}",
        "h": lambda: str(_hour12(dt.hour)),
        "mm": lambda: f"{dt.minute:02d}",
        "m": lambda: str(dt.minute),
        "ss": lambda: f"{dt.second:02d}",
        "s": lambda: str(dt.second),
        "A": lambda: "PM" if dt.hour >= 12 else "AM",
        "a": lambda: "pm" if dt.hour >= 12 else "am",
    }
    return renderers[token]()


def format_date(dt: datetime, fmt: str) -> str:
    """Format dt using a moment-style format string."""
    out: list[str] = []
    pos = 0
    for match in _TOKEN.finditer(fmt):
        out.append(fmt[pos : match.start()])
        if match.group(1) is not None:
            out.append(match.group(1))
        else:
            out.append(_render(match.group(0), dt))
        pos = match.end()
    out.append(fmt[pos:])
    return "".join(out)


def _names_pattern(names: list[str]) -> str:
    return "(" + "|".join(re.escape(n) for n in sorted(names, key=len, reverse=True)) + ")"


_PARSE_PATTERNS = {
    "YYYY": (r"(\d{4})", "year"),
    "YY": (r"(\d{2})", "year2"),
    "MMMM": (_names_pattern(_MONTHS), "month_name"),
    "MMM": (_names_pattern(_MONTHS_ABBR), "month_abbr"),
    "MM": (r"(\d{2})", "month"),
    "Mo": (r"(\d{1,2})(?:st|nd|rd|th)", "month"),
    "M": (r"(\d{1,2})", "month"),
    "DD": (r"(\d{2})", "day"),
    "Do": (r"(\d{1,2})(?:st|nd|rd|th)", "day"),
    "D": (r"(\d{1,2})", "day"),
    "dddd": (_names_pattern(_DAYS), None),
    "ddd": (_names_pattern(_DAYS_ABBR), None),
    "HH": (r"(\d{2})", "hour"),
    "H": (r"(\d{1,2})", "hour"),
    "hh": (r"(\d{2})", "hour12"),
    "h": (r"(\d{1,2})", "hour12"),
    "mm": (r"(\d{2})", "minute"),
    "m": (r"(\d{1,2})", "minute"),
    "ss": (r"(\d{2})", "second"),
    "s": (r"(\d{1,2})", "second"),
    "A": (r"(AM|PM|am|pm)", "ampm"),
    "a": (r"(AM|PM|am|pm)", "ampm"),
}


def _compile_parser(fmt: str) -> tuple[re.Pattern, list[str | None]]:
    parts: list[str] = []
    fields: list[str | None] = []
    pos = 0
    for match in _TOKEN.finditer(fmt):
        parts.append(re.escape(fmt[pos : match.start()]))
        if match.group(1) is not None:
            parts.append(re.escape(match.group(1)))
        else:
            pattern, field = _PARSE_PATTERNS[match.group(0)]
            parts.append(pattern)
            fields.append(field)
        pos = match.end()
    parts.append(re.escape(fmt[pos:]))
    return re.compile("^" + "".join(parts) + "$"), fields


def parse_date(text: str, fmt: str) -> datetime | None:
    """Parse text with a moment-style format. Returns None if it doesn't match."""
    pattern, fields = _compile_parser(fmt)
    match = pattern.match(text.strip())
    if not match:
        return None

    values: dict[str, int] = {"year": 1900, "month": 1, "day": 1, "hour": 0, "minute": 0, "second": 0}
    ampm = None
    hour12 = None
    for field, raw in zip(fields, match.groups()):
        if field is None:
            continue
        if field == "year2":
            values["year"] = 2000 + int(raw)
        elif field == "month_name":
            values["month"] = _MONTHS.index(raw) + 1
        elif field == "month_abbr":
            values["month"] = _MONTHS_ABBR.index(raw) + 1
        elif field == "ampm":
            ampm = raw.lower()
        elif field == "hour12":
            hour12 = int(raw)
        else:
            values[field] = int(raw)

    if hour12 is not None:
        values["hour"] = hour12 % 12 + (12 if ampm == "pm" else 0)
    elif ampm == "pm" and values["hour"] < 12:
        values["hour"] += 12

    try:
        return datetime(**values)
    except ValueError:
        return None
