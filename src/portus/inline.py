"""Inline ``[key::value]`` fields embedded in card text.

Attributes with no dedicated model field (priority, notes, client code)
live inside the card's raw text. Keys match case-insensitively. Every
setter removes all earlier occurrences before appending one new token,
so read-then-set never duplicates a field.
"""

import re
from urllib.parse import quote, unquote

INLINE_FIELD = re.compile(r"\[([\w-]+)::([^\]]*)\]")

# encodeURIComponent leaves these unescaped
_URI_SAFE = "-_.!~*'()"

PRIORITIES = ("standard", "high", "low")

# Fields the detail view manages; never shown in a card's display title.
RESERVED_KEYS = ("priority", "notes", "client", "invoice", "month")


def _field_pattern(key: str) -> re.Pattern:
    return re.compile(r"\[" + re.escape(key) + r"::([^\]]*)\]", re.IGNORECASE)


def iter_fields(text: str) -> list[tuple[str, str]]:
    """Return every (key, raw value) pair in text, keys lowercased."""
    return [(m.group(1).lower(), m.group(2)) for m in INLINE_FIELD.finditer(text)]


def get_field(text: str, key: str) -> str | None:
    """Return the raw value of the first occurrence of key, or None."""
    match = _field_pattern(key).search(text or "")
    return match.group(1) if match else None


def _removal_pattern(token: str) -> re.Pattern:
    """Match token together with the gap it sits in on its own line.

    A token after text takes its leading blanks with it; a token at the
    start of a line takes its trailing blanks instead. Indentation and
    the other lines are left alone.
    """
    return re.compile(rf"(?<=\S)[ \t]*{token}|{token}[ \t]*", re.IGNORECASE)


def _key_token(keys) -> str:
    names = "|".join(re.escape(k) for k in keys)
    return rf"\[(?:{names})::[^\]]*\]"


_ANY_TOKEN = r"\[[\w-]+::[^\]]*\]"


def remove_field(text: str, key: str) -> str:
    """Remove every occurrence of key."""
    return _removal_pattern(_key_token([key])).sub("", text or "").strip()


def set_field(text: str, key: str, value: str | None) -> str:
    """Replace all occurrences of key with a single trailing token.

    An empty or None value just removes the field.
    """
    cleaned = remove_field(text, key)
    if value is None or value == "":
        return cleaned
    token = f"[{key}::{value}]"
    return f"{cleaned} {token}" if cleaned else token


def strip_fields(text: str, keys: tuple[str, ...] | list[str] | None = None) -> str:
    """Remove inline fields from text: only the given keys, or all of them."""
    if keys is not None and not keys:
        return (text or "").strip()
    token = _ANY_TOKEN if keys is None else _key_token(keys)
    return _removal_pattern(token).sub("", text or "").strip()


def encode_value(value: str) -> str:
    """Percent-encode a free-text value so it survives newlines and brackets."""
    return quote(value, safe=_URI_SAFE)


def decode_value(value: str) -> str:
    return unquote(value)


def get_priority(text: str) -> str:
    value = get_field(text, "priority")
    if value is not None and value.strip().lower() in ("high", "low"):
        return value.strip().lower()
    return "standard"


def set_priority(text: str, priority: str) -> str:
    """Set priority. ``standard`` is the default and is never written."""
    priority = priority.strip().lower()
    if priority not in PRIORITIES:
        raise ValueError(f"Unknown priority '{priority}'")
    return set_field(text, "priority", None if priority == "standard" else priority)


def get_notes(text: str) -> str:
    value = get_field(text, "notes")
    return decode_value(value) if value else ""


def set_notes(text: str, notes: str) -> str:
    if not notes or not notes.strip():
        return remove_field(text, "notes")
    return set_field(text, "notes", encode_value(notes))


def get_client(text: str) -> str | None:
    """Explicit client code, uppercased, or None."""
    value = get_field(text, "client")
    if value is None or not value.strip():
        return None
    return value.strip().upper()


def set_client(text: str, client: str | None) -> str:
    return set_field(text, "client", client.strip().upper() if client else None)


def get_invoice(text: str) -> str | None:
    """Legacy ``[invoice::CODE-NNN]`` value, or None."""
    value = get_field(text, "invoice")
    return value.strip() if value and value.strip() else None
