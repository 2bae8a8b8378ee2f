"""Split board markdown into front-matter, sections, items and settings."""

import json
import re
from dataclasses import dataclass, field

import yaml

from portus.errors import ParseError

COMPLETE_MARKER = "**Complete**"
ARCHIVE_SEPARATOR = "***"
SETTINGS_HEADER = "%% kanban:settings"

_SETTINGS_BLOCK = re.compile(r"^%% kanban:settings\s*\n```[^\n]*\n(.*?)\n```\s*\n%%\s*$", re.DOTALL | re.MULTILINE)
_ITEM = re.compile(r"^[-*+][ \t]+(?:\[([^\]])\](?:[ \t]+|$))?(.*)$")
_CONTINUATION = re.compile(r"^(?: {2,4}|\t)")
_HEADING = re.compile(r"^##(?:[ \t]+(.*?))?[ \t]*$")


@dataclass
class RawSection:
    """A ``## heading`` and the list items below it."""

    title: str
    archived: bool = False
    complete: bool = False
    items: list[tuple[str, str]] = field(default_factory=list)


def extract_front_matter(text: str) -> tuple[str, dict]:
    """Extract YAML front-matter from text. Returns (remaining_text, meta).

    Unlike card bodies, a board's front-matter carries settings, so
    malformed YAML is an error rather than an empty mapping: writing the
    board back would otherwise drop it.
    """
    if not text.startswith("---"):
        return text, {}

    match = re.match(r"^---\n(.*?)\n---[ \t]*(?:\n|$)", text, re.DOTALL)
    if not match:
        return text, {}

    yaml_content = match.group(1)
    remaining = text[match.end() :]

    try:
        meta = yaml.safe_load(yaml_content) or {}
    except yaml.YAMLError as exc:
        raise ParseError(f"Invalid front-matter: {exc}") from exc
    if not isinstance(meta, dict):
        raise ParseError("Front-matter must be a mapping")

    return remaining, meta


def extract_settings_block(text: str) -> tuple[str, dict]:
    """Pull the trailing ``%% kanban:settings`` JSON block out of text."""
    match = _SETTINGS_BLOCK.search(text)
    if not match:
        if SETTINGS_HEADER in text:
            raise ParseError("Unterminated settings block")
        return text, {}
    try:
        settings = json.loads(match.group(1))
    except json.JSONDecodeError as exc:
        raise ParseError(f"Invalid settings block: {exc.msg} (line {exc.lineno})") from exc
    if not isinstance(settings, dict):
        raise ParseError("Settings block must be a JSON object")
    return text[: match.start()] + text[match.end() :], settings


def _dedent(line: str) -> str:
    return _CONTINUATION.sub("", line, count=1)


def split_sections(text: str) -> list[RawSection]:
    """Parse the body of a board into ordered sections of items.

    Each item is a (check_char, raw_text) pair; indented lines that follow
    an item are continuation lines of that item. Lines inside top-level
    fenced code blocks are never treated as headings or items.
    """
    sections: list[RawSection] = []
    current: RawSection | None = None
    archived = False
    in_code_fence = False
    open_item: list[str] | None = None
    open_char = " "
    blanks = 0

    def close_item() -> None:
        nonlocal open_item, blanks
        if current is not None and open_item is not None:
            current.items.append((open_char, "\n".join(open_item).rstrip()))
        open_item = None
        blanks = 0

    for line in text.split("\n"):
        if open_item is not None:
            if not line.strip() and not _CONTINUATION.match(line):
                blanks += 1
                continue
            if _CONTINUATION.match(line):
                open_item.extend([""] * blanks)
                open_item.append(_dedent(line))
                blanks = 0
                continue
            close_item()

        stripped = line.strip()
        if stripped.startswith("```"):
            in_code_fence = not in_code_fence
            continue
        if in_code_fence:
            continue
        heading = _HEADING.match(line)
        if heading:
            current = RawSection(title=(heading.group(1) or "").strip(), archived=archived)
            sections.append(current)
            continue
        if stripped == ARCHIVE_SEPARATOR:
            archived = True
            current = None
            continue
        if current is None:
            continue
        if stripped == COMPLETE_MARKER and not current.items:
            current.complete = True
            continue
        match = _ITEM.match(line)
        if match:
            open_char = match.group(1) or " "
            open_item = [match.group(2)]

    close_item()
    return sections


def serialize_front_matter(meta: dict) -> str:
    if not meta:
        return ""
    body = yaml.dump(meta, default_flow_style=False, sort_keys=False, allow_unicode=True).rstrip()
    return f"---\n\n{body}\n\n---\n\n"


def serialize_settings_block(settings: dict) -> str:
    body = json.dumps(settings, ensure_ascii=False, separators=(",", ":"))
    return f"\n\n{SETTINGS_HEADER}\n```\n{body}\n```\n%%"


def serialize_item(check_char: str, title_raw: str) -> str:
    """Render one list item, indenting continuation lines."""
    first, *rest = title_raw.split("\n")
    lines = [f"- [{check_char or ' '}] {first}".rstrip()]
    lines.extend(f"    {line}".rstrip() if line.strip() else "    " for line in rest)
    return "\n".join(lines)


def serialize_section(title: str, items: list[str], complete: bool = False) -> str:
    parts = [f"## {title}", ""]
    if complete:
        parts.append(COMPLETE_MARKER)
    parts.extend(items)
    return "\n".join(parts).rstrip() + "\n"
