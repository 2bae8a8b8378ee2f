"""Text <-> Board conversion.

``parse`` and ``serialize`` are pure. ``serialize`` writes only the
authoritative values (raw card text, lane titles, list membership,
front-matter and local settings); every derived field is rebuilt by
``parse``. One round trip therefore normalises a document and later
round trips are stable.
"""

from __future__ import annotations

import re
from dataclasses import replace
from typing import TYPE_CHECKING, Callable

from portus.constants import (
    DEFAULT_DATE_FORMAT,
    DEFAULT_DATE_TRIGGER,
    DEFAULT_METADATA_POSITION,
    DEFAULT_TIME_FORMAT,
    DEFAULT_TIME_TRIGGER,
    FRONTMATTER_KEY,
    VIRTUAL_LISTS,
)
from portus.dates import parse_date
from portus.ids import generate_instance_id
from portus.inline import (
    RESERVED_KEYS,
    get_client,
    get_notes,
    get_priority,
    iter_fields,
    strip_fields,
)
from portus.model.board import Board, BoardData, Item, ItemData, ItemMetadata, Lane, LaneData, empty_board
from portus.parser import (
    extract_front_matter,
    extract_settings_block,
    serialize_front_matter,
    serialize_item,
    serialize_section,
    serialize_settings_block,
    split_sections,
)
from portus.settings import Settings, compile_settings

if TYPE_CHECKING:
    from portus.state import StateManager

SettingsCompiler = Callable[[Settings], Settings]

_TAG = re.compile(r"(?:^|(?<=\s))#([^\s#\[\]{}()'\",.;:!?]+)")

LIST_TITLES = {name: name.capitalize() for name in VIRTUAL_LISTS}


def _default_compiler(local: Settings) -> Settings:
    return compile_settings(local, {})


def _date_regex(settings: Settings) -> re.Pattern:
    trigger = re.escape(settings.get("date-trigger") or DEFAULT_DATE_TRIGGER)
    if settings.get("link-date-to-daily-note"):
        content = r"\[\[([^\]]+)\]\]"
    else:
        content = r"\{([^}]+)\}"
    return re.compile(r"(?:^|(?<=\s))" + trigger + content)


def _time_regex(settings: Settings) -> re.Pattern:
    trigger = re.escape(settings.get("time-trigger") or DEFAULT_TIME_TRIGGER)
    return re.compile(r"(?:^|(?<=\s))" + trigger + r"\{([^}]+)\}")


def _collapse(text: str) -> str:
    lines = [re.sub(r"[ \t]+", " ", line).strip() for line in text.split("\n")]
    return "\n".join(lines).strip()


def derive_item_data(
    title_raw: str,
    check_char: str,
    settings: Settings,
    force_edit: bool = False,
) -> ItemData:
    """Build ItemData with every derived field computed from title_raw."""
    date_re = _date_regex(settings)
    time_re = _time_regex(settings)

    date = None
    match = date_re.search(title_raw)
    if match:
        date = parse_date(match.group(1), settings.get("date-format") or DEFAULT_DATE_FORMAT)

    time = None
    match = time_re.search(title_raw)
    if match:
        time = parse_date(match.group(1), settings.get("time-format") or DEFAULT_TIME_FORMAT)

    tags = tuple(dict.fromkeys(f"#{t}" for t in _TAG.findall(title_raw)))
    fields = tuple(iter_fields(title_raw))

    metadata_keys = [k.lower() for k in settings.get("metadata-keys") or ()]
    if (settings.get("inline-metadata-position") or DEFAULT_METADATA_POSITION) == "body":
        title = strip_fields(title_raw, list(RESERVED_KEYS) + metadata_keys)
    else:
        title = strip_fields(title_raw)
    if settings.get("move-dates"):
        title = time_re.sub("", title)
        title = date_re.sub("", title)
    if settings.get("move-tags"):
        title = _TAG.sub("", title)
    title = _collapse(title)

    notes = get_notes(title_raw)
    search_parts = [title, notes, " ".join(tags)]
    title_search = " ".join(" ".join(search_parts).casefold().split())

    metadata = ItemMetadata(
        date=date,
        time=time,
        tags=tags,
        inline=fields,
        priority=get_priority(title_raw),
        notes=notes,
        client=get_client(title_raw),
    )
    check_char = check_char or " "
    return ItemData(
        title_raw=title_raw,
        title=title,
        title_search=title_search,
        checked=check_char != " ",
        check_char=check_char,
        metadata=metadata,
        force_edit_mode=force_edit,
    )


def new_item(content: str, check_char: str, settings: Settings, force_edit: bool = False) -> Item:
    """Create an item with a fresh identity, ready for display."""
    return Item(id=generate_instance_id(), data=derive_item_data(content, check_char, settings, force_edit))


def update_item_content(item: Item, content: str, settings: Settings) -> Item:
    """Return a copy of item with new raw text and recomputed derived fields."""
    data = derive_item_data(content, item.data.check_char, settings, item.data.force_edit_mode)
    return replace(item, data=data)


def set_check_char(item: Item, check_char: str, settings: Settings) -> Item:
    """Return a copy of item with a new completion marker."""
    data = derive_item_data(item.data.title_raw, check_char, settings, item.data.force_edit_mode)
    return replace(item, data=data)


def parse(text: str, board_id: str, compiler: SettingsCompiler | None = None) -> Board:
    """Parse document text into a Board.

    compiler turns the document's local settings into compiled settings;
    it is called before any card is parsed so triggers and formats
    declared in the document apply to its own cards.
    """
    compiler = compiler or _default_compiler
    if not text.strip():
        return empty_board(board_id)

    body, frontmatter = extract_front_matter(text)
    body, local = extract_settings_block(body)
    local = dict(local)
    local[FRONTMATTER_KEY] = frontmatter.get(FRONTMATTER_KEY) or local.get(FRONTMATTER_KEY) or "board"
    compiled = compiler(local)

    lanes: list[Lane] = []
    lists: dict[str, list[Item]] = {name: [] for name in VIRTUAL_LISTS}
    for section in split_sections(body):
        items = [new_item(raw, char, compiled) for char, raw in section.items]
        list_name = section.title.strip().lower()
        if section.archived and list_name in lists:
            lists[list_name].extend(items)
            continue
        lanes.append(
            Lane(
                id=generate_instance_id(),
                data=LaneData(title=section.title, should_mark_items_complete=section.complete),
                items=tuple(items),
            )
        )

    data = BoardData(
        settings=local,
        frontmatter=dict(frontmatter),
        **{name: tuple(items) for name, items in lists.items()},
    )
    return Board(id=board_id, lanes=tuple(lanes), data=data)


def serialize(board: Board) -> str:
    """Serialize a Board back to document text."""
    settings = dict(board.data.settings)
    frontmatter = dict(board.data.frontmatter)
    frontmatter[FRONTMATTER_KEY] = settings.get(FRONTMATTER_KEY) or frontmatter.get(FRONTMATTER_KEY) or "board"

    parts: list[str] = []
    for lane in board.lanes:
        items = [serialize_item(item.data.check_char, item.data.title_raw) for item in lane.items]
        parts.append(serialize_section(lane.data.title, items, lane.data.should_mark_items_complete))

    archived: list[str] = []
    for name in VIRTUAL_LISTS:
        list_items = getattr(board.data, name)
        if not list_items:
            continue
        items = [serialize_item(item.data.check_char, item.data.title_raw) for item in list_items]
        archived.append(serialize_section(LIST_TITLES[name], items))
    if archived:
        parts.append("***\n")
        parts.extend(archived)

    body = "\n".join(parts)
    return serialize_front_matter(frontmatter) + body.rstrip("\n") + serialize_settings_block(settings) + "\n"


class ListFormat:
    """Format bound to a StateManager.

    Cards are parsed with the manager's compiled settings, and parsing a
    document first compiles that document's own settings as the supplied
    tier.
    """

    def __init__(self, state_manager: StateManager) -> None:
        self.state_manager = state_manager

    def md_to_board(self, text: str) -> Board:
        return parse(text, self.state_manager.board_id, self.state_manager.compile_document_settings)

    def board_to_md(self, board: Board) -> str:
        return serialize(board)

    def reparse_board(self) -> Board:
        """Round-trip the current board so every card is re-derived."""
        return self.md_to_board(self.board_to_md(self.state_manager.state))

    def new_item(self, content: str, check_char: str, force_edit: bool = False) -> Item:
        return new_item(content, check_char, self.state_manager.compiled_settings, force_edit)

    def update_item_content(self, item: Item, content: str) -> Item:
        return update_item_content(item, content, self.state_manager.compiled_settings)

    def set_check_char(self, item: Item, check_char: str) -> Item:
        return set_check_char(item, check_char, self.state_manager.compiled_settings)
