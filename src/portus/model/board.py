"""Immutable board model.

Every class here is a frozen dataclass and every sequence is a tuple.
A mutation builds a new Board that shares all untouched lanes and items
with the previous one, so observers can detect change by identity.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Iterator, Union

from portus.constants import VIRTUAL_LISTS


@dataclass(frozen=True)
class ItemMetadata:
    """Values derived from an item's raw text."""

    date: datetime | None = None
    time: datetime | None = None
    tags: tuple[str, ...] = ()
    inline: tuple[tuple[str, str], ...] = ()
    priority: str = "standard"
    notes: str = ""
    client: str | None = None


@dataclass(frozen=True)
class ItemData:
    title_raw: str
    title: str
    title_search: str
    checked: bool = False
    check_char: str = " "
    metadata: ItemMetadata = field(default_factory=ItemMetadata)
    force_edit_mode: bool = False


@dataclass(frozen=True)
class Item:
    id: str
    data: ItemData


@dataclass(frozen=True)
class LaneData:
    title: str
    should_mark_items_complete: bool = False


@dataclass(frozen=True)
class Lane:
    id: str
    data: LaneData
    items: tuple[Item, ...] = ()


@dataclass(frozen=True)
class BoardError:
    """A parse or mutation failure recorded on the board."""

    description: str
    stack: str = ""


@dataclass(frozen=True)
class BoardData:
    archive: tuple[Item, ...] = ()
    done: tuple[Item, ...] = ()
    delegated: tuple[Item, ...] = ()
    recurring: tuple[Item, ...] = ()
    proposals: tuple[Item, ...] = ()
    waiting: tuple[Item, ...] = ()
    settings: dict[str, Any] = field(default_factory=dict)
    frontmatter: dict[str, Any] = field(default_factory=dict)
    is_searching: bool = False
    errors: tuple[BoardError, ...] = ()


@dataclass(frozen=True)
class Board:
    id: str
    lanes: tuple[Lane, ...] = ()
    data: BoardData = field(default_factory=BoardData)


@dataclass(frozen=True)
class LaneLocation:
    lane_index: int
    item_index: int


@dataclass(frozen=True)
class VirtualLocation:
    list_name: str
    item_index: int


Location = Union[LaneLocation, VirtualLocation]


def empty_board(board_id: str, settings: dict[str, Any] | None = None) -> Board:
    """Board used for empty documents and as the base for failed parses."""
    return Board(id=board_id, data=BoardData(settings=dict(settings or {"kanban-plugin": "board"})))


def check_virtual_list(name: str) -> str:
    """Validate a virtual list name, returning it unchanged."""
    if name not in VIRTUAL_LISTS:
        raise ValueError(f"Unknown virtual list '{name}'")
    return name


def virtual_list(board: Board, name: str) -> tuple[Item, ...]:
    return getattr(board.data, check_virtual_list(name))


def with_virtual_list(board: Board, name: str, items: tuple[Item, ...]) -> Board:
    """Return a board whose named virtual list is replaced by items."""
    check_virtual_list(name)
    return replace(board, data=replace(board.data, **{name: tuple(items)}))


def with_lane(board: Board, index: int, lane: Lane) -> Board:
    lanes = list(board.lanes)
    lanes[index] = lane
    return replace(board, lanes=tuple(lanes))


def with_settings(board: Board, settings: dict[str, Any]) -> Board:
    return replace(board, data=replace(board.data, settings=dict(settings)))


def with_error(board: Board, error: BoardError) -> Board:
    return replace(board, data=replace(board.data, errors=board.data.errors + (error,)))


def iter_locations(board: Board) -> Iterator[tuple[Location, Item]]:
    """Yield (location, item) for every item: lanes first, then virtual lists."""
    for lane_index, lane in enumerate(board.lanes):
        for item_index, item in enumerate(lane.items):
            yield LaneLocation(lane_index, item_index), item
    for name in VIRTUAL_LISTS:
        for item_index, item in enumerate(virtual_list(board, name)):
            yield VirtualLocation(name, item_index), item


def locate_item(board: Board, item_id: str) -> Location | None:
    """Find where an item lives, or None."""
    for location, item in iter_locations(board):
        if item.id == item_id:
            return location
    return None


def find_item(board: Board, item_id: str | None) -> Item | None:
    """Find an item anywhere on the board by id."""
    if item_id is None:
        return None
    for _, item in iter_locations(board):
        if item.id == item_id:
            return item
    return None


def structure(board: Board) -> tuple:
    """Identity-free view of a board for structural comparison.

    Item and lane IDs are regenerated on every parse, so round-trip
    checks compare this instead of the boards themselves.
    """
    lanes = tuple(
        (
            lane.data.title,
            lane.data.should_mark_items_complete,
            tuple((item.data.title_raw, item.data.check_char) for item in lane.items),
        )
        for lane in board.lanes
    )
    lists = tuple(
        (name, tuple((item.data.title_raw, item.data.check_char) for item in virtual_list(board, name)))
        for name in VIRTUAL_LISTS
    )
    return lanes, lists
