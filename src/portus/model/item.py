"""Item transforms. Each takes a Board and returns a new Board."""

from dataclasses import replace
from typing import Callable

from portus.constants import VIRTUAL_LISTS
from portus.model.board import (
    Board,
    Item,
    LaneLocation,
    Location,
    VirtualLocation,
    locate_item,
    virtual_list,
    with_lane,
    with_virtual_list,
)


def _splice(items: tuple[Item, ...], index: int, item: Item) -> tuple[Item, ...]:
    index = max(0, min(index, len(items)))
    return items[:index] + (item,) + items[index:]


def insert_item(board: Board, location: Location, item: Item) -> Board:
    """Insert item at location. Indices past the end append.

    Raises IndexError if a lane location names a lane that doesn't exist.
    """
    if isinstance(location, LaneLocation):
        if not 0 <= location.lane_index < len(board.lanes):
            raise IndexError(f"No lane at index {location.lane_index}")
        lane = board.lanes[location.lane_index]
        new_lane = replace(lane, items=_splice(lane.items, location.item_index, item))
        return with_lane(board, location.lane_index, new_lane)
    items = virtual_list(board, location.list_name)
    return with_virtual_list(board, location.list_name, _splice(items, location.item_index, item))


def remove_at(board: Board, location: Location) -> Board:
    if isinstance(location, LaneLocation):
        lane = board.lanes[location.lane_index]
        items = lane.items[: location.item_index] + lane.items[location.item_index + 1 :]
        return with_lane(board, location.lane_index, replace(lane, items=items))
    items = virtual_list(board, location.list_name)
    return with_virtual_list(
        board, location.list_name, items[: location.item_index] + items[location.item_index + 1 :]
    )


def item_at(board: Board, location: Location) -> Item:
    if isinstance(location, LaneLocation):
        return board.lanes[location.lane_index].items[location.item_index]
    return virtual_list(board, location.list_name)[location.item_index]


def resolve_target(board: Board, target: str, position: int | None = None) -> Location:
    """Turn a lane id or virtual list name into an insertion location."""
    if target in VIRTUAL_LISTS:
        size = len(virtual_list(board, target))
        return VirtualLocation(target, size if position is None else position)
    for index, lane in enumerate(board.lanes):
        if lane.id == target:
            return LaneLocation(index, len(lane.items) if position is None else position)
    raise KeyError(f"No lane or list named '{target}'")


def move_item(
    board: Board,
    item_id: str,
    target: str,
    position: int | None = None,
    transform: Callable[[Item], Item] | None = None,
) -> Board:
    """Move an item to target (lane id or virtual list name) at position.

    Removal and insertion produce one new Board, so no observer ever sees
    the item missing. Same-lane reorders count position after removal.
    transform, if given, is applied to the item on its way across.
    """
    location = locate_item(board, item_id)
    if location is None:
        raise KeyError(f"No item '{item_id}'")
    item = item_at(board, location)
    without = remove_at(board, location)
    destination = resolve_target(without, target, position)
    if transform is not None:
        item = transform(item)
    return insert_item(without, destination, item)


def update_item(board: Board, item_id: str, fn: Callable[[Item], Item]) -> Board:
    """Replace an item in place with fn(item)."""
    location = locate_item(board, item_id)
    if location is None:
        raise KeyError(f"No item '{item_id}'")
    new_item = fn(item_at(board, location))
    if isinstance(location, LaneLocation):
        lane = board.lanes[location.lane_index]
        items = list(lane.items)
        items[location.item_index] = new_item
        return with_lane(board, location.lane_index, replace(lane, items=tuple(items)))
    items = list(virtual_list(board, location.list_name))
    items[location.item_index] = new_item
    return with_virtual_list(board, location.list_name, tuple(items))
