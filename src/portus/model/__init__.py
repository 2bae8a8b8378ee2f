"""Immutable board model and its structural transforms."""

from portus.model.board import (
    Board,
    BoardData,
    BoardError,
    Item,
    ItemData,
    ItemMetadata,
    Lane,
    LaneData,
    LaneLocation,
    Location,
    VirtualLocation,
    empty_board,
    find_item,
    locate_item,
    structure,
)
from portus.model.item import insert_item, move_item, update_item
from portus.model.lane import create_lane, find_lane, move_lane, remove_lane, rename_lane, set_lane_complete

__all__ = [
    "Board",
    "BoardData",
    "BoardError",
    "Item",
    "ItemData",
    "ItemMetadata",
    "Lane",
    "LaneData",
    "LaneLocation",
    "Location",
    "VirtualLocation",
    "create_lane",
    "empty_board",
    "find_item",
    "find_lane",
    "insert_item",
    "locate_item",
    "move_item",
    "move_lane",
    "remove_lane",
    "rename_lane",
    "set_lane_complete",
    "structure",
    "update_item",
]
