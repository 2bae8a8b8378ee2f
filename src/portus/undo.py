"""Single-slot buffer for the last deleted card."""

from __future__ import annotations

from dataclasses import dataclass

from portus.errors import RestoreNoOp
from portus.model.board import Board, Item, LaneLocation, Location
from portus.model.item import insert_item


@dataclass(frozen=True)
class DeletedItem:
    item: Item
    location: Location


class UndoBuffer:
    """Holds at most one deleted item. Each save overwrites, each restore consumes."""

    def __init__(self) -> None:
        self._slot: DeletedItem | None = None

    def save(self, item: Item, location: Location) -> None:
        self._slot = DeletedItem(item, location)

    def take(self) -> DeletedItem | None:
        slot, self._slot = self._slot, None
        return slot


def restore(board: Board, deleted: DeletedItem) -> Board:
    """Reinsert a deleted item at its recorded location.

    Raises RestoreNoOp if the recorded lane no longer exists.
    """
    location = deleted.location
    if isinstance(location, LaneLocation) and not 0 <= location.lane_index < len(board.lanes):
        raise RestoreNoOp(f"lane {location.lane_index} no longer exists")
    return insert_item(board, location, deleted.item)
