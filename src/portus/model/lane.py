"""Lane transforms. Each takes a Board and returns a new Board."""

from dataclasses import replace

from portus.ids import generate_instance_id, unique_name
from portus.model.board import Board, Lane, LaneData, with_lane


def lane_index(board: Board, lane_id: str) -> int:
    """Index of the lane with lane_id. Raises KeyError if absent."""
    for index, lane in enumerate(board.lanes):
        if lane.id == lane_id:
            return index
    raise KeyError(f"No lane '{lane_id}'")


def find_lane(board: Board, lane_ref: str) -> Lane | None:
    """Find a lane by id, then by case-insensitive title."""
    for lane in board.lanes:
        if lane.id == lane_ref:
            return lane
    wanted = lane_ref.strip().lower()
    for lane in board.lanes:
        if lane.data.title.strip().lower() == wanted:
            return lane
    return None


def create_lane(
    board: Board,
    title: str,
    position: int | None = None,
    complete: bool = False,
) -> tuple[Board, Lane]:
    """Add a new empty lane. Duplicate titles get a numeric suffix.

    Returns (board, lane).
    """
    title = unique_name(title, {lane.data.title for lane in board.lanes})
    lane = Lane(id=generate_instance_id(), data=LaneData(title=title, should_mark_items_complete=complete))
    lanes = list(board.lanes)
    lanes.insert(len(lanes) if position is None else position, lane)
    return replace(board, lanes=tuple(lanes)), lane


def move_lane(board: Board, lane_id: str, new_index: int) -> Board:
    """Move a lane to new_index, clamped to the valid range."""
    lanes = list(board.lanes)
    lane = lanes.pop(lane_index(board, lane_id))
    lanes.insert(max(0, min(new_index, len(lanes))), lane)
    return replace(board, lanes=tuple(lanes))


def rename_lane(board: Board, lane_id: str, title: str) -> Board:
    index = lane_index(board, lane_id)
    lane = board.lanes[index]
    return with_lane(board, index, replace(lane, data=replace(lane.data, title=title)))


def set_lane_complete(board: Board, lane_id: str, complete: bool) -> Board:
    """Set whether every card placed in the lane counts as completed."""
    index = lane_index(board, lane_id)
    lane = board.lanes[index]
    return with_lane(board, index, replace(lane, data=replace(lane.data, should_mark_items_complete=complete)))


def remove_lane(board: Board, lane_id: str) -> Board:
    """Remove a lane and every card in it."""
    index = lane_index(board, lane_id)
    return replace(board, lanes=board.lanes[:index] + board.lanes[index + 1 :])
