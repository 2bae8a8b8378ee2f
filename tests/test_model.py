"""Tests for board model transforms."""

import pytest

from portus.model.board import (
    LaneLocation,
    VirtualLocation,
    check_virtual_list,
    find_item,
    iter_locations,
    locate_item,
)
from portus.model.item import insert_item, move_item, resolve_target, update_item
from portus.model.lane import create_lane, find_lane, move_lane, remove_lane, rename_lane, set_lane_complete

from tests.conftest import _make_board, _make_item, _titles


@pytest.fixture
def board():
    return _make_board({"Todo": ["a", "b", "c"], "Doing": ["d"], "Done": []}, archive=["old"])


# --- items ---


def test_locate_item(board):
    b = board.lanes[0].items[1]
    assert locate_item(board, b.id) == LaneLocation(0, 1)
    old = board.data.archive[0]
    assert locate_item(board, old.id) == VirtualLocation("archive", 0)
    assert locate_item(board, "missing") is None
    assert find_item(board, None) is None


def test_iter_locations_lanes_first(board):
    locations = [loc for loc, _ in iter_locations(board)]
    assert locations[0] == LaneLocation(0, 0)
    assert locations[-1] == VirtualLocation("archive", 0)


def test_insert_item_clamps_index(board):
    item = _make_item("new")
    result = insert_item(board, LaneLocation(1, 99), item)
    assert _titles(result.lanes[1]) == ["d", "new"]


def test_insert_item_missing_lane(board):
    with pytest.raises(IndexError):
        insert_item(board, LaneLocation(9, 0), _make_item("x"))


def test_move_between_lanes_shares_untouched_lanes(board):
    item = board.lanes[0].items[0]
    result = move_item(board, item.id, board.lanes[2].id)
    assert _titles(result.lanes[0]) == ["b", "c"]
    assert _titles(result.lanes[2]) == ["a"]
    assert result.lanes[1] is board.lanes[1]
    assert result.data.archive is board.data.archive
    assert result.lanes[2].items[0] is item


def test_move_reorders_within_lane(board):
    item = board.lanes[0].items[0]
    result = move_item(board, item.id, board.lanes[0].id, 2)
    assert _titles(result.lanes[0]) == ["b", "c", "a"]


def test_move_to_virtual_list_with_transform(board):
    item = board.lanes[1].items[0]
    result = move_item(board, item.id, "done", transform=lambda i: _make_item("changed"))
    assert [i.data.title_raw for i in result.data.done] == ["changed"]
    assert result.lanes[1].items == ()


def test_move_unknown_target(board):
    with pytest.raises(KeyError):
        move_item(board, board.lanes[0].items[0].id, "nowhere")


def test_resolve_target_appends_by_default(board):
    assert resolve_target(board, board.lanes[0].id) == LaneLocation(0, 3)
    assert resolve_target(board, "archive") == VirtualLocation("archive", 1)


def test_update_item_in_virtual_list(board):
    old = board.data.archive[0]
    result = update_item(board, old.id, lambda i: _make_item("renamed"))
    assert result.data.archive[0].data.title_raw == "renamed"
    assert result.lanes is board.lanes


def test_check_virtual_list():
    assert check_virtual_list("done") == "done"
    with pytest.raises(ValueError):
        check_virtual_list("later")


# --- lanes ---


def test_create_lane_unique_title(board):
    result, lane = create_lane(board, "Todo", position=1)
    assert lane.data.title == "Todo (1)"
    assert result.lanes[1] is lane


def test_create_complete_lane(board):
    result, lane = create_lane(board, "Shipped", complete=True)
    assert result.lanes[-1].data.should_mark_items_complete is True


def test_find_lane_by_id_or_title(board):
    assert find_lane(board, board.lanes[1].id) is board.lanes[1]
    assert find_lane(board, " doing ") is board.lanes[1]
    assert find_lane(board, "nope") is None


def test_move_lane(board):
    result = move_lane(board, board.lanes[0].id, 10)
    assert [lane.data.title for lane in result.lanes] == ["Doing", "Done", "Todo"]


def test_rename_and_complete_lane(board):
    lane_id = board.lanes[2].id
    result = set_lane_complete(rename_lane(board, lane_id, "Shipped"), lane_id, True)
    assert result.lanes[2].data.title == "Shipped"
    assert result.lanes[2].data.should_mark_items_complete is True


def test_remove_lane(board):
    result = remove_lane(board, board.lanes[0].id)
    assert [lane.data.title for lane in result.lanes] == ["Doing", "Done"]
    with pytest.raises(KeyError):
        remove_lane(board, "missing")
