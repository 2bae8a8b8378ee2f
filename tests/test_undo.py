"""Tests for the single-slot undo buffer."""

import pytest

from portus.errors import RestoreNoOp
from portus.model.board import LaneLocation, VirtualLocation
from portus.model.lane import remove_lane
from portus.undo import UndoBuffer, restore

from tests.conftest import _make_board, _make_item, _titles


def test_save_overwrites_and_take_consumes():
    buffer = UndoBuffer()
    a, b = _make_item("a"), _make_item("b")
    buffer.save(a, LaneLocation(0, 0))
    buffer.save(b, LaneLocation(0, 1))
    assert buffer.take().item is b
    assert buffer.take() is None


def test_restore_at_recorded_index():
    board = _make_board({"Todo": ["a", "c"]})
    deleted = UndoBuffer()
    deleted.save(_make_item("b"), LaneLocation(0, 1))
    result = restore(board, deleted.take())
    assert _titles(result.lanes[0]) == ["a", "b", "c"]


def test_restore_into_virtual_list():
    board = _make_board({"Todo": []}, done=["x"])
    buffer = UndoBuffer()
    buffer.save(_make_item("y"), VirtualLocation("done", 0))
    result = restore(board, buffer.take())
    assert [i.data.title_raw for i in result.data.done] == ["y", "x"]


def test_restore_to_missing_lane_is_noop():
    board = _make_board({"Todo": ["a"], "Doing": ["b"]})
    buffer = UndoBuffer()
    buffer.save(board.lanes[1].items[0], LaneLocation(1, 0))
    board = remove_lane(board, board.lanes[1].id)
    with pytest.raises(RestoreNoOp):
        restore(board, buffer.take())
