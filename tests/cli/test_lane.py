"""Tests for 'portus lane' commands."""

import json

import pytest

from portus.cli.lane import lane_add, lane_complete, lane_list, lane_move, lane_remove, lane_rename
from portus.format import parse

from tests.cli.conftest import _args


def _lane_titles(path):
    return [lane.data.title for lane in parse(path.read_text(), "b").lanes]


def test_lane_list(board_file, capsys):
    assert lane_list(_args(board_file)) == 0

    out = capsys.readouterr().out
    assert out.splitlines()[0].startswith("1  Todo")
    assert "2 cards" in out
    assert "3 cards  (complete)" in out


def test_lane_list_json(board_file, capsys):
    assert lane_list(_args(board_file, json=True)) == 0

    data = json.loads(capsys.readouterr().out)
    assert data[1] == {"id": 2, "name": "Doing", "cards": 2, "complete": False}


def test_lane_add(board_file, capsys):
    assert lane_add(_args(board_file, name="Review", position=2, complete=False)) == 0

    assert "Created lane 2  Review" in capsys.readouterr().out
    assert _lane_titles(board_file) == ["Todo", "Review", "Doing", "Finished"]


def test_lane_add_duplicate_complete(board_file, capsys):
    assert lane_add(_args(board_file, json=True, name="Todo", position=None, complete=True)) == 0

    assert json.loads(capsys.readouterr().out) == {"id": 4, "name": "Todo (1)", "complete": True}
    board = parse(board_file.read_text(), "b")
    assert board.lanes[3].data.should_mark_items_complete is True


def test_lane_rename(board_file, capsys):
    assert lane_rename(_args(board_file, ref="Doing", new_name="In progress")) == 0

    assert "Renamed lane 2: Doing -> In progress" in capsys.readouterr().out
    assert _lane_titles(board_file) == ["Todo", "In progress", "Finished"]


def test_lane_move(board_file, capsys):
    assert lane_move(_args(board_file, ref="1", position=3)) == 0

    assert "Moved lane Todo to position 3" in capsys.readouterr().out
    assert _lane_titles(board_file) == ["Doing", "Finished", "Todo"]


def test_lane_complete_on_and_off(board_file):
    assert lane_complete(_args(board_file, ref="Doing", off=False)) == 0
    assert "## Doing\n\n**Complete**\n" in board_file.read_text()

    assert lane_complete(_args(board_file, ref="Finished", off=True)) == 0
    assert "**Complete**\n- [ ] Ship A" not in board_file.read_text()


def test_lane_remove(board_file, capsys):
    assert lane_remove(_args(board_file, ref="Finished")) == 0

    assert "Removed lane Finished (3 cards)" in capsys.readouterr().out
    text = board_file.read_text()
    assert "Ship A" not in text
    assert _lane_titles(board_file) == ["Todo", "Doing"]


def test_lane_not_found(board_file):
    with pytest.raises(SystemExit, match="1"):
        lane_rename(_args(board_file, ref="9", new_name="x"))
