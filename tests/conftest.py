"""Shared test helpers."""

import asyncio
from datetime import datetime

import pytest

from portus.config import HostLocale
from portus.document import BoardView
from portus.format import new_item
from portus.ids import generate_instance_id
from portus.model.board import Board, BoardData, Lane, LaneData
from portus.settings import compile_settings
from portus.state import StateManager

HOST = HostLocale(daily_note_format=None, uses_12_hour=False)

NOW = datetime(2026, 1, 2, 10, 0)

BOARD_MD = """---

kanban-plugin: board

---

## Todo

- [ ] Write report [priority::high]
- [ ] Call Mercer about the listing #pep

## Doing

- [ ] Fix sink @{2026-03-04}
- [x] Order parts

## Finished

**Complete**
- [ ] Ship A
- [ ] Ship B
- [ ] Ship C

***

## Archive

- [x] Old thing

## Done

- [x] Finished thing

%% kanban:settings
```
{"kanban-plugin":"board"}
```
%%
"""


def _settings(**local):
    return compile_settings(local, {}, host=HOST)


def _make_item(text, check=" ", **settings):
    """Helper to build an Item with derived fields."""
    return new_item(text, check, _settings(**settings))


def _make_board(lanes=None, complete=(), **lists):
    """Helper to build a Board from {lane title: [card text]}."""
    built = tuple(
        Lane(
            id=generate_instance_id(),
            data=LaneData(title=title, should_mark_items_complete=title in complete),
            items=tuple(_make_item(text) for text in texts),
        )
        for title, texts in (lanes or {}).items()
    )
    data = BoardData(
        settings={"kanban-plugin": "board"},
        **{name: tuple(_make_item(text, "x") for text in texts) for name, texts in lists.items()},
    )
    return Board(id="Board.md", lanes=built, data=data)


def _titles(lane):
    return [item.data.title_raw for item in lane.items]


class RecordingView(BoardView):
    """View that keeps every save request."""

    def __init__(self, data=""):
        super().__init__(data)
        self.saves = []

    def request_save_to_disk(self, text):
        super().request_save_to_disk(text)
        self.saves.append(text)


def _make_manager(text=BOARD_MD, global_settings=None, view=None):
    """Helper to build a StateManager with text loaded through a view."""
    global_settings = {} if global_settings is None else global_settings
    manager = StateManager(
        "Board.md",
        get_global_settings=lambda: global_settings,
        host=HOST,
        clock=lambda: NOW,
    )
    view = view or RecordingView(text)
    asyncio.run(manager.attach(view))
    return manager, view


@pytest.fixture
def manager():
    return _make_manager()[0]
