"""Shared helpers for CLI command handlers."""

import asyncio
import json
import sys
from pathlib import Path

from portus.config import read_global_settings
from portus.constants import VIRTUAL_LISTS
from portus.document import FileView
from portus.model.board import Board, Item, Lane, LaneLocation, Location, VirtualLocation, virtual_list
from portus.model.lane import find_lane
from portus.state import StateManager


def open_board_or_die(args) -> tuple[StateManager, FileView]:
    """Open the board file through a StateManager. Exit 1 if it can't be used."""
    path = Path(args.file).resolve()
    if not path.is_file():
        error(f"No board file at {path}", args.json)
    settings = read_global_settings(getattr(args, "settings", None))
    view = FileView(path)
    manager = StateManager(str(path), get_global_settings=lambda: settings)
    asyncio.run(manager.attach(view))
    if manager.has_error():
        error(manager.state.data.errors[0].description, args.json)
    return manager, view


def check_saved(manager: StateManager, view: FileView, json_mode: bool) -> None:
    """Exit 1 if the last mutation was rejected or couldn't be written."""
    if manager.has_error():
        error(manager.state.data.errors[-1].description, json_mode)
    if view.last_error is not None:
        error(f"Failed to save: {view.last_error}", json_mode)


def find_lane_or_die(board: Board, ref: str, json_mode: bool) -> tuple[int, Lane]:
    """Lookup a lane by 1-based position or title. Exit 1 listing lanes if not found."""
    if ref.isdigit() and 1 <= int(ref) <= len(board.lanes):
        index = int(ref) - 1
        return index, board.lanes[index]
    lane = find_lane(board, ref)
    if lane is not None:
        return board.lanes.index(lane), lane
    available = [f"  {i}  {lane.data.title}" for i, lane in enumerate(board.lanes, 1)]
    error(f"Lane '{ref}' not found. Available:\n" + "\n".join(available), json_mode)


def find_card_or_die(board: Board, ref: str, json_mode: bool) -> tuple[Location, Item]:
    """Lookup a card by ``LANE/N`` or ``LIST/N`` (N is 1-based). Exit 1 if not found."""
    container, _, number = ref.rpartition("/")
    if not container or not number.isdigit() or int(number) < 1:
        error(f"Bad card reference '{ref}'. Use LANE/N or LIST/N, e.g. 'Todo/1' or 'done/2'.", json_mode)
    index = int(number) - 1
    if container.lower() in VIRTUAL_LISTS:
        name = container.lower()
        items = virtual_list(board, name)
        if index < len(items):
            return VirtualLocation(name, index), items[index]
    else:
        lane_index, lane = find_lane_or_die(board, container, json_mode)
        if index < len(lane.items):
            return LaneLocation(lane_index, index), lane.items[index]
    error(f"Card '{ref}' not found.", json_mode)


def card_ref(board: Board, location: Location) -> str:
    """The ``LANE/N`` reference for a location."""
    if isinstance(location, LaneLocation):
        return f"{board.lanes[location.lane_index].data.title}/{location.item_index + 1}"
    return f"{location.list_name}/{location.item_index + 1}"


def card_to_dict(board: Board, location: Location, item: Item) -> dict:
    metadata = item.data.metadata
    return {
        "ref": card_ref(board, location),
        "title": item.data.title,
        "raw": item.data.title_raw,
        "checked": item.data.checked,
        "priority": metadata.priority,
        "client": metadata.client,
        "tags": list(metadata.tags),
        "date": metadata.date.date().isoformat() if metadata.date else None,
    }


def output_json(data: dict | list) -> None:
    """Write JSON to stdout."""
    print(json.dumps(data, indent=2))


def output_result(data: dict, text: str, json_mode: bool) -> None:
    """Output mutation result as JSON or plain text."""
    if json_mode:
        output_json(data)
    else:
        print(text)


def error(message: str, json_mode: bool) -> None:
    """Print error to stderr and exit 1."""
    if json_mode:
        print(json.dumps({"error": message}), file=sys.stderr)
    else:
        print(f"error: {message}", file=sys.stderr)
    sys.exit(1)


def build_lane_summaries(board: Board) -> list[dict]:
    """Build lane summary dicts from board."""
    return [
        {
            "id": i,
            "name": lane.data.title,
            "cards": len(lane.items),
            "complete": lane.data.should_mark_items_complete,
        }
        for i, lane in enumerate(board.lanes, 1)
    ]


def format_lane_line(c: dict, indent: str = "") -> str:
    """Format a lane summary dict as a text line."""
    complete = "  (complete)" if c["complete"] else ""
    cards = "card" if c["cards"] == 1 else "cards"
    return f"{indent}{c['id']}  {c['name']:<16} {c['cards']} {cards}{complete}"
