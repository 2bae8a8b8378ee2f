"""Handlers for 'portus lane' commands."""

from portus.cli._common import (
    build_lane_summaries,
    check_saved,
    find_lane_or_die,
    format_lane_line,
    open_board_or_die,
    output_json,
    output_result,
)
from portus.model.lane import create_lane, move_lane, remove_lane, rename_lane, set_lane_complete


def lane_list(args) -> int:
    """List all lanes."""
    manager, _ = open_board_or_die(args)
    items = build_lane_summaries(manager.state)

    if args.json:
        output_json(items)
    else:
        for c in items:
            print(format_lane_line(c))

    return 0


def lane_add(args) -> int:
    """Create a lane."""
    manager, view = open_board_or_die(args)
    position = args.position - 1 if args.position is not None else None

    created = []

    def add(board):
        board, lane = create_lane(board, args.name, position=position, complete=args.complete)
        created.append(lane)
        return board

    manager.set_state(add)
    check_saved(manager, view, args.json)

    lane = created[0]
    index = manager.state.lanes.index(lane) + 1
    output_result(
        {"id": index, "name": lane.data.title, "complete": args.complete},
        f"Created lane {index}  {lane.data.title}",
        args.json,
    )

    return 0


def lane_rename(args) -> int:
    """Rename a lane."""
    manager, view = open_board_or_die(args)
    index, lane = find_lane_or_die(manager.state, args.ref, args.json)
    old_name = lane.data.title

    manager.set_state(lambda board: rename_lane(board, lane.id, args.new_name))
    check_saved(manager, view, args.json)

    output_result(
        {"id": index + 1, "old_name": old_name, "new_name": args.new_name},
        f"Renamed lane {index + 1}: {old_name} -> {args.new_name}",
        args.json,
    )

    return 0


def lane_move(args) -> int:
    """Move a lane to a new position."""
    manager, view = open_board_or_die(args)
    _, lane = find_lane_or_die(manager.state, args.ref, args.json)

    manager.set_state(lambda board: move_lane(board, lane.id, args.position - 1))
    check_saved(manager, view, args.json)

    index = [each.id for each in manager.state.lanes].index(lane.id) + 1
    output_result(
        {"id": index, "name": lane.data.title},
        f"Moved lane {lane.data.title} to position {index}",
        args.json,
    )

    return 0


def lane_complete(args) -> int:
    """Mark a lane as a completion lane, or unmark it with --off."""
    manager, view = open_board_or_die(args)
    index, lane = find_lane_or_die(manager.state, args.ref, args.json)
    complete = not args.off

    manager.set_state(lambda board: set_lane_complete(board, lane.id, complete))
    check_saved(manager, view, args.json)

    state = "marks cards complete" if complete else "no longer marks cards complete"
    output_result(
        {"id": index + 1, "name": lane.data.title, "complete": complete},
        f"Lane {lane.data.title} {state}",
        args.json,
    )

    return 0


def lane_remove(args) -> int:
    """Remove a lane and its cards."""
    manager, view = open_board_or_die(args)
    index, lane = find_lane_or_die(manager.state, args.ref, args.json)

    manager.set_state(lambda board: remove_lane(board, lane.id))
    check_saved(manager, view, args.json)

    cards = len(lane.items)
    output_result(
        {"id": index + 1, "name": lane.data.title, "cards": cards},
        f"Removed lane {lane.data.title} ({cards} {'card' if cards == 1 else 'cards'})",
        args.json,
    )

    return 0
