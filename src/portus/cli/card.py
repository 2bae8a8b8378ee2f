"""Handlers for 'portus card' commands.

Cards are addressed as ``LANE/N`` or ``LIST/N`` where LANE is a lane
title or 1-based position, LIST is a virtual list name and N is the
card's 1-based position.
"""

import sys

from portus.cli._common import (
    card_ref,
    card_to_dict,
    check_saved,
    error,
    find_card_or_die,
    find_lane_or_die,
    open_board_or_die,
    output_json,
    output_result,
)
from portus.inline import get_client, get_notes, get_priority, set_client, set_notes, set_priority
from portus.invoice import InvoiceBridge
from portus.model.board import LaneLocation, iter_locations, locate_item


def _target(board, args) -> tuple[str, str]:
    """(target id for the model, display name) from --lane / --list."""
    if getattr(args, "list", None):
        return args.list, args.list
    if getattr(args, "lane", None):
        _, lane = find_lane_or_die(board, args.lane, args.json)
        return lane.id, lane.data.title
    if not board.lanes:
        error("Board has no lanes. Add one with 'portus lane add'.", args.json)
    lane = board.lanes[0]
    return lane.id, lane.data.title


def _position(args) -> int | None:
    return args.position - 1 if getattr(args, "position", None) is not None else None


def card_list(args) -> int:
    """List cards grouped by lane, or the cards of one lane or list."""
    manager, _ = open_board_or_die(args)
    board = manager.state

    lane_index = None
    if args.lane:
        lane_index, _ = find_lane_or_die(board, args.lane, args.json)

    cards = []
    for location, item in iter_locations(board):
        if isinstance(location, LaneLocation):
            if args.list or (lane_index is not None and location.lane_index != lane_index):
                continue
        elif args.list != location.list_name:
            continue
        cards.append(card_to_dict(board, location, item))

    if args.json:
        output_json(cards)
    else:
        group = None
        for card in cards:
            container = card["ref"].rpartition("/")[0]
            if container != group:
                group = container
                print(group)
            mark = "x" if card["checked"] else " "
            print(f"  [{mark}] {card['ref']}  {card['title']}")

    return 0


def card_add(args) -> int:
    """Create a new card."""
    manager, view = open_board_or_die(args)
    target, name = _target(manager.state, args)

    item = manager.add_item(target, args.title, position=_position(args))
    check_saved(manager, view, args.json)

    ref = card_ref(manager.state, locate_item(manager.state, item.id))
    output_result({"ref": ref, "title": item.data.title}, f"Created card {ref} in {name}", args.json)

    return 0


def card_set(args) -> int:
    """Replace a card's raw text with stdin."""
    manager, view = open_board_or_die(args)
    _, item = find_card_or_die(manager.state, args.ref, args.json)

    text = sys.stdin.read().strip("\n")
    if not text.strip():
        error("Card text can't be empty.", args.json)
    manager.set_item_content(item.id, text)
    check_saved(manager, view, args.json)

    output_result({"ref": args.ref, "raw": text}, f"Updated card {args.ref}", args.json)

    return 0


def card_move(args) -> int:
    """Move a card to a lane or virtual list."""
    if not args.lane and not args.list:
        error("Give a destination with --lane or --list.", args.json)
    manager, view = open_board_or_die(args)
    _, item = find_card_or_die(manager.state, args.ref, args.json)
    target, name = _target(manager.state, args)

    manager.move_item(item.id, target, _position(args))
    check_saved(manager, view, args.json)

    ref = card_ref(manager.state, locate_item(manager.state, item.id))
    output_result({"ref": ref, "from": args.ref}, f"Moved card {args.ref} to {name} ({ref})", args.json)

    return 0


def card_complete(args) -> int:
    """Mark a card done, syncing it to an invoice when --vault is given."""
    manager, view = open_board_or_die(args)
    _, item = find_card_or_die(manager.state, args.ref, args.json)

    results = []
    if args.vault:
        bridge = InvoiceBridge(args.vault)
        manager.on_complete(lambda done: results.append(bridge.sync_task_to_invoice(done)))

    completed = manager.mark_task_complete(item.id)
    check_saved(manager, view, args.json)
    if completed is None:
        error(f"Couldn't complete card {args.ref}.", args.json)

    ref = card_ref(manager.state, locate_item(manager.state, completed.id))
    data = {"ref": ref, "title": completed.data.title}
    text = f"Completed card {args.ref} ({ref})"
    if results:
        result = results[0]
        data["invoice"] = {"success": result.success, "path": result.invoice_path, "error": result.error}
        if result.success:
            text += f"\nSynced to {result.invoice_path}"
        else:
            text += f"\nInvoice sync failed: {result.error}"
    output_result(data, text, args.json)

    return 0


def card_delete(args) -> int:
    """Delete a card."""
    manager, view = open_board_or_die(args)
    _, item = find_card_or_die(manager.state, args.ref, args.json)

    manager.delete_item(item.id)
    check_saved(manager, view, args.json)

    output_result({"ref": args.ref, "title": item.data.title}, f"Deleted card {args.ref}", args.json)

    return 0


def _edit_raw(args, edit) -> int:
    manager, view = open_board_or_die(args)
    _, item = find_card_or_die(manager.state, args.ref, args.json)
    try:
        text = edit(item.data.title_raw)
    except ValueError as exc:
        error(str(exc), args.json)

    manager.set_item_content(item.id, text)
    check_saved(manager, view, args.json)

    output_result({"ref": args.ref, "raw": text}, f"Updated card {args.ref}", args.json)
    return 0


def _retitle(raw: str, title: str) -> str:
    text = set_priority(title, get_priority(raw))
    text = set_notes(text, get_notes(raw))
    return set_client(text, get_client(raw))


def card_title(args) -> int:
    """Replace a card's text, keeping its priority, notes and client."""
    title = args.text if args.text is not None else sys.stdin.read()
    title = title.strip("\n")
    if not title.strip():
        error("Card text can't be empty.", args.json)
    return _edit_raw(args, lambda raw: _retitle(raw, title))


def card_priority(args) -> int:
    """Set a card's priority."""
    return _edit_raw(args, lambda raw: set_priority(raw, args.level))


def card_notes(args) -> int:
    """Set a card's notes from the argument or stdin. Empty clears them."""
    notes = args.text if args.text is not None else sys.stdin.read()
    return _edit_raw(args, lambda raw: set_notes(raw, notes.strip("\n")))


def card_client(args) -> int:
    """Set or clear a card's client code."""
    return _edit_raw(args, lambda raw: set_client(raw, args.code or None))

