"""Handlers for 'portus board' commands."""

import sys
from pathlib import Path

from portus.cli._common import (
    build_lane_summaries,
    check_saved,
    format_lane_line,
    open_board_or_die,
    output_json,
    output_result,
)
from portus.constants import VIRTUAL_LISTS
from portus.model.board import virtual_list


def board_summary(args) -> int:
    """Show board summary: lanes, card counts, virtual lists."""
    manager, _ = open_board_or_die(args)
    board = manager.state
    title = Path(board.id).stem

    lanes = build_lane_summaries(board)
    lists = {name: len(virtual_list(board, name)) for name in VIRTUAL_LISTS}

    if args.json:
        output_json({"title": title, "lanes": lanes, "lists": lists})
    else:
        print(title)
        for c in lanes:
            print(format_lane_line(c, indent="  "))
        counts = ", ".join(f"{name} {count}" for name, count in lists.items() if count)
        if counts:
            print(f"  ({counts})")

    return 0


def board_get(args) -> int:
    """Dump the board document as it would be saved."""
    manager, _ = open_board_or_die(args)
    markdown = manager.format.board_to_md(manager.state)

    if args.json:
        output_json(
            {
                "frontmatter": manager.state.data.frontmatter,
                "settings": manager.state.data.settings,
                "markdown": markdown,
            }
        )
    else:
        sys.stdout.write(markdown)

    return 0


def board_normalize(args) -> int:
    """Rewrite the board file in canonical form."""
    manager, view = open_board_or_die(args)
    before = view.data

    manager.save_to_disk()
    check_saved(manager, view, args.json)

    changed = view.data != before
    output_result(
        {"file": str(view.path), "changed": changed},
        f"Normalized {view.path.name}" if changed else f"{view.path.name} already normalized",
        args.json,
    )

    return 0
