"""Handler for 'portus archive'."""

from portus.cli._common import check_saved, open_board_or_die, output_result


def archive(args) -> int:
    """Archive completed cards and everything in completion lanes."""
    manager, view = open_board_or_die(args)
    before = len(manager.state.data.archive)

    manager.archive_completed_cards()
    check_saved(manager, view, args.json)

    count = len(manager.state.data.archive) - before
    output_result(
        {"archived": count},
        f"Archived {count} {'card' if count == 1 else 'cards'}",
        args.json,
    )

    return 0
