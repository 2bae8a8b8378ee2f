"""CLI argument parser and dispatch for portus."""

import argparse

from portus.cli.archive import archive
from portus.cli.board import board_get, board_normalize, board_summary
from portus.cli.card import (
    card_add,
    card_client,
    card_complete,
    card_delete,
    card_list,
    card_move,
    card_notes,
    card_priority,
    card_set,
    card_title,
)
from portus.cli.invoice import invoice
from portus.cli.lane import lane_add, lane_complete, lane_list, lane_move, lane_remove, lane_rename
from portus.constants import VIRTUAL_LISTS
from portus.inline import PRIORITIES

CARD_REF_HELP = "Card reference: LANE/N or LIST/N (N is 1-based)"


def build_parser() -> argparse.ArgumentParser:
    """Build the full CLI argument parser."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--file", "-f", default="Board.md", help="Path to the board markdown file (default: Board.md)")
    common.add_argument("--settings", help="Global settings YAML file (default: $PORTUS_CONFIG or ~/.config/portus)")
    common.add_argument("--json", action="store_true", help="Machine-readable JSON output")

    parser = argparse.ArgumentParser(
        prog="portus",
        description="Markdown kanban board engine",
        parents=[common],
    )

    nouns = parser.add_subparsers(dest="noun")

    # --- board ---
    board_p = nouns.add_parser("board", help="Board operations", parents=[common])
    board_verbs = board_p.add_subparsers(dest="verb")

    board_summary_p = board_verbs.add_parser("summary", help="Show board summary", parents=[common])
    board_summary_p.set_defaults(func=board_summary)

    board_get_p = board_verbs.add_parser("get", help="Dump the board markdown", parents=[common])
    board_get_p.set_defaults(func=board_get)

    board_norm_p = board_verbs.add_parser("normalize", help="Rewrite the file in canonical form", parents=[common])
    board_norm_p.set_defaults(func=board_normalize)

    # board with no verb = summary
    board_p.set_defaults(func=board_summary)

    # --- card ---
    card_p = nouns.add_parser("card", help="Card operations", parents=[common])
    card_verbs = card_p.add_subparsers(dest="verb")

    card_list_p = card_verbs.add_parser("list", help="List cards", parents=[common])
    card_list_p.add_argument("--lane", help="Only this lane (title or position)")
    card_list_p.add_argument("--list", choices=VIRTUAL_LISTS, help="Only this virtual list")
    card_list_p.set_defaults(func=card_list)

    card_add_p = card_verbs.add_parser("add", help="Create a card", parents=[common])
    card_add_p.add_argument("title", help="Card text")
    card_add_p.add_argument("--lane", help="Target lane (default: first lane)")
    card_add_p.add_argument("--list", choices=VIRTUAL_LISTS, help="Target virtual list")
    card_add_p.add_argument("--position", type=int, help="Position (1-indexed)")
    card_add_p.set_defaults(func=card_add)

    card_set_p = card_verbs.add_parser("set", help="Replace card text from stdin", parents=[common])
    card_set_p.add_argument("ref", help=CARD_REF_HELP)
    card_set_p.set_defaults(func=card_set)

    card_title_p = card_verbs.add_parser("title", help="Replace card text, keeping its fields", parents=[common])
    card_title_p.add_argument("ref", help=CARD_REF_HELP)
    card_title_p.add_argument("text", nargs="?", help="New card text (default: read stdin)")
    card_title_p.set_defaults(func=card_title)

    card_move_p = card_verbs.add_parser("move", help="Move a card", parents=[common])
    card_move_p.add_argument("ref", help=CARD_REF_HELP)
    card_move_p.add_argument("--lane", help="Target lane (title or position)")
    card_move_p.add_argument("--list", choices=VIRTUAL_LISTS, help="Target virtual list")
    card_move_p.add_argument("--position", type=int, help="Position (1-indexed)")
    card_move_p.set_defaults(func=card_move)

    card_complete_p = card_verbs.add_parser("complete", help="Move a card to done", parents=[common])
    card_complete_p.add_argument("ref", help=CARD_REF_HELP)
    card_complete_p.add_argument("--vault", help="Also sync the card to a draft invoice in this vault")
    card_complete_p.set_defaults(func=card_complete)

    card_delete_p = card_verbs.add_parser("delete", help="Delete a card", parents=[common])
    card_delete_p.add_argument("ref", help=CARD_REF_HELP)
    card_delete_p.set_defaults(func=card_delete)

    card_priority_p = card_verbs.add_parser("priority", help="Set card priority", parents=[common])
    card_priority_p.add_argument("ref", help=CARD_REF_HELP)
    card_priority_p.add_argument("level", choices=PRIORITIES, help="Priority")
    card_priority_p.set_defaults(func=card_priority)

    card_notes_p = card_verbs.add_parser("notes", help="Set card notes", parents=[common])
    card_notes_p.add_argument("ref", help=CARD_REF_HELP)
    card_notes_p.add_argument("text", nargs="?", help="Notes text (default: read stdin)")
    card_notes_p.set_defaults(func=card_notes)

    card_client_p = card_verbs.add_parser("client", help="Set card client code", parents=[common])
    card_client_p.add_argument("ref", help=CARD_REF_HELP)
    card_client_p.add_argument("code", nargs="?", default="", help="Client code (omit to clear)")
    card_client_p.set_defaults(func=card_client)

    # card with no verb = list
    card_p.set_defaults(func=card_list, lane=None, list=None)

    # --- lane ---
    lane_p = nouns.add_parser("lane", help="Lane operations", parents=[common])
    lane_verbs = lane_p.add_subparsers(dest="verb")

    lane_list_p = lane_verbs.add_parser("list", help="List lanes", parents=[common])
    lane_list_p.set_defaults(func=lane_list)

    lane_add_p = lane_verbs.add_parser("add", help="Create a lane", parents=[common])
    lane_add_p.add_argument("name", help="Lane title")
    lane_add_p.add_argument("--position", type=int, help="Position (1-indexed)")
    lane_add_p.add_argument("--complete", action="store_true", help="Cards in this lane count as complete")
    lane_add_p.set_defaults(func=lane_add)

    lane_rename_p = lane_verbs.add_parser("rename", help="Rename a lane", parents=[common])
    lane_rename_p.add_argument("ref", help="Lane title or position")
    lane_rename_p.add_argument("new_name", help="New lane title")
    lane_rename_p.set_defaults(func=lane_rename)

    lane_move_p = lane_verbs.add_parser("move", help="Move a lane", parents=[common])
    lane_move_p.add_argument("ref", help="Lane title or position")
    lane_move_p.add_argument("--position", type=int, required=True, help="New position (1-indexed)")
    lane_move_p.set_defaults(func=lane_move)

    lane_complete_p = lane_verbs.add_parser("complete", help="Make a lane mark its cards complete", parents=[common])
    lane_complete_p.add_argument("ref", help="Lane title or position")
    lane_complete_p.add_argument("--off", action="store_true", help="Unmark the lane instead")
    lane_complete_p.set_defaults(func=lane_complete)

    lane_remove_p = lane_verbs.add_parser("remove", help="Remove a lane and its cards", parents=[common])
    lane_remove_p.add_argument("ref", help="Lane title or position")
    lane_remove_p.set_defaults(func=lane_remove)

    # lane with no verb = list
    lane_p.set_defaults(func=lane_list)

    # --- archive ---
    archive_p = nouns.add_parser("archive", help="Archive completed cards", parents=[common])
    archive_p.set_defaults(func=archive)

    # --- invoice ---
    invoice_p = nouns.add_parser("invoice", help="Sync a card to a draft invoice", parents=[common])
    invoice_p.add_argument("ref", help=CARD_REF_HELP)
    invoice_p.add_argument("--vault", default=".", help="Vault directory holding Invoices/ (default: .)")
    invoice_p.add_argument("--dry-run", action="store_true", help="Only show which client the card routes to")
    invoice_p.set_defaults(func=invoice)

    return parser
