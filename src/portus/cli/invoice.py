"""Handler for 'portus invoice'."""

from portus.cli._common import error, find_card_or_die, open_board_or_die, output_result
from portus.invoice import InvoiceBridge, resolve_client_route


def invoice(args) -> int:
    """Append a card to its client's draft invoice without moving it."""
    manager, _ = open_board_or_die(args)
    _, item = find_card_or_die(manager.state, args.ref, args.json)

    route = resolve_client_route(item.data.title_raw)
    if args.dry_run:
        output_result(
            {"ref": args.ref, "client": route.prefix, "client_name": route.client_name},
            f"{args.ref} -> {route.prefix} ({route.client_name})",
            args.json,
        )
        return 0

    result = InvoiceBridge(args.vault).sync_task_to_invoice(item)
    if not result.success:
        error(f"Invoice sync failed: {result.error}", args.json)

    output_result(
        {"ref": args.ref, "client": route.prefix, "invoice": result.invoice_path},
        f"Synced {args.ref} to {result.invoice_path}",
        args.json,
    )

    return 0
