"""Invoice sync: append completed cards to client draft invoices.

Given a completed Item, pick the client route from the card text, find
(or create) that client's latest draft invoice in a vault directory,
append a line item and record the outcome in a sync log. The bridge
only reads item text; it never touches the board, and sync failures
come back as a failed SyncResult rather than an exception.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable

from portus.errors import InvoiceError
from portus.inline import get_client, get_invoice
from portus.model.board import Item

logger = logging.getLogger(__name__)

DRAFTS_FOLDER = "Invoices/Drafts"
ARCHIVE_FOLDER = "Invoices/Archive"
SYNC_LOG_PATH = "Invoices/_sync_log.md"

SYNC_LOG_HEADER = (
    "# Portus → Tabula Sync Log\n\n"
    "| Timestamp | Status | Task | Invoice | Error |\n"
    "|:----------|:------:|:-----|:--------|:------|\n"
)


@dataclass(frozen=True)
class ClientRoute:
    prefix: str
    client_name: str
    keywords: tuple[str, ...] = ()
    monthly_tagging: bool = False
    default_rate: float = 50.0


# Order matters: keyword matching takes the first route that matches, so
# the specific JPA properties come before the general JPA route.
CLIENT_ROUTES = (
    ClientRoute(
        "PEP",
        "PEP Real Estate",
        (
            "pep", "peprealestate", "pep real estate",
            "spring", "mercer", "crosby", "howard",
            "douglass", "charles", "washington",
            "costar", "loopnet", "crexi", "commercialedge", "streeteasy",
            "matterport", "listing", "email blast",
        ),
        monthly_tagging=True,
        default_rate=41.25,
    ),
    ClientRoute("SHO", "SoHoJohnny LLC", ("soho johnny", "sohojohnny", "soho records")),
    ClientRoute(
        "JPA-44D",
        "JP Associates II LLC (Decatur)",
        ("4446 decatur", "44-46 decatur", "44 decatur", "46 decatur", "decatur street", "decatur"),
        monthly_tagging=True,
    ),
    ClientRoute(
        "JPA-53W",
        "JP Associates II LLC (53 Wooster)",
        ("53 wooster", "wooster street", "wooster"),
        monthly_tagging=True,
    ),
    ClientRoute("JPA", "JP Associates II LLC", ("pasquali", "jp associates", "jpa"), monthly_tagging=True),
    ClientRoute("ROC", "Rock NYC", ("rock nyc", "rock new york")),
    ClientRoute("LMH", "Let Me Help Inc.", ("let me help", "letmehelp")),
    ClientRoute("TRB", "Tribeca Records", ("tribeca records", "tribeca")),
)

DEFAULT_ROUTE = CLIENT_ROUTES[0]

_ROUTES_BY_PREFIX = {route.prefix: route for route in CLIENT_ROUTES}


def resolve_client_route(text: str) -> ClientRoute:
    """Pick the client route for a card's raw text.

    Precedence, highest first:

    1. an explicit ``[client::CODE]`` field naming a known route
    2. a legacy ``[invoice::CODE-NNN]`` field whose leading code names one
    3. the first route with a keyword contained in the text
    4. DEFAULT_ROUTE

    Unknown codes at steps 1 and 2 fall through to the next step.
    """
    client = get_client(text)
    if client is not None and client in _ROUTES_BY_PREFIX:
        return _ROUTES_BY_PREFIX[client]

    invoice = get_invoice(text)
    if invoice is not None:
        prefix = invoice.split("-")[0].strip().upper()
        if prefix in _ROUTES_BY_PREFIX:
            return _ROUTES_BY_PREFIX[prefix]

    lowered = text.lower()
    for route in CLIENT_ROUTES:
        if any(keyword in lowered for keyword in route.keywords):
            return route
    return DEFAULT_ROUTE


_CLEANUP = (
    re.compile(r"\[priority::[^\]]+\]", re.IGNORECASE),
    re.compile(r"\[notes::[\s\S]*?\]", re.IGNORECASE),
    re.compile(r"\[invoice::[^\]]+\]", re.IGNORECASE),
    re.compile(r"\[client::[^\]]+\]", re.IGNORECASE),
    re.compile(r"\[month::[^\]]+\]", re.IGNORECASE),
    re.compile(r"@\{\d{4}-\d{2}-\d{2}\}"),
)


def line_item_description(text: str) -> str:
    """Card text with routing fields and dates removed, safe for a table cell."""
    for pattern in _CLEANUP:
        text = pattern.sub("", text)
    text = " ".join(text.split())
    return text.replace("|", "\\|")


def _is_table_header(line: str) -> bool:
    return "| Date" in line and ("| Description" in line or "| End" in line)


def append_line_item(content: str, description: str, when: datetime) -> str:
    """Insert a ``| MM-DD |  | description |  |  |`` row into the line items table.

    The row goes after the last row of the table, or before ``## Totals``
    if the table can't be found. Raises InvoiceError if neither exists.
    """
    row = f"| {when:%m-%d} |  | {description} |  |  |"
    lines = content.split("\n")

    insert_at = None
    in_table = False
    for index, line in enumerate(lines):
        if not in_table:
            if _is_table_header(line):
                in_table = True
            continue
        if line.startswith("|:") or line.startswith("| :"):
            continue
        if not line.startswith("|") or not line.strip():
            insert_at = index
            break
    if insert_at is None and in_table:
        insert_at = len(lines)
        while insert_at > 0 and not lines[insert_at - 1].strip():
            insert_at -= 1

    if insert_at is None:
        for index, line in enumerate(lines):
            if line.startswith("## Totals"):
                insert_at = index
                break
    if insert_at is None:
        raise InvoiceError("Could not find line items table in invoice")

    lines.insert(insert_at, row)
    return "\n".join(lines)


def _display_date(when: datetime) -> str:
    return f"{when:%b} {when.day}, {when.year}"


def blank_invoice(route: ClientRoute, invoice_code: str, today: datetime) -> str:
    """Markdown for a new, empty draft invoice."""
    issue = _display_date(today)
    due = _display_date(today + timedelta(days=30))
    return f"""# {route.client_name} | {invoice_code}

**Client:** {route.client_name}
**Period:**
**Invoice #:** {invoice_code}
**Issue Date:** {issue} | **Due:** {due}
**Status:** Draft | **Total:** $0.00

## Line Items

| Date | Description | Qty | Amount |
|:-----|:------------|----:|-------:|

## Totals

**Subtotal:** $0.00
**Total:** $0.00

---
tabula: true
status: draft
client: {route.client_name}
period: ""
invoice_number: {invoice_code}
invoice_title: {route.client_name}
total: 0
ready_to_send: false
stripe_id:
stripe_status:
sync_status: pending
tags: [invoice, draft]
---
"""


def _is_draft(content: str) -> bool:
    return "status: draft" in content or "Status:** Draft" in content


@dataclass(frozen=True)
class SyncResult:
    success: bool
    invoice_path: str | None
    line_item_description: str
    error: str | None
    timestamp: str

    def log_row(self) -> str:
        status = "✅" if self.success else "❌"
        task = self.line_item_description[:60].replace("|", "/")
        return f"| {self.timestamp[:19]} | {status} | {task} | {self.invoice_path or 'N/A'} | {self.error or ''} |\n"


@dataclass
class InvoiceBridge:
    """Syncs completed cards into draft invoices under ``vault``.

    Paths in results are relative to the vault, with forward slashes.
    """

    vault: Path
    clock: Callable[[], datetime] = datetime.now
    history: list[SyncResult] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.vault = Path(self.vault)

    def _invoices(self, prefix: str, folders: tuple[str, ...]) -> list[tuple[int, Path]]:
        """(number, path) for every ``PREFIX-NNN.md`` in folders, newest first."""
        pattern = re.compile(rf"^{re.escape(prefix)}-(\d+)$")
        found = []
        for folder in folders:
            directory = self.vault / folder
            if not directory.is_dir():
                continue
            for path in directory.glob("*.md"):
                match = pattern.match(path.stem)
                if match:
                    found.append((int(match.group(1)), path))
        found.sort(key=lambda pair: pair[0], reverse=True)
        return found

    def find_latest_draft(self, prefix: str) -> Path | None:
        """The highest-numbered draft for prefix, if it is still a draft."""
        drafts = self._invoices(prefix, (DRAFTS_FOLDER,))
        if not drafts:
            return None
        path = drafts[0][1]
        if _is_draft(path.read_text(encoding="utf-8")):
            return path
        return None

    def next_invoice_code(self, prefix: str) -> str:
        invoices = self._invoices(prefix, (DRAFTS_FOLDER, ARCHIVE_FOLDER))
        number = invoices[0][0] + 1 if invoices else 1
        return f"{prefix}-{number:03d}"

    def create_draft(self, route: ClientRoute) -> Path:
        code = self.next_invoice_code(route.prefix)
        path = self.vault / DRAFTS_FOLDER / f"{code}.md"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(blank_invoice(route, code, self.clock()), encoding="utf-8")
        logger.info("created invoice %s", code)
        return path

    def _relative(self, path: Path) -> str:
        return path.relative_to(self.vault).as_posix()

    def sync_task_to_invoice(self, item: Item) -> SyncResult:
        """Append item to its client's draft invoice. Never raises."""
        now = self.clock()
        timestamp = now.isoformat()
        text = item.data.title_raw or item.data.title or ""
        try:
            route = resolve_client_route(text)
            logger.debug("routing %r to %s", text[:60], route.prefix)
            draft = self.find_latest_draft(route.prefix)
            if draft is None:
                draft = self.create_draft(route)
            content = draft.read_text(encoding="utf-8")
            updated = append_line_item(content, line_item_description(text), now)
            draft.write_text(updated, encoding="utf-8")
            result = SyncResult(True, self._relative(draft), text, None, timestamp)
        except (OSError, ValueError, InvoiceError) as exc:
            logger.error("invoice sync failed: %s", exc)
            result = SyncResult(False, None, text, str(exc), timestamp)
        self.log_transaction(result)
        return result

    def log_transaction(self, result: SyncResult) -> None:
        self.history.append(result)
        path = self.vault / SYNC_LOG_PATH
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            existing = path.read_text(encoding="utf-8") if path.exists() else SYNC_LOG_HEADER
            path.write_text(existing + result.log_row(), encoding="utf-8")
        except OSError as exc:
            logger.warning("failed to write sync log: %s", exc)
