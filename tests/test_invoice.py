"""Tests for the invoice bridge."""

import pytest

from portus.errors import InvoiceError
from portus.invoice import (
    ARCHIVE_FOLDER,
    DRAFTS_FOLDER,
    SYNC_LOG_PATH,
    InvoiceBridge,
    append_line_item,
    blank_invoice,
    line_item_description,
    resolve_client_route,
)

from tests.conftest import NOW, _make_item


@pytest.fixture
def bridge(tmp_path):
    return InvoiceBridge(tmp_path, clock=lambda: NOW)


def _write(vault, folder, name, text="status: draft\n"):
    path = vault / folder / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


@pytest.mark.parametrize(
    "text, prefix",
    [
        ("Call Mercer about the listing [client::sho]", "SHO"),
        ("Replace lock [invoice::jpa-44d-003]", "JPA"),
        ("Fix decatur street leak [client::XYZ]", "JPA-44D"),
        ("Paint 53 Wooster hallway", "JPA-53W"),
        ("Mix for Tribeca Records", "TRB"),
        ("Something unrelated", "PEP"),
    ],
)
def test_resolve_client_route(text, prefix):
    assert resolve_client_route(text).prefix == prefix


def test_line_item_description_strips_routing_fields():
    text = "Email blast [priority::high] [client::PEP] @{2026-03-04}  a|b"
    assert line_item_description(text) == "Email blast a\\|b"


def test_append_after_last_row():
    content = "| Date | Description |\n|:-----|:------------|\n| 01-01 | first |\n\n## Totals\n"
    result = append_line_item(content, "second", NOW)
    assert result.split("\n")[3] == "| 01-02 |  | second |  |  |"


def test_append_when_table_ends_the_file():
    content = "| Date | Description |\n|:-----|:------------|\n| 01-01 | first |"
    result = append_line_item(content, "second", NOW)
    assert result.endswith("| 01-01 | first |\n| 01-02 |  | second |  |  |")


def test_append_falls_back_to_totals():
    content = "## Line Items\n\nnone yet\n\n## Totals\n"
    result = append_line_item(content, "second", NOW)
    assert "| 01-02 |  | second |  |  |\n## Totals" in result


def test_append_without_table_or_totals():
    with pytest.raises(InvoiceError):
        append_line_item("# Empty\n", "second", NOW)


def test_blank_invoice_dates():
    route = resolve_client_route("pep")
    text = blank_invoice(route, "PEP-001", NOW)
    assert "**Issue Date:** Jan 2, 2026 | **Due:** Feb 1, 2026" in text
    assert "invoice_number: PEP-001" in text


def test_next_invoice_code_spans_drafts_and_archive(tmp_path, bridge):
    assert bridge.next_invoice_code("PEP") == "PEP-001"
    _write(tmp_path, DRAFTS_FOLDER, "PEP-003.md")
    _write(tmp_path, ARCHIVE_FOLDER, "PEP-007.md")
    _write(tmp_path, DRAFTS_FOLDER, "JPA-44D-001.md")
    assert bridge.next_invoice_code("PEP") == "PEP-008"
    assert bridge.next_invoice_code("JPA") == "JPA-001"


def test_sync_creates_draft_then_appends(tmp_path, bridge):
    first = bridge.sync_task_to_invoice(_make_item("Email blast for Mercer [priority::high]", "x"))
    second = bridge.sync_task_to_invoice(_make_item("Update listing photos", "x"))

    assert first.success and second.success
    assert first.invoice_path == "Invoices/Drafts/PEP-001.md"
    assert second.invoice_path == first.invoice_path
    content = (tmp_path / first.invoice_path).read_text()
    assert "| 01-02 |  | Email blast for Mercer |  |  |" in content
    assert "| 01-02 |  | Update listing photos |  |  |" in content

    log = (tmp_path / SYNC_LOG_PATH).read_text()
    assert log.count("✅") == 2
    assert bridge.history == [first, second]


def test_finalized_draft_gets_a_successor(tmp_path, bridge):
    _write(tmp_path, DRAFTS_FOLDER, "SHO-002.md", "status: sent\n")
    result = bridge.sync_task_to_invoice(_make_item("Session [client::SHO]", "x"))
    assert result.invoice_path == "Invoices/Drafts/SHO-003.md"


def test_sync_failure_is_reported(tmp_path):
    vault = tmp_path / "vault"
    vault.write_text("not a directory")
    bridge = InvoiceBridge(vault, clock=lambda: NOW)
    result = bridge.sync_task_to_invoice(_make_item("Email blast", "x"))
    assert not result.success
    assert result.invoice_path is None
    assert result.error
    assert bridge.history == [result]
