"""Unit tests for invoice completeness validation."""

from __future__ import annotations

from billdesk.models.invoice import LineItem
from billdesk.services import validation as v


def test_complete_invoice_has_no_issues(make_state) -> None:
    assert v.validate_invoice(make_state()) == []


def test_missing_due_date_and_company_yield_exactly_two_issues(make_state) -> None:
    state = make_state()
    state.meta.due_date = ""
    state.client.company_name = "   "

    first = v.validate_invoice(state)
    second = v.validate_invoice(state)

    assert first == [v.MSG_DUE_DATE, v.MSG_COMPANY]
    assert second == first


def test_whitespace_invoice_number_is_reported(make_state) -> None:
    state = make_state()
    state.meta.invoice_number = "  "

    assert v.validate_invoice(state) == [v.MSG_NUMBER]


def test_due_before_issue_is_reported(make_state) -> None:
    state = make_state()
    state.meta.due_date = "2026-03-01"

    assert v.validate_invoice(state) == [v.MSG_DUE_BEFORE_ISSUE]


def test_unparseable_dates_skip_ordering_rule(make_state) -> None:
    state = make_state()
    state.meta.issue_date = "next tuesday"

    assert v.validate_invoice(state) == []


def test_address_gaps_are_one_issue(make_state) -> None:
    state = make_state()
    state.client.city = ""
    state.client.country = ""

    assert v.validate_invoice(state) == [v.MSG_ADDRESS]


def test_no_line_items(make_state) -> None:
    state = make_state(line_items=[])

    assert v.validate_invoice(state) == [v.MSG_NO_ITEMS]


def test_bad_line_items_are_aggregated(make_state) -> None:
    state = make_state(line_items=[
        LineItem(description="", quantity=1, unit_price=10),
        LineItem(description="ok", quantity=0, unit_price=10),
        LineItem(description="ok", quantity=1, unit_price=-1),
        LineItem(description="ok", quantity=1, unit_price=10, discount_rate=-5),
    ])

    assert v.validate_invoice(state) == [v.MSG_BAD_ITEMS]


def test_discount_above_hundred_is_reported(make_state) -> None:
    state = make_state(line_items=[LineItem(description="ok", quantity=1, unit_price=10, discount_rate=120)])

    assert v.validate_invoice(state) == [v.MSG_BAD_ITEMS]


def test_all_rules_apply_together(make_state) -> None:
    state = make_state(line_items=[])
    state.meta.invoice_number = ""
    state.meta.issue_date = ""
    state.meta.due_date = ""
    state.client.company_name = ""
    state.client.address_line1 = ""

    assert v.validate_invoice(state) == [
        v.MSG_NUMBER, v.MSG_ISSUE_DATE, v.MSG_DUE_DATE, v.MSG_COMPANY, v.MSG_ADDRESS, v.MSG_NO_ITEMS,
    ]


def test_format_issues_lists_every_issue() -> None:
    text = v.format_issues(["A", "B"], "Save")

    assert "- A" in text and "- B" in text
    assert text.endswith("Save anyway?")
