from __future__ import annotations
from datetime import date
from typing import List, Optional

from billdesk.models.invoice import InvoiceFormState

MSG_NUMBER = "Invoice number is required."
MSG_ISSUE_DATE = "Issue date is required."
MSG_DUE_DATE = "Due date is required."
MSG_DUE_BEFORE_ISSUE = "Due date cannot be earlier than the issue date."
MSG_COMPANY = "Client company name is required."
MSG_ADDRESS = "Client address is incomplete (address line 1, city, state, postal code and country are required)."
MSG_NO_ITEMS = "Add at least one line item."
MSG_BAD_ITEMS = (
    "Every line item needs a description, a quantity above zero, "
    "a unit price of zero or more and a discount between 0 and 100%."
)


def _blank(value: Optional[str]) -> bool:
    return not (value or "").strip()


def _parse_date(s: str) -> Optional[date]:
    try:
        return date.fromisoformat((s or "").strip())
    except ValueError:
        return None


def _line_item_ok(item) -> bool:
    return (
        not _blank(item.description)
        and item.quantity > 0
        and item.unit_price >= 0
        and 0 <= item.discount_rate <= 100
    )


def validate_invoice(state: InvoiceFormState) -> List[str]:
    """Liste ordonnée des problèmes bloquants pour l'utilisateur ; vide = facture complète.

    Purement consultatif : l'appelant affiche les messages et demande confirmation.
    """
    issues: List[str] = []
    meta = state.meta
    client = state.client

    if _blank(meta.invoice_number):
        issues.append(MSG_NUMBER)
    if _blank(meta.issue_date):
        issues.append(MSG_ISSUE_DATE)
    if _blank(meta.due_date):
        issues.append(MSG_DUE_DATE)

    issued, due = _parse_date(meta.issue_date), _parse_date(meta.due_date)
    if issued and due and due < issued:
        issues.append(MSG_DUE_BEFORE_ISSUE)

    if _blank(client.company_name):
        issues.append(MSG_COMPANY)
    address = (client.address_line1, client.city, client.state, client.postal_code, client.country)
    if any(_blank(v) for v in address):
        issues.append(MSG_ADDRESS)

    if not state.line_items:
        issues.append(MSG_NO_ITEMS)
    elif not all(_line_item_ok(it) for it in state.line_items):
        issues.append(MSG_BAD_ITEMS)

    return issues


def format_issues(issues: List[str], action: str) -> str:
    lines = "\n".join(f"- {i}" for i in issues)
    return f"The invoice has the following issues:\n{lines}\n\n{action} anyway?"
