from __future__ import annotations
from typing import Iterable

from billdesk.models.invoice import InvoiceTotals, LineItem


def line_amount(item: LineItem) -> float:
    return item.quantity * item.unit_price


def line_discount(item: LineItem) -> float:
    return line_amount(item) * item.discount_rate / 100


def line_net(item: LineItem) -> float:
    """Montant de la ligne après remise (affiché dans l'aperçu)."""
    return line_amount(item) - line_discount(item)


def compute_totals(line_items: Iterable[LineItem], tax_rate: float) -> InvoiceTotals:
    """
    Totaux pleine précision, aucun arrondi (l'arrondi se fait à l'affichage).
    La base taxable ne descend jamais sous zéro, même si les remises dépassent le sous-total.
    """
    subtotal = 0.0
    discount_total = 0.0
    for item in line_items:
        subtotal += line_amount(item)
        discount_total += line_discount(item)
    taxable = max(subtotal - discount_total, 0.0)
    tax = taxable * tax_rate / 100
    return InvoiceTotals(
        subtotal=subtotal,
        discount_total=discount_total,
        taxable_amount=taxable,
        tax_amount=tax,
        total=taxable + tax,
    )
