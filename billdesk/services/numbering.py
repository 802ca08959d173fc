from __future__ import annotations
from datetime import date
from typing import Optional

from billdesk.models.common import gen_id
from billdesk.models.invoice import InvoiceMeta

DEFAULT_PREFIX = "ADS"


def generate_invoice_number(prefix: str = DEFAULT_PREFIX, today: Optional[date] = None) -> str:
    """ADS-2026-1019-k3x9a0qz : préfixe, année, mois+jour, jeton aléatoire."""
    d = today or date.today()
    return f"{prefix}-{d.year}-{d.month:02d}{d.day:02d}-{gen_id()}"


def regenerate_invoice_number(meta: InvoiceMeta, prefix: str = DEFAULT_PREFIX, today: Optional[date] = None) -> InvoiceMeta:
    return meta.model_copy(update={"invoice_number": generate_invoice_number(prefix, today)})
