from __future__ import annotations
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from .client import ClientDetails
from .common import CamelModel, gen_id, utc_now

Currency = Literal["INR", "USD", "EUR"]
CURRENCIES = ("INR", "USD", "EUR")

LayoutMode = Literal["split", "form", "preview"]


class LineItem(CamelModel):
    id: str = Field(default_factory=gen_id)
    service_id: str = ""  # "" = custom line, no catalog reference
    description: str = ""
    quantity: float = 1.0
    unit_price: float = 0.0
    discount_rate: float = 0.0  # percent
    notes: Optional[str] = ""


class InvoiceMeta(CamelModel):
    invoice_number: str = ""
    issue_date: str = ""  # YYYY-MM-DD, may be empty while editing
    due_date: str = ""
    project_name: str = ""
    purchase_order: Optional[str] = ""
    reference: Optional[str] = ""


class InvoiceFormState(CamelModel):
    client_selection_id: str = ""
    client: ClientDetails = Field(default_factory=ClientDetails)
    currency: Currency = "INR"
    tax_rate: float = 0.0
    line_items: List[LineItem] = Field(default_factory=list)
    meta: InvoiceMeta = Field(default_factory=InvoiceMeta)
    terms: str = ""
    additional_note: str = ""

    def find_line_item(self, item_id: str) -> Optional[LineItem]:
        for item in self.line_items:
            if item.id == item_id:
                return item
        return None


class InvoiceTotals(CamelModel):
    subtotal: float = 0.0
    discount_total: float = 0.0
    taxable_amount: float = 0.0
    tax_amount: float = 0.0
    total: float = 0.0


class StoredInvoice(CamelModel):
    id: str = Field(default_factory=gen_id)
    invoice_number: str = ""
    saved_at: datetime = Field(default_factory=utc_now)
    form_state: InvoiceFormState


class DraftPayload(CamelModel):
    saved_at: datetime = Field(default_factory=utc_now)
    form_state: InvoiceFormState


class ArchiveSummary(CamelModel):
    id: str
    invoice_number: str
    saved_at: datetime
