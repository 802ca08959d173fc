from __future__ import annotations
import logging
import math
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Callable, List, Optional

from billdesk.models.client import ClientDetails
from billdesk.models.common import gen_id
from billdesk.models.invoice import (
    CURRENCIES, ArchiveSummary, DraftPayload, InvoiceFormState, InvoiceMeta,
    InvoiceTotals, LayoutMode, LineItem, StoredInvoice,
)
from billdesk.models.service import Service
from billdesk.services.archive_service import ArchiveService
from billdesk.services.draft_service import DraftAutosaveService
from billdesk.services.export_service import ExportService
from billdesk.services.numbering import generate_invoice_number, regenerate_invoice_number
from billdesk.services.reference_service import ReferenceService
from billdesk.services.scheduler import Scheduler
from billdesk.services.settings_service import AppSettings
from billdesk.services.totals import compute_totals
from billdesk.services.validation import format_issues, validate_invoice
from billdesk.storage.archive_repo import ArchiveRepository
from billdesk.storage.json_store import JsonStore

logger = logging.getLogger(__name__)

ConfirmFn = Callable[[str], bool]
PrintFn = Callable[[Callable[[], None]], None]

LAYOUT_MODES = ("split", "form", "preview")
_TEXT_LINE_FIELDS = ("description", "notes")
_NUMERIC_LINE_FIELDS = ("quantity", "unit_price", "discount_rate")


def _always_yes(message: str) -> bool:
    return True


def _print_noop(on_complete: Callable[[], None]) -> None:
    on_complete()


def parse_number(raw: Any, previous: float) -> float:
    """Valeur numérique saisie ; en cas d'échec on garde la précédente."""
    if isinstance(raw, bool):
        return previous
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        text = str(raw or "").strip().replace(",", ".")
        if not text:
            return previous
        try:
            value = float(text)
        except ValueError:
            return previous
    return value if math.isfinite(value) else previous


def new_line_item(service: Optional[Service] = None) -> LineItem:
    return LineItem(
        service_id=service.id if service else "",
        description=service.description if service else "",
        quantity=1.0,
        unit_price=service.unit_rate if service else 0.0,
        discount_rate=0.0,
        notes="",
    )


def create_initial_state(settings: AppSettings, reference: ReferenceService, today: date) -> InvoiceFormState:
    clients = reference.list_clients()
    services = reference.list_services()
    default_client = clients[0] if clients else None
    return InvoiceFormState(
        client_selection_id=default_client.id if default_client else "",
        client=default_client.to_details() if default_client else ClientDetails(),
        currency=settings.default_currency,
        tax_rate=settings.default_tax_rate,
        line_items=[new_line_item(services[0] if services else None)],
        meta=InvoiceMeta(
            invoice_number=generate_invoice_number(settings.invoice_prefix, today),
            issue_date=today.isoformat(),
            due_date=(today + timedelta(days=settings.payment_due_days)).isoformat(),
            project_name=settings.default_project_name,
            purchase_order="",
            reference="",
        ),
        terms=settings.default_terms,
        additional_note="",
    )


class InvoiceWorkspace:
    """
    Session d'édition : état de travail, sélection d'archive et mise en page (transitoires).
    Chaque modification de l'état replanifie la sauvegarde du brouillon.
    """

    def __init__(
        self,
        settings: AppSettings,
        reference: ReferenceService,
        store: JsonStore,
        scheduler: Scheduler,
        *,
        confirm: ConfirmFn = _always_yes,
        reveal: Callable[[], None] = lambda: None,
        printer: PrintFn = _print_noop,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.settings = settings
        self.reference = reference
        self.confirm = confirm
        self.reveal = reveal
        self.printer = printer
        self.today = today

        self.archive = ArchiveService(ArchiveRepository(store))
        self.exporter = ExportService(self.archive, settings.organization)
        self.state: InvoiceFormState = create_initial_state(settings, reference, today())
        self.drafts = DraftAutosaveService(
            store, scheduler, lambda: self.state, delay_ms=settings.autosave_delay_ms,
        )

        self.selected_archive_id: Optional[str] = None
        self.layout_mode: LayoutMode = "form"
        self.layout_user_selected = False
        self._print_pending = False
        # premier cycle : persiste l'état initial
        self._touch()

    # ---------------- interne ---------------- #

    def _touch(self) -> None:
        self.drafts.notify_change()

    def _replace_state(self, state: InvoiceFormState) -> None:
        self.state = state
        self._touch()

    def _confirm_issues(self, action: str) -> bool:
        issues = self.validate()
        if not issues:
            return True
        return bool(self.confirm(format_issues(issues, action)))

    # ---------------- calculs ---------------- #

    @property
    def totals(self) -> InvoiceTotals:
        return compute_totals(self.state.line_items, self.state.tax_rate)

    def validate(self) -> List[str]:
        return validate_invoice(self.state)

    # ---------------- client ---------------- #

    def new_invoice(self) -> None:
        self.selected_archive_id = None
        self._replace_state(create_initial_state(self.settings, self.reference, self.today()))

    def select_client(self, client_id: str) -> None:
        profile = self.reference.get_client(client_id) if client_id else None
        self.state.client_selection_id = client_id
        if profile is not None:
            self.state.client = profile.to_details()
        self._touch()

    def update_client_field(self, name: str, value: str) -> None:
        if name not in ClientDetails.model_fields:
            raise ValueError(f"Unknown client field {name!r}")
        setattr(self.state.client, name, value)
        self._touch()

    # ---------------- méta / réglages ---------------- #

    def update_meta_field(self, name: str, value: str) -> None:
        if name not in InvoiceMeta.model_fields:
            raise ValueError(f"Unknown invoice field {name!r}")
        setattr(self.state.meta, name, value)
        self._touch()

    def regenerate_invoice_number(self) -> str:
        self.state.meta = regenerate_invoice_number(self.state.meta, self.settings.invoice_prefix, self.today())
        self._touch()
        return self.state.meta.invoice_number

    def set_currency(self, code: str) -> None:
        if code not in CURRENCIES:
            logger.debug("Ignoring unknown currency %r", code)
            return
        self.state.currency = code  # type: ignore[assignment]
        self._touch()

    def set_tax_rate(self, raw: Any) -> None:
        self.state.tax_rate = max(parse_number(raw, self.state.tax_rate), 0.0)
        self._touch()

    def set_terms(self, text: str) -> None:
        self.state.terms = text
        self._touch()

    def set_additional_note(self, text: str) -> None:
        self.state.additional_note = text
        self._touch()

    # ---------------- lignes ---------------- #

    def add_line_item(self, service_id: Optional[str] = None) -> LineItem:
        service = self.reference.get_service(service_id) if service_id else None
        item = new_line_item(service)
        while self.state.find_line_item(item.id) is not None:
            item.id = gen_id()
        self.state.line_items.append(item)
        self._touch()
        return item

    def remove_line_item(self, item_id: str) -> bool:
        # la dernière ligne ne se supprime pas
        if len(self.state.line_items) <= 1:
            return False
        before = len(self.state.line_items)
        self.state.line_items = [it for it in self.state.line_items if it.id != item_id]
        if len(self.state.line_items) == before:
            return False
        self._touch()
        return True

    def update_line_item(self, item_id: str, field: str, value: Any) -> None:
        item = self.state.find_line_item(item_id)
        if item is None:
            return
        if field in _TEXT_LINE_FIELDS:
            setattr(item, field, "" if value is None else str(value))
        elif field in _NUMERIC_LINE_FIELDS:
            number = parse_number(value, getattr(item, field))
            if field == "unit_price":
                number = max(number, 0.0)
            setattr(item, field, number)
        elif field == "service_id":
            self.change_line_item_service(item_id, value)
            return
        else:
            raise ValueError(f"Unknown line item field {field!r}")
        self._touch()

    def change_line_item_service(self, item_id: str, service_id: str) -> None:
        item = self.state.find_line_item(item_id)
        if item is None:
            return
        service = self.reference.get_service(service_id) if service_id else None
        item.service_id = service_id or ""
        if service is not None:
            item.description = service.description
            item.unit_price = service.unit_rate
        self._touch()

    # ---------------- archive ---------------- #

    def archive_entries(self) -> List[ArchiveSummary]:
        return self.archive.list_entries()

    def save_to_archive(self) -> Optional[StoredInvoice]:
        if not self._confirm_issues("Save"):
            return None
        entry = self.archive.save(self.state)
        self.selected_archive_id = entry.id
        return entry

    def duplicate_to_archive(self) -> Optional[StoredInvoice]:
        if not self._confirm_issues("Duplicate"):
            return None
        entry = self.archive.duplicate(self.state)
        self.selected_archive_id = entry.id
        return entry

    def update_archive(self, entry_id: Optional[str] = None) -> Optional[StoredInvoice]:
        target = entry_id or self.selected_archive_id
        if not target or self.archive.get(target) is None:
            return None
        if not self._confirm_issues("Update"):
            return None
        return self.archive.update(target, self.state)

    def delete_from_archive(self, entry_id: str) -> bool:
        entry = self.archive.get(entry_id)
        if entry is None:
            return False
        label = entry.invoice_number or entry.id
        if not self.confirm(f"Delete saved invoice {label}? This cannot be undone."):
            return False
        deleted = self.archive.delete(entry_id)
        if deleted and self.selected_archive_id == entry_id:
            self.selected_archive_id = None
        return deleted

    def load_from_archive(self, entry_id: str) -> bool:
        state = self.archive.load(entry_id)
        if state is None:
            return False
        self.selected_archive_id = entry_id
        self._replace_state(state)
        self.set_layout_mode("preview")
        return True

    def export_archive(self, entry_id: str, out_dir: Optional[Path | str] = None) -> Optional[Path]:
        return self.exporter.export_json(entry_id, out_dir or self.settings.exports_dir)

    def export_preview_html(self, out_dir: Optional[Path | str] = None) -> Path:
        return self.exporter.export_html(self.state, out_dir or self.settings.exports_dir)

    # ---------------- brouillon ---------------- #

    @property
    def last_draft(self) -> Optional[DraftPayload]:
        return self.drafts.last_draft

    def restore_draft(self) -> bool:
        state = self.drafts.restore()
        if state is None:
            return False
        self._replace_state(state)
        return True

    def clear_draft(self) -> None:
        self.drafts.clear()

    def close(self) -> None:
        self.drafts.flush()

    # ---------------- mise en page / impression ---------------- #

    def set_layout_mode(self, mode: str) -> None:
        if mode not in LAYOUT_MODES:
            raise ValueError(f"Unknown layout mode {mode!r}")
        self.layout_user_selected = True
        self.layout_mode = mode  # type: ignore[assignment]
        if mode == "preview":
            self.reveal()

    def apply_viewport(self, wide: bool) -> None:
        # suit la largeur d'écran tant que l'utilisateur n'a rien choisi
        if not self.layout_user_selected:
            self.layout_mode = "split" if wide else "form"

    def generate(self) -> None:
        self.reveal()

    def print_invoice(self) -> bool:
        if self._print_pending:
            return False
        if not self._confirm_issues("Print"):
            return False
        prior = (self.layout_mode, self.layout_user_selected)
        done = False

        def on_complete() -> None:
            nonlocal done
            if done:
                return
            done = True
            self.layout_mode, self.layout_user_selected = prior
            self._print_pending = False

        self._print_pending = True
        self.layout_mode = "preview"
        try:
            self.printer(on_complete)
        except Exception:
            logger.exception("Print failed, restoring layout")
            on_complete()
            return False
        return True
