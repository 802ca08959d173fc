"""Shared fixtures for the billdesk unit tests."""

from __future__ import annotations

import json
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Optional

import pytest

from billdesk.models.client import ClientDetails
from billdesk.models.invoice import InvoiceFormState, InvoiceMeta, LineItem
from billdesk.services.reference_service import ReferenceService
from billdesk.services.scheduler import Scheduler
from billdesk.services.settings_service import AppSettings
from billdesk.services.workspace import InvoiceWorkspace
from billdesk.storage.json_store import JsonStore

TODAY = date(2026, 3, 9)

CLIENTS = [
    {
        "id": "client-nimbus",
        "companyName": "Nimbus Retail Pvt. Ltd.",
        "contactName": "Priya Menon",
        "email": "accounts@nimbusretail.in",
        "phone": "+91 80 4000 1200",
        "addressLine1": "12 Residency Road",
        "city": "Bengaluru",
        "state": "Karnataka",
        "postalCode": "560025",
        "country": "India",
        "gstin": "29AAACN1234F1Z5",
    },
    {
        "id": "client-harbor",
        "companyName": "Harbor & Pine Studios",
        "contactName": "Daniel Okafor",
        "email": "billing@harborpine.com",
        "phone": "+1 415 555 0142",
        "addressLine1": "88 Market Street",
        "city": "San Francisco",
        "state": "CA",
        "postalCode": "94105",
        "country": "United States",
    },
]

SERVICES = [
    {
        "id": "svc-seo",
        "name": "SEO retainer",
        "category": "Digital Marketing",
        "description": "Monthly SEO retainer",
        "unit": "month",
        "unitRate": 45000,
    },
    {
        "id": "svc-sprint",
        "name": "Engineering sprint",
        "category": "Software Development",
        "description": "Two-week engineering sprint",
        "unit": "sprint",
        "unitRate": 410000,
    },
]


class ManualScheduler(Scheduler):
    """Deterministic scheduler: nothing fires until the test calls fire()."""

    def __init__(self) -> None:
        self.callback: Optional[Callable[[], None]] = None
        self.delay_ms: Optional[int] = None
        self.schedule_calls = 0

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> None:
        self.callback = callback
        self.delay_ms = delay_ms
        self.schedule_calls += 1

    def cancel(self) -> None:
        self.callback = None

    @property
    def pending(self) -> bool:
        return self.callback is not None

    def fire(self) -> None:
        cb, self.callback = self.callback, None
        if cb is not None:
            cb()


class StepClock:
    """Returns a later timestamp on every call."""

    def __init__(self, start: datetime = datetime(2026, 3, 9, 10, 0, tzinfo=timezone.utc)) -> None:
        self.current = start

    def __call__(self) -> datetime:
        self.current = self.current + timedelta(seconds=1)
        return self.current


@pytest.fixture()
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture()
def clock() -> StepClock:
    return StepClock()


@pytest.fixture()
def data_dir(tmp_path: Path) -> Path:
    d = tmp_path / "data"
    d.mkdir()
    (d / "clients.json").write_text(json.dumps(CLIENTS), encoding="utf-8")
    (d / "services.json").write_text(json.dumps(SERVICES), encoding="utf-8")
    return d


@pytest.fixture()
def store(data_dir: Path) -> JsonStore:
    return JsonStore(data_dir)


@pytest.fixture()
def settings(data_dir: Path, tmp_path: Path) -> AppSettings:
    return AppSettings(data_dir=data_dir, exports_dir=tmp_path / "exports", autosave_delay_ms=800)


@pytest.fixture()
def reference(data_dir: Path) -> ReferenceService:
    return ReferenceService.from_data_dir(data_dir)


@pytest.fixture()
def make_state() -> Callable[..., InvoiceFormState]:
    def _make(**overrides) -> InvoiceFormState:
        state = InvoiceFormState(
            client_selection_id="client-nimbus",
            client=ClientDetails(
                company_name="Nimbus Retail Pvt. Ltd.",
                contact_name="Priya Menon",
                email="accounts@nimbusretail.in",
                address_line1="12 Residency Road",
                city="Bengaluru",
                state="Karnataka",
                postal_code="560025",
                country="India",
            ),
            currency="INR",
            tax_rate=18,
            line_items=[
                LineItem(id="li-1", service_id="svc-seo", description="SEO retainer", quantity=2, unit_price=1000, discount_rate=10),
                LineItem(id="li-2", description="Landing page copy", quantity=1, unit_price=500),
            ],
            meta=InvoiceMeta(
                invoice_number="ADS-2026-0309-abc12345",
                issue_date="2026-03-09",
                due_date="2026-03-24",
                project_name="Retainer Services",
            ),
            terms="Net 15",
        )
        for key, value in overrides.items():
            setattr(state, key, value)
        return state

    return _make


@pytest.fixture()
def confirm_log() -> list:
    return []


@pytest.fixture()
def make_workspace(settings, reference, store, scheduler, confirm_log):
    def _make(answer: bool = True, printer=None) -> InvoiceWorkspace:
        def confirm(message: str) -> bool:
            confirm_log.append(message)
            return answer

        kwargs = {"confirm": confirm, "today": lambda: TODAY}
        if printer is not None:
            kwargs["printer"] = printer
        return InvoiceWorkspace(settings, reference, store, scheduler, **kwargs)

    return _make
