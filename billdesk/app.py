from __future__ import annotations
from datetime import date
import os
from typing import Callable, Optional

from billdesk.services.reference_service import ReferenceService
from billdesk.services.scheduler import Scheduler, ThreadingScheduler
from billdesk.services.settings_service import AppSettings, load_settings
from billdesk.services.workspace import ConfirmFn, InvoiceWorkspace, PrintFn, _always_yes, _print_noop
from billdesk.storage.archive_repo import ARCHIVE_KEY
from billdesk.storage.json_store import JsonStore


def build_workspace(
    data_dir: Optional[os.PathLike | str] = None,
    *,
    settings: Optional[AppSettings] = None,
    scheduler: Optional[Scheduler] = None,
    confirm: ConfirmFn = _always_yes,
    reveal: Callable[[], None] = lambda: None,
    printer: PrintFn = _print_noop,
    today: Callable[[], date] = date.today,
) -> InvoiceWorkspace:
    """Une session = un store + un workspace, construits explicitement ici."""
    settings = settings or load_settings(data_dir)
    store = JsonStore(settings.data_dir, backup_keys=(ARCHIVE_KEY,), backup_keep=settings.archive_backups)
    reference = ReferenceService.from_data_dir(settings.data_dir)
    return InvoiceWorkspace(
        settings,
        reference,
        store,
        scheduler or ThreadingScheduler(),
        confirm=confirm,
        reveal=reveal,
        printer=printer,
        today=today,
    )
