from __future__ import annotations
import logging
from datetime import datetime
from typing import Callable, List, Optional

from billdesk.models.common import gen_id, utc_now
from billdesk.models.invoice import ArchiveSummary, InvoiceFormState, StoredInvoice
from billdesk.services.snapshot import clone_state
from billdesk.storage.archive_repo import ArchiveRepository

logger = logging.getLogger(__name__)


class ArchiveService:
    """
    Archive des factures enregistrées.
    Chaque entrée embarque une copie indépendante de l'état : copie à l'enregistrement,
    copie au chargement. Identifiant inconnu -> aucune action (None / False).
    Les entrées renvoyées sont des copies : les modifier ne touche pas l'archive.
    """

    def __init__(self, repo: ArchiveRepository, now: Callable[[], datetime] = utc_now):
        self.repo = repo
        self.now = now

    def _new_id(self) -> str:
        # jeton court : on retire tout de même un éventuel doublon local
        entry_id = gen_id()
        while self.repo.get(entry_id) is not None:
            entry_id = gen_id()
        return entry_id

    # ----------- écriture -----------
    def save(self, state: InvoiceFormState) -> StoredInvoice:
        entry = StoredInvoice(
            id=self._new_id(),
            invoice_number=state.meta.invoice_number,
            saved_at=self.now(),
            form_state=clone_state(state),
        )
        self.repo.prepend(entry)
        logger.info("Archived invoice %s as %s", entry.invoice_number or "(no number)", entry.id)
        return entry.model_copy(deep=True)

    def duplicate(self, state: InvoiceFormState) -> StoredInvoice:
        return self.save(state)

    def update(self, entry_id: str, state: InvoiceFormState) -> Optional[StoredInvoice]:
        existing = self.repo.get(entry_id)
        if existing is None:
            return None
        entry = existing.model_copy(update={
            "invoice_number": state.meta.invoice_number,
            "saved_at": self.now(),
            "form_state": clone_state(state),
        })
        self.repo.replace(entry)
        logger.info("Updated archived invoice %s", entry_id)
        return entry.model_copy(deep=True)

    def delete(self, entry_id: str) -> bool:
        deleted = self.repo.delete(entry_id)
        if deleted:
            logger.info("Deleted archived invoice %s", entry_id)
        return deleted

    # ----------- lecture -----------
    def get(self, entry_id: str) -> Optional[StoredInvoice]:
        entry = self.repo.get(entry_id)
        return entry.model_copy(deep=True) if entry is not None else None

    def load(self, entry_id: str) -> Optional[InvoiceFormState]:
        entry = self.repo.get(entry_id)
        if entry is None:
            return None
        return clone_state(entry.form_state)

    def list_entries(self) -> List[ArchiveSummary]:
        return [
            ArchiveSummary(id=e.id, invoice_number=e.invoice_number, saved_at=e.saved_at)
            for e in self.repo.list_all()
        ]
