from __future__ import annotations
import logging
from datetime import datetime
from typing import Callable, Optional

from billdesk.models.common import utc_now
from billdesk.models.invoice import DraftPayload, InvoiceFormState
from billdesk.services.scheduler import Scheduler
from billdesk.services.snapshot import clone_state
from billdesk.storage.json_store import JsonStore

logger = logging.getLogger(__name__)

DRAFT_KEY = "invoice_draft"
DEFAULT_DELAY_MS = 800


class DraftAutosaveService:
    """
    Brouillon unique, sauvegardé en différé (debounce) après chaque modification.
    - idle : aucune sauvegarde en attente
    - scheduled : une sauvegarde partira après `delay_ms` sans nouvelle modification
    Le brouillon persisté est écrasé à chaque cycle, jamais ajouté.
    """

    def __init__(
        self,
        store: JsonStore,
        scheduler: Scheduler,
        get_state: Callable[[], InvoiceFormState],
        *,
        delay_ms: int = DEFAULT_DELAY_MS,
        key: str = DRAFT_KEY,
        now: Callable[[], datetime] = utc_now,
    ) -> None:
        self.store = store
        self.scheduler = scheduler
        self.get_state = get_state
        self.delay_ms = int(delay_ms)
        self.key = key
        self.now = now
        # aucun brouillon avant le premier cycle complet
        self.last_draft: Optional[DraftPayload] = None

    @property
    def is_scheduled(self) -> bool:
        return self.scheduler.pending

    def notify_change(self) -> None:
        """Annule la sauvegarde en attente et en replanifie une (trailing edge)."""
        self.scheduler.cancel()
        self.scheduler.schedule(self.delay_ms, self._persist)

    def _persist(self) -> None:
        payload = DraftPayload(saved_at=self.now(), form_state=clone_state(self.get_state()))
        self.store.write(self.key, payload.to_json_dict())
        self.last_draft = payload
        logger.debug("Draft autosaved at %s", payload.saved_at.isoformat())

    def flush(self) -> bool:
        """Écrit immédiatement la sauvegarde en attente, s'il y en a une."""
        if not self.scheduler.pending:
            return False
        self.scheduler.cancel()
        self._persist()
        return True

    def restore(self) -> Optional[InvoiceFormState]:
        if self.last_draft is None:
            return None
        return clone_state(self.last_draft.form_state)

    def clear(self) -> None:
        self.scheduler.cancel()
        self.store.remove(self.key)
        self.last_draft = None
