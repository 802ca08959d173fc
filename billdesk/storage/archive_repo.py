from __future__ import annotations
import logging
from typing import List, Optional

from pydantic import ValidationError

from billdesk.models.invoice import StoredInvoice
from billdesk.storage.json_store import JsonStore

logger = logging.getLogger(__name__)

ARCHIVE_KEY = "invoice_archive"


class ArchiveRepository:
    """Liste ordonnée des factures archivées, gardée en mémoire et réécrite en entier à chaque mutation."""

    def __init__(self, store: JsonStore, key: str = ARCHIVE_KEY):
        self.store = store
        self.key = key
        self._load()

    def _load(self):
        raw = self.store.read(self.key)
        self.data: List[StoredInvoice] = []
        if not isinstance(raw, list):
            if raw is not None:
                logger.warning("Archive payload under %r is not a list, starting empty", self.key)
            return
        for d in raw:
            try:
                self.data.append(StoredInvoice.model_validate(d))
            except ValidationError:
                # entrée invalide ignorée, le reste de l'archive reste utilisable
                logger.warning("Skipping malformed archive entry %r", d.get("id") if isinstance(d, dict) else d)

    def _save(self) -> bool:
        return self.store.write(self.key, [e.to_json_dict() for e in self.data])

    def list_all(self) -> List[StoredInvoice]:
        return list(self.data)

    def _index_of_key(self, entry_id: str) -> int:
        for i, e in enumerate(self.data):
            if e.id == entry_id:
                return i
        return -1

    def get(self, entry_id: str) -> Optional[StoredInvoice]:
        idx = self._index_of_key(entry_id)
        return self.data[idx] if idx >= 0 else None

    def prepend(self, entry: StoredInvoice) -> None:
        self.data.insert(0, entry)
        self._save()

    def replace(self, entry: StoredInvoice) -> bool:
        idx = self._index_of_key(entry.id)
        if idx < 0:
            return False
        self.data[idx] = entry
        self._save()
        return True

    def delete(self, entry_id: str) -> bool:
        idx = self._index_of_key(entry_id)
        if idx < 0:
            return False
        self.data.pop(idx)
        self._save()
        return True
