from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, ValidationError

from billdesk.models.client import ClientProfile
from billdesk.models.service import Service

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


def _read_rows(path: Path) -> List[dict]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return []
    except (OSError, ValueError):
        logger.warning("Unreadable reference file %s", path)
        return []
    return [d for d in data if isinstance(d, dict)] if isinstance(data, list) else []


def _hydrate_list(rows: List[dict], model: Type[T]) -> List[T]:
    out: List[T] = []
    for d in rows:
        try:
            out.append(model.model_validate(d))
        except ValidationError:
            # On ignore les entrées invalides pour ne pas casser l'UI
            logger.warning("Skipping invalid %s entry %r", model.__name__, d.get("id"))
    return out


class ReferenceService:
    """Annuaire clients + catalogue de prestations, en lecture seule."""

    def __init__(self, clients: Sequence[ClientProfile] = (), services: Sequence[Service] = ()):
        self._clients: Dict[str, ClientProfile] = {c.id: c for c in clients}
        self._services: Dict[str, Service] = {s.id: s for s in services}

    @classmethod
    def from_data_dir(cls, data_dir: Path | str) -> "ReferenceService":
        base = Path(data_dir)
        return cls(
            clients=_hydrate_list(_read_rows(base / "clients.json"), ClientProfile),
            services=_hydrate_list(_read_rows(base / "services.json"), Service),
        )

    def list_clients(self) -> List[ClientProfile]:
        return list(self._clients.values())

    def get_client(self, client_id: str) -> Optional[ClientProfile]:
        return self._clients.get(client_id)

    def list_services(self) -> List[Service]:
        return list(self._services.values())

    def get_service(self, service_id: str) -> Optional[Service]:
        return self._services.get(service_id)
