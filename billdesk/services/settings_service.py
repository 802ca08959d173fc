from __future__ import annotations
import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from billdesk.models.invoice import Currency
from billdesk.models.organization import Organization

logger = logging.getLogger(__name__)

# --- Chemins de base ---
ROOT_DIR = Path(__file__).resolve().parents[2]
DEFAULT_DATA_DIR = ROOT_DIR / "data"
DEFAULT_EXPORTS_DIR = ROOT_DIR / "exports"

DEFAULT_TERMS = (
    "Payment due within 15 days from the invoice date. Please remit via bank transfer "
    "to the account listed. Late payments accrue a 2% monthly finance charge."
)


class AppSettings(BaseModel):
    data_dir: Path = DEFAULT_DATA_DIR
    exports_dir: Path = DEFAULT_EXPORTS_DIR
    invoice_prefix: str = "ADS"
    default_currency: Currency = "INR"
    default_tax_rate: float = Field(default=18.0, ge=0)
    payment_due_days: int = Field(default=15, ge=0)
    default_project_name: str = "Retainer Services"
    default_terms: str = DEFAULT_TERMS
    autosave_delay_ms: int = Field(default=800, ge=0)
    archive_backups: int = Field(default=5, ge=0)
    organization: Organization = Field(default_factory=Organization)


# ---------- Utils JSON ----------
def _load_json(path: os.PathLike | str):
    p = Path(path)
    if not p.exists():
        return None
    try:
        return json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        logger.warning("Unreadable settings file %s, using defaults", p)
        return None


def load_settings(data_dir: Optional[os.PathLike | str] = None) -> AppSettings:
    """
    Ordre de priorité :
    - argument explicite / BILLDESK_DATA_DIR pour le dossier de données
    - <data_dir>/settings.json
    - variables d'env BILLDESK_AUTOSAVE_MS, BILLDESK_EXPORTS_DIR
    """
    base = Path(data_dir or os.environ.get("BILLDESK_DATA_DIR") or DEFAULT_DATA_DIR)
    raw = _load_json(base / "settings.json")
    values = dict(raw) if isinstance(raw, dict) else {}
    values["data_dir"] = base

    env_delay = os.environ.get("BILLDESK_AUTOSAVE_MS")
    if env_delay:
        try:
            values["autosave_delay_ms"] = int(env_delay)
        except ValueError:
            logger.warning("Ignoring invalid BILLDESK_AUTOSAVE_MS=%r", env_delay)
    env_exports = os.environ.get("BILLDESK_EXPORTS_DIR")
    if env_exports:
        values["exports_dir"] = Path(env_exports)

    try:
        return AppSettings(**values)
    except ValidationError as e:
        logger.warning("Invalid settings in %s, using defaults: %s", base, e)
        return AppSettings(data_dir=base)
