# billdesk/services/export_service.py
from __future__ import annotations
import json
import logging
import re
from pathlib import Path
from typing import Optional, Tuple

from billdesk.models.invoice import InvoiceFormState, StoredInvoice
from billdesk.models.organization import Organization
from billdesk.services.archive_service import ArchiveService
from billdesk.services.formatting import format_date, format_money
from billdesk.services.totals import compute_totals, line_net

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"


def _safe_filename_part(text: str) -> str:
    text = (text or "").strip()
    text = re.sub(r'[\\/:*?"<>|\n\r\t]', "_", text)
    return text


def export_filename(entry: StoredInvoice, ext: str = "json") -> str:
    number = _safe_filename_part(entry.invoice_number) or "invoice"
    return f"{number}-{entry.id}.{ext}"


def serialize_entry(entry: StoredInvoice) -> str:
    return json.dumps(entry.to_json_dict(), ensure_ascii=False, indent=2)


class ExportService:
    def __init__(self, archive: ArchiveService, organization: Optional[Organization] = None):
        self.archive = archive
        self.organization = organization or Organization()

    # ----------- JSON -----------
    def build_export(self, entry_id: str) -> Optional[Tuple[str, str]]:
        """(nom de fichier, contenu JSON) ou None si l'entrée n'existe pas. Lecture seule."""
        entry = self.archive.get(entry_id)
        if entry is None:
            return None
        return export_filename(entry), serialize_entry(entry)

    def export_json(self, entry_id: str, out_dir: Path | str) -> Optional[Path]:
        built = self.build_export(entry_id)
        if built is None:
            return None
        filename, content = built
        out = Path(out_dir)
        out.mkdir(parents=True, exist_ok=True)
        path = out / filename
        path.write_text(content, encoding="utf-8")
        logger.info("Exported archived invoice %s to %s", entry_id, path)
        return path

    # ----------- aperçu HTML -----------
    def render_html(self, state: InvoiceFormState) -> str:
        """
        Rend l'aperçu imprimable via Jinja2: templates/invoice.html
        """
        from jinja2 import Environment, FileSystemLoader, select_autoescape

        env = Environment(
            loader=FileSystemLoader(str(TEMPLATES_DIR)),
            autoescape=select_autoescape(["html", "xml"]),
        )
        env.filters["money"] = lambda v: format_money(v, state.currency)
        env.filters["nice_date"] = format_date
        tpl = env.get_template("invoice.html")

        totals = compute_totals(state.line_items, state.tax_rate)
        lines = [{"item": it, "net": line_net(it)} for it in state.line_items]
        return tpl.render(
            org=self.organization,
            state=state,
            client=state.client,
            meta=state.meta,
            lines=lines,
            totals=totals,
        )

    def export_html(self, state: InvoiceFormState, out_dir: Path | str) -> Path:
        out = Path(out_dir)
        out.mkdir(parents=True, exist_ok=True)
        number = _safe_filename_part(state.meta.invoice_number) or "invoice"
        path = out / f"{number}.html"
        path.write_text(self.render_html(state), encoding="utf-8")
        return path
