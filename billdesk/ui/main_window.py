from __future__ import annotations
from PySide6.QtWidgets import (
    QMainWindow, QWidget, QTabWidget, QVBoxLayout, QHBoxLayout, QFormLayout,
    QLabel, QPushButton, QFileDialog, QMessageBox, QTableWidget,
    QTableWidgetItem, QHeaderView, QLineEdit, QComboBox,
)
from PySide6.QtCore import Qt, QTimer

from billdesk.app import build_workspace
from billdesk.models.invoice import CURRENCIES
from billdesk.services.formatting import format_money
from billdesk.ui.qt_scheduler import QtTimerScheduler

LINE_COLUMNS = ["Description", "Qté", "Prix unitaire", "Remise %"]
_LINE_FIELDS = ["description", "quantity", "unit_price", "discount_rate"]


class MainWindow(QMainWindow):
    def __init__(self, data_dir=None):
        super().__init__()
        self.setWindowTitle("Billdesk - Factures")
        self.resize(1180, 760)
        self._filling = False

        self.ws = build_workspace(
            data_dir,
            scheduler=QtTimerScheduler(self),
            confirm=self._confirm,
            printer=self._print,
        )

        self.tabs = QTabWidget()
        self.setCentralWidget(self.tabs)
        self.tabs.addTab(self._editor_tab(), "Facture")
        self.tabs.addTab(self._archive_tab(), "Archive")

        self._fill_from_state()
        self._refresh_archive()

    # ==================== COLLABORATEURS ====================
    def _confirm(self, message: str) -> bool:
        return QMessageBox.question(self, "Confirmer", message) == QMessageBox.StandardButton.Yes

    def _print(self, on_complete):
        # pas d'imprimante réelle : export HTML imprimable puis fin immédiate
        path = self.ws.export_preview_html()
        QMessageBox.information(self, "Aperçu", f"Aperçu imprimable : {path}")
        on_complete()

    # ==================== EDITEUR ====================
    def _editor_tab(self):
        w = QWidget()
        root = QVBoxLayout(w)

        self.ed_number = QLineEdit()
        btn_regen = QPushButton("Nouveau numéro")
        num_row = QHBoxLayout(); num_row.addWidget(self.ed_number, 1); num_row.addWidget(btn_regen)
        self.cb_client = QComboBox()
        self.cb_client.addItem("Client personnalisé", "")
        for c in self.ws.reference.list_clients():
            self.cb_client.addItem(c.company_name, c.id)
        self.ed_company = QLineEdit()
        self.ed_issue = QLineEdit(); self.ed_issue.setPlaceholderText("AAAA-MM-JJ")
        self.ed_due = QLineEdit(); self.ed_due.setPlaceholderText("AAAA-MM-JJ")
        self.cb_currency = QComboBox(); self.cb_currency.addItems(list(CURRENCIES))
        self.ed_tax = QLineEdit()

        form = QFormLayout()
        form.addRow("Numéro", num_row)
        form.addRow("Client", self.cb_client)
        form.addRow("Société", self.ed_company)
        form.addRow("Émise le", self.ed_issue)
        form.addRow("Échéance", self.ed_due)
        form.addRow("Devise", self.cb_currency)
        form.addRow("TVA %", self.ed_tax)
        root.addLayout(form)

        self.tbl_lines = QTableWidget(0, len(LINE_COLUMNS))
        self.tbl_lines.setHorizontalHeaderLabels(LINE_COLUMNS)
        self.tbl_lines.horizontalHeader().setSectionResizeMode(QHeaderView.Stretch)
        root.addWidget(self.tbl_lines, 1)

        bar = QHBoxLayout()
        btn_add = QPushButton("Ajouter une ligne")
        btn_del = QPushButton("Supprimer la ligne")
        btn_new = QPushButton("Nouvelle facture")
        btn_save = QPushButton("Enregistrer")
        btn_update = QPushButton("Mettre à jour")
        btn_dup = QPushButton("Dupliquer")
        btn_print = QPushButton("Imprimer")
        btn_restore = QPushButton("Restaurer le brouillon")
        self.lab_total = QLabel("")
        for b in (btn_add, btn_del, btn_new, btn_save, btn_update, btn_dup, btn_print, btn_restore):
            bar.addWidget(b)
        bar.addStretch(1); bar.addWidget(self.lab_total)
        root.addLayout(bar)

        btn_regen.clicked.connect(lambda: (self.ws.regenerate_invoice_number(), self._fill_from_state()))
        self.ed_number.textEdited.connect(lambda v: self._meta("invoice_number", v))
        self.ed_issue.textEdited.connect(lambda v: self._meta("issue_date", v))
        self.ed_due.textEdited.connect(lambda v: self._meta("due_date", v))
        self.ed_company.textEdited.connect(lambda v: (self.ws.update_client_field("company_name", v), self._update_totals()))
        self.cb_client.activated.connect(lambda _i: (self.ws.select_client(self.cb_client.currentData()), self._fill_from_state()))
        self.cb_currency.activated.connect(lambda _i: (self.ws.set_currency(self.cb_currency.currentText()), self._update_totals()))
        self.ed_tax.editingFinished.connect(lambda: (self.ws.set_tax_rate(self.ed_tax.text()), self._fill_from_state()))
        self.tbl_lines.itemChanged.connect(self._line_changed)

        btn_add.clicked.connect(lambda: (self.ws.add_line_item(), self._fill_from_state()))
        btn_del.clicked.connect(self._del_line)
        btn_new.clicked.connect(lambda: (self.ws.new_invoice(), self._fill_from_state()))
        btn_save.clicked.connect(lambda: (self.ws.save_to_archive(), self._refresh_archive()))
        btn_update.clicked.connect(lambda: (self.ws.update_archive(), self._refresh_archive()))
        btn_dup.clicked.connect(lambda: (self.ws.duplicate_to_archive(), self._refresh_archive()))
        btn_print.clicked.connect(self.ws.print_invoice)
        btn_restore.clicked.connect(lambda: (self.ws.restore_draft(), self._fill_from_state()))
        return w

    def _meta(self, name: str, value: str):
        self.ws.update_meta_field(name, value)

    def _fill_from_state(self):
        st = self.ws.state
        self._filling = True
        try:
            self.ed_number.setText(st.meta.invoice_number)
            self.ed_issue.setText(st.meta.issue_date)
            self.ed_due.setText(st.meta.due_date)
            self.ed_company.setText(st.client.company_name)
            self.cb_client.setCurrentIndex(max(0, self.cb_client.findData(st.client_selection_id)))
            self.cb_currency.setCurrentText(st.currency)
            self.ed_tax.setText(f"{st.tax_rate:g}")
            self.tbl_lines.setRowCount(0)
            for it in st.line_items:
                r = self.tbl_lines.rowCount(); self.tbl_lines.insertRow(r)
                values = [it.description, f"{it.quantity:g}", f"{it.unit_price:g}", f"{it.discount_rate:g}"]
                for col, v in enumerate(values):
                    cell = QTableWidgetItem(v)
                    cell.setData(Qt.UserRole, it.id)
                    self.tbl_lines.setItem(r, col, cell)
        finally:
            self._filling = False
        self._update_totals()

    def _line_changed(self, cell: QTableWidgetItem):
        if self._filling:
            return
        self.ws.update_line_item(cell.data(Qt.UserRole), _LINE_FIELDS[cell.column()], cell.text())
        # rafraîchit après le signal : la cellule émettrice ne doit pas être détruite pendant son émission
        QTimer.singleShot(0, self._fill_from_state)

    def _del_line(self):
        row = self.tbl_lines.currentRow()
        if row < 0: return
        self.ws.remove_line_item(self.tbl_lines.item(row, 0).data(Qt.UserRole))
        self._fill_from_state()

    def _update_totals(self):
        t = self.ws.totals
        self.lab_total.setText(f"Total : {format_money(t.total, self.ws.state.currency)}")

    # ==================== ARCHIVE ====================
    def _archive_tab(self):
        w = QWidget()
        root = QVBoxLayout(w)
        bar = QHBoxLayout()
        btn_load = QPushButton("Ouvrir")
        btn_del = QPushButton("Supprimer")
        btn_export = QPushButton("Exporter JSON")
        bar.addWidget(btn_load); bar.addWidget(btn_del); bar.addStretch(1); bar.addWidget(btn_export)
        root.addLayout(bar)

        self.tbl_archive = QTableWidget(0, 3)
        self.tbl_archive.setHorizontalHeaderLabels(["Numéro", "Enregistrée le", "ID"])
        self.tbl_archive.horizontalHeader().setSectionResizeMode(QHeaderView.Stretch)
        self.tbl_archive.setSelectionBehavior(self.tbl_archive.SelectionBehavior.SelectRows)
        self.tbl_archive.setEditTriggers(self.tbl_archive.EditTrigger.NoEditTriggers)
        root.addWidget(self.tbl_archive, 1)

        btn_load.clicked.connect(self._archive_load)
        btn_del.clicked.connect(self._archive_delete)
        btn_export.clicked.connect(self._archive_export)
        return w

    def _refresh_archive(self):
        self.tbl_archive.setRowCount(0)
        for e in self.ws.archive_entries():
            r = self.tbl_archive.rowCount(); self.tbl_archive.insertRow(r)
            self.tbl_archive.setItem(r, 0, QTableWidgetItem(e.invoice_number or "—"))
            self.tbl_archive.setItem(r, 1, QTableWidgetItem(e.saved_at.astimezone().strftime("%d/%m/%Y %H:%M")))
            self.tbl_archive.setItem(r, 2, QTableWidgetItem(e.id))
        self.tbl_archive.resizeRowsToContents()

    def _selected_archive_id(self):
        row = self.tbl_archive.currentRow()
        if row < 0: return None
        return self.tbl_archive.item(row, 2).text()

    def _archive_load(self):
        entry_id = self._selected_archive_id()
        if entry_id and self.ws.load_from_archive(entry_id):
            self._fill_from_state()
            self.tabs.setCurrentIndex(0)

    def _archive_delete(self):
        entry_id = self._selected_archive_id()
        if entry_id and self.ws.delete_from_archive(entry_id):
            self._refresh_archive()

    def _archive_export(self):
        entry_id = self._selected_archive_id()
        if not entry_id: return
        out_dir = QFileDialog.getExistingDirectory(self, "Dossier d'export", str(self.ws.settings.exports_dir))
        if not out_dir: return
        path = self.ws.export_archive(entry_id, out_dir)
        if path:
            QMessageBox.information(self, "Export", f"Facture exportée : {path}")

    def closeEvent(self, event):
        self.ws.close()
        super().closeEvent(event)
