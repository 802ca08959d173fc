from __future__ import annotations

from billdesk.models.invoice import InvoiceFormState


def clone_state(state: InvoiceFormState) -> InvoiceFormState:
    # copie profonde : aucune référence partagée entre état de travail, brouillon et archive
    return state.model_copy(deep=True)
