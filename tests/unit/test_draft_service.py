"""Unit tests for the debounced draft autosave."""

from __future__ import annotations

import json

from billdesk.services.draft_service import DRAFT_KEY, DraftAutosaveService


def _service(store, scheduler, holder, clock):
    return DraftAutosaveService(store, scheduler, lambda: holder["state"], delay_ms=800, now=clock)


def test_no_draft_until_first_cycle(store, scheduler, clock, make_state) -> None:
    drafts = _service(store, scheduler, {"state": make_state()}, clock)

    assert drafts.last_draft is None
    assert drafts.is_scheduled is False
    assert store.read(DRAFT_KEY) is None


def test_burst_of_mutations_persists_once_with_last_state(store, scheduler, clock, make_state) -> None:
    holder = {"state": make_state()}
    drafts = _service(store, scheduler, holder, clock)
    writes = []
    original_write = store.write
    store.write = lambda key, data: writes.append(key) or original_write(key, data)

    for n in range(1, 6):
        holder["state"].tax_rate = n
        drafts.notify_change()

    assert drafts.is_scheduled is True
    assert scheduler.delay_ms == 800
    assert writes == []

    scheduler.fire()

    assert writes == [DRAFT_KEY]
    assert drafts.is_scheduled is False
    assert drafts.last_draft.form_state.tax_rate == 5
    assert store.read(DRAFT_KEY)["formState"]["taxRate"] == 5


def test_draft_is_overwritten_not_appended(store, scheduler, clock, make_state) -> None:
    holder = {"state": make_state()}
    drafts = _service(store, scheduler, holder, clock)

    drafts.notify_change(); scheduler.fire()
    first_saved = drafts.last_draft.saved_at
    holder["state"].terms = "Net 30"
    drafts.notify_change(); scheduler.fire()

    raw = store.read(DRAFT_KEY)
    assert set(raw) == {"savedAt", "formState"}
    assert raw["formState"]["terms"] == "Net 30"
    assert drafts.last_draft.saved_at > first_saved


def test_draft_snapshot_is_not_aliased(store, scheduler, clock, make_state) -> None:
    holder = {"state": make_state()}
    drafts = _service(store, scheduler, holder, clock)
    drafts.notify_change(); scheduler.fire()

    holder["state"].line_items[0].description = "edited later"
    restored = drafts.restore()
    restored.meta.project_name = "edited restore"

    assert drafts.last_draft.form_state.line_items[0].description == "SEO retainer"
    assert drafts.last_draft.form_state.meta.project_name == "Retainer Services"


def test_restore_keeps_the_draft(store, scheduler, clock, make_state) -> None:
    drafts = _service(store, scheduler, {"state": make_state()}, clock)
    drafts.notify_change(); scheduler.fire()

    assert drafts.restore() == make_state()
    assert drafts.last_draft is not None
    assert store.read(DRAFT_KEY) is not None


def test_restore_without_draft_returns_none(store, scheduler, clock, make_state) -> None:
    assert _service(store, scheduler, {"state": make_state()}, clock).restore() is None


def test_clear_removes_persisted_and_memory(store, scheduler, clock, make_state) -> None:
    drafts = _service(store, scheduler, {"state": make_state()}, clock)
    drafts.notify_change(); scheduler.fire()
    drafts.notify_change()

    drafts.clear()

    assert drafts.last_draft is None
    assert drafts.is_scheduled is False
    assert store.read(DRAFT_KEY) is None


def test_stale_draft_on_disk_is_not_exposed(store, scheduler, clock, make_state) -> None:
    first = _service(store, scheduler, {"state": make_state()}, clock)
    first.notify_change(); scheduler.fire()

    second = _service(store, scheduler, {"state": make_state(terms="other")}, clock)

    assert second.last_draft is None
    assert second.restore() is None


def test_first_cycle_overwrites_stale_or_malformed_draft(store, scheduler, clock, make_state, data_dir) -> None:
    (data_dir / f"{DRAFT_KEY}.json").write_text(json.dumps({"savedAt": "yesterday"}), encoding="utf-8")
    drafts = _service(store, scheduler, {"state": make_state(terms="fresh")}, clock)

    assert drafts.last_draft is None
    drafts.notify_change(); scheduler.fire()

    assert store.read(DRAFT_KEY)["formState"]["terms"] == "fresh"
    assert drafts.restore().terms == "fresh"


def test_flush_writes_pending_draft_immediately(store, scheduler, clock, make_state) -> None:
    drafts = _service(store, scheduler, {"state": make_state()}, clock)

    assert drafts.flush() is False
    drafts.notify_change()
    assert drafts.flush() is True
    assert drafts.is_scheduled is False
    assert store.read(DRAFT_KEY) is not None
