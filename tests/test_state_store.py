from __future__ import annotations

import logging
from datetime import UTC, datetime

import pytest

from pycellwatch.models.cell import CellRecord
from pycellwatch.models.location import LocationFix
from pycellwatch.state.store import CellInfoStore, LocationStore


def _dt() -> datetime:
    return datetime(2026, 1, 1, tzinfo=UTC)


def _record(ci: int = 100) -> CellRecord:
    return CellRecord(ci=ci, tac=5, mcc="310", mnc="410")


def test_store_starts_empty() -> None:
    store = CellInfoStore()

    assert store.current() == ()
    assert store.updated_at is None
    assert store.version == 0


def test_replace_clears_prior_contents() -> None:
    store = CellInfoStore(clock=_dt)

    store.replace([_record(1)])
    store.replace([_record(3)])

    assert store.current() == (_record(3),)
    assert store.updated_at == _dt()
    assert store.version == 2


def test_cell_store_rejects_more_than_one_record() -> None:
    store = CellInfoStore()
    store.replace([_record(1)])

    with pytest.raises(ValueError, match="at most one"):
        store.replace([_record(2), _record(3)])

    assert store.current() == (_record(1),)
    assert store.version == 1


def test_cell_store_accepts_empty_snapshot() -> None:
    store = CellInfoStore()
    store.replace([_record(1)])
    store.replace([])

    assert store.current() == ()


def test_subscribers_notified_synchronously() -> None:
    store = CellInfoStore()
    seen: list[tuple[CellRecord, ...]] = []
    store.subscribe(seen.append)

    store.replace([_record()])

    # No await between the write and the assertion.
    assert seen == [(_record(),)]


def test_snapshot_is_immutable_copy() -> None:
    store = CellInfoStore()
    items = [_record()]
    store.replace(items)
    items.append(_record(2))

    assert store.current() == (_record(),)


def test_unsubscribe_stops_notifications() -> None:
    store = CellInfoStore()
    seen: list[tuple[CellRecord, ...]] = []
    unsubscribe = store.subscribe(seen.append)

    store.replace([_record(1)])
    unsubscribe()
    unsubscribe()
    store.replace([_record(2)])

    assert seen == [(_record(1),)]


def test_failing_subscriber_does_not_block_others(caplog: pytest.LogCaptureFixture) -> None:
    store = CellInfoStore()
    seen: list[tuple[CellRecord, ...]] = []

    def _broken(_snapshot: tuple[CellRecord, ...]) -> None:
        raise RuntimeError("render failed")

    store.subscribe(_broken)
    store.subscribe(seen.append)

    with caplog.at_level(logging.ERROR, logger="pycellwatch.state.store"):
        store.replace([_record()])

    assert seen == [(_record(),)]
    assert store.current() == (_record(),)
    assert "State subscriber" in caplog.text


def test_location_store_latest() -> None:
    store = LocationStore()
    assert store.latest() is None

    fix = LocationFix(latitude=1.0, longitude=2.0)
    store.replace([fix])

    assert store.latest() == fix
