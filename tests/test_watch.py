from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import pytest

from pycellwatch.config import CellWatchConfig
from pycellwatch.exceptions import CellWatchError, PermissionDeniedError
from pycellwatch.models.cell import CellRecord
from pycellwatch.models.location import LocationFix
from pycellwatch.permissions import PermissionKind, PermissionResult, StaticPermissionProvider
from pycellwatch.telephony.http import HttpLocationService, HttpTelephonyService
from pycellwatch.telephony.termux import TermuxLocationService, TermuxTelephonyService
from pycellwatch.watch import CellWatch

LTE_310 = {"type": "lte", "ci": 100, "tac": 5, "mcc": "310", "mnc": "410"}


class _FakeTelephony:
    def __init__(self) -> None:
        self.calls = 0

    async def get_all_cell_info(self) -> list[Any]:
        self.calls += 1
        return [LTE_310]


class _FakeLocation:
    def __init__(self) -> None:
        self.calls = 0

    async def get_current_location(self) -> LocationFix:
        self.calls += 1
        return LocationFix(latitude=52.1, longitude=4.3)


async def _eventually(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
    async with asyncio.timeout(timeout):
        while not predicate():
            await asyncio.sleep(0.005)


def _watch(
    config: CellWatchConfig | None = None,
    permissions: StaticPermissionProvider | None = None,
) -> tuple[CellWatch, _FakeTelephony, _FakeLocation]:
    telephony = _FakeTelephony()
    location = _FakeLocation()
    watch = CellWatch(
        config or CellWatchConfig(),
        telephony=telephony,
        location=location,
        permissions=permissions or StaticPermissionProvider(),
        interval=0.01,
    )
    return watch, telephony, location


@pytest.mark.asyncio
async def test_granted_start_runs_both_pollers() -> None:
    watch, telephony, location = _watch()
    seen: list[tuple[CellRecord, ...]] = []

    async with watch:
        watch.cell_store.subscribe(seen.append)
        assert await watch.start() is PermissionResult.GRANTED
        assert watch.is_running
        await _eventually(lambda: telephony.calls >= 2 and location.calls >= 2)

    assert not watch.is_running
    assert watch.cell_store.current() == (CellRecord(ci=100, tac=5, mcc="310", mnc="410"),)
    assert watch.location_store.latest() == LocationFix(latitude=52.1, longitude=4.3)
    assert seen

    calls = telephony.calls
    await asyncio.sleep(0.05)
    assert telephony.calls == calls


@pytest.mark.asyncio
async def test_denied_start_collects_nothing() -> None:
    watch, telephony, location = _watch(permissions=StaticPermissionProvider(granted=()))

    async with watch:
        assert await watch.start() is PermissionResult.DENIED
        assert not watch.is_running
        await asyncio.sleep(0.05)

    assert telephony.calls == 0
    assert location.calls == 0
    assert watch.cell_store.current() == ()
    assert watch.cell_store.version == 0


@pytest.mark.asyncio
async def test_start_after_prompt_accepted() -> None:
    provider = StaticPermissionProvider(granted={PermissionKind.ACCESS_COARSE_LOCATION}, grant_on_request=True)
    watch, telephony, _ = _watch(permissions=provider)

    async with watch:
        assert await watch.start() is PermissionResult.GRANTED
        await _eventually(lambda: len(watch.cell_store.current()) == 1)

    assert provider.request_count == 1


@pytest.mark.asyncio
async def test_run_forever_raises_when_denied() -> None:
    watch, _, _ = _watch(permissions=StaticPermissionProvider(granted={PermissionKind.ACCESS_FINE_LOCATION}))

    async with watch:
        with pytest.raises(PermissionDeniedError) as exc_info:
            await watch.run_forever()

    assert exc_info.value.missing == frozenset({str(PermissionKind.READ_PHONE_STATE)})


@pytest.mark.asyncio
async def test_run_forever_returns_after_stop() -> None:
    watch, telephony, _ = _watch()

    async with watch:
        task = asyncio.create_task(watch.run_forever())
        await _eventually(lambda: telephony.calls >= 1)
        await watch.stop()
        await asyncio.wait_for(task, 1.0)

    assert not watch.is_running


@pytest.mark.asyncio
async def test_location_disabled() -> None:
    watch, telephony, location = _watch(config=CellWatchConfig(location_enabled=False))

    async with watch:
        await watch.start()
        await _eventually(lambda: telephony.calls >= 2)

    assert location.calls == 0
    assert watch.location_store.current() == ()


@pytest.mark.asyncio
async def test_start_requires_context() -> None:
    watch, _, _ = _watch()

    with pytest.raises(CellWatchError, match="async with"):
        await watch.start()


@pytest.mark.asyncio
async def test_termux_backends_built_by_default() -> None:
    async with CellWatch(CellWatchConfig()) as watch:
        assert isinstance(watch._telephony, TermuxTelephonyService)  # noqa: SLF001
        assert isinstance(watch._location, TermuxLocationService)  # noqa: SLF001


@pytest.mark.asyncio
async def test_http_backend_owns_its_session() -> None:
    config = CellWatchConfig(backend="http", base_url="http://127.0.0.1:8765")

    async with CellWatch(config) as watch:
        session = watch._http_session  # noqa: SLF001
        assert session is not None
        assert not session.closed
        assert isinstance(watch._telephony, HttpTelephonyService)  # noqa: SLF001
        assert isinstance(watch._location, HttpLocationService)  # noqa: SLF001

    assert session.closed
    assert watch._http_session is None  # noqa: SLF001


@pytest.mark.asyncio
async def test_start_after_stop_resumes_polling() -> None:
    watch, telephony, _ = _watch()

    async with watch:
        await watch.start()
        await _eventually(lambda: telephony.calls >= 2)
        await watch.stop()
        stopped_at = telephony.calls

        assert await watch.start() is PermissionResult.GRANTED
        assert watch.is_running
        await _eventually(lambda: telephony.calls >= stopped_at + 2)


@pytest.mark.asyncio
async def test_overlapping_starts_spawn_one_cell_poller() -> None:
    provider = StaticPermissionProvider(granted=(), grant_on_request=True)
    watch, _, _ = _watch(config=CellWatchConfig(location_enabled=False), permissions=provider)

    async with watch:
        results = await asyncio.gather(watch.start(), watch.start())
        cell_tasks = [task for task in watch._tasks if task.get_name() == "cell-info-poller"]  # noqa: SLF001

        assert results == [PermissionResult.GRANTED, PermissionResult.GRANTED]
        assert len(cell_tasks) == 1
        assert provider.request_count == 1
