"""High-level async owner of the permission gate, pollers and stores."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any

import aiohttp

from pycellwatch._constants import POLL_INTERVAL_SECONDS
from pycellwatch.config import BACKEND_HTTP, BACKEND_TERMUX, CellWatchConfig
from pycellwatch.exceptions import CellWatchError, PermissionDeniedError
from pycellwatch.permissions import (
    STARTUP_PERMISSIONS,
    PermissionGate,
    PermissionProvider,
    PermissionResult,
    StaticPermissionProvider,
)
from pycellwatch.pollers.cell import CellInfoPoller
from pycellwatch.pollers.location import LocationPoller
from pycellwatch.state.store import CellInfoStore, LocationStore
from pycellwatch.telephony._base import LocationService, TelephonyService
from pycellwatch.telephony.http import HttpLocationService, HttpTelephonyService
from pycellwatch.telephony.termux import TermuxLocationService, TermuxTelephonyService

_logger = logging.getLogger(__name__)


class CellWatch:
    """Async owner of one data-collection lifetime.

    Usage::

        async with CellWatch(CellWatchConfig.from_env()) as watch:
            watch.cell_store.subscribe(render)
            if await watch.start() is PermissionResult.GRANTED:
                await watch.wait_stopped()

    Leaving the context stops both pollers.
    """

    def __init__(
        self,
        config: CellWatchConfig,
        *,
        telephony: TelephonyService | None = None,
        location: LocationService | None = None,
        permissions: PermissionProvider | None = None,
        cell_store: CellInfoStore | None = None,
        location_store: LocationStore | None = None,
        session: aiohttp.ClientSession | None = None,
        interval: float = POLL_INTERVAL_SECONDS,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._telephony = telephony
        self._location = location
        if permissions is None:
            permissions = StaticPermissionProvider(
                config.granted_permissions,
                grant_on_request=config.grant_on_request,
            )
        self._gate = PermissionGate(permissions)
        self.cell_store = cell_store if cell_store is not None else CellInfoStore()
        self.location_store = location_store if location_store is not None else LocationStore()
        self._interval = interval
        self._stop = asyncio.Event()
        self._start_lock = asyncio.Lock()
        self._tasks: list[asyncio.Task[None]] = []
        self._entered = False

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> CellWatch:
        self._stop = asyncio.Event()
        if self._config.backend == BACKEND_HTTP and self._needs_backend():
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
        self._build_backends()
        self._entered = True
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._entered = False

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> CellWatchConfig:
        return self._config

    @property
    def gate(self) -> PermissionGate:
        return self._gate

    @property
    def is_running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    # ------------------------------------------------------------------
    # Collection
    # ------------------------------------------------------------------

    async def start(self) -> PermissionResult:
        """Request the startup permissions and launch the pollers on success.

        On :attr:`PermissionResult.DENIED` nothing is started.
        """
        self._require_entered()
        # Held across the prompt so overlapping calls cannot spawn a second writer.
        async with self._start_lock:
            if self.is_running:
                return PermissionResult.GRANTED

            result = await self._gate.ensure_permissions(STARTUP_PERMISSIONS)
            if result is not PermissionResult.GRANTED:
                return result

            if self._stop.is_set():
                self._stop = asyncio.Event()
            self._spawn_pollers()
            return result

    def _spawn_pollers(self) -> None:
        assert self._telephony is not None  # noqa: S101
        cell_poller = CellInfoPoller(self._telephony, self.cell_store, self._gate)
        self._tasks.append(asyncio.create_task(cell_poller.run(self._interval, self._stop), name="cell-info-poller"))

        if self._config.location_enabled and self._location is not None:
            location_poller = LocationPoller(
                self._location,
                self.location_store,
                self._gate,
                log_sensitive=self._config.log_sensitive,
            )
            self._tasks.append(
                asyncio.create_task(location_poller.run(self._interval, self._stop), name="location-poller")
            )
        _logger.debug("Started %d poller(s)", len(self._tasks))

    async def wait_stopped(self) -> None:
        """Block until :meth:`stop` is called or the context exits."""
        await self._stop.wait()

    async def run_forever(self) -> None:
        """Start collecting and block until stopped.

        Raises :class:`PermissionDeniedError` when the startup permissions
        are not granted.
        """
        result = await self.start()
        if result is not PermissionResult.GRANTED:
            missing = frozenset(str(kind) for kind in self._gate.missing(STARTUP_PERMISSIONS))
            raise PermissionDeniedError("Permissions not granted by the user.", missing=missing)
        await self.wait_stopped()

    async def stop(self) -> None:
        """Signal the pollers to stop, cancel them and wait for them to finish."""
        self._stop.set()
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_entered(self) -> None:
        if not self._entered:
            raise CellWatchError("CellWatch not initialized. Use 'async with CellWatch(...) as watch:'")

    def _needs_backend(self) -> bool:
        return self._telephony is None or (self._config.location_enabled and self._location is None)

    def _build_backends(self) -> None:
        if self._config.backend == BACKEND_TERMUX:
            if self._telephony is None:
                self._telephony = TermuxTelephonyService(self._config)
            if self._location is None and self._config.location_enabled:
                self._location = TermuxLocationService(self._config)
            return

        if not self._needs_backend():
            return
        assert self._http_session is not None  # noqa: S101
        if self._telephony is None:
            self._telephony = HttpTelephonyService(self._config, self._http_session)
        if self._location is None and self._config.location_enabled:
            self._location = HttpLocationService(self._config, self._http_session)
