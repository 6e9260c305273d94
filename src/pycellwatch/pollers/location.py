"""Location poller."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from pycellwatch.exceptions import CellWatchError
from pycellwatch.models.location import LocationFix
from pycellwatch.permissions import LOCATION_PERMISSIONS, PermissionGate, PermissionKind
from pycellwatch.pollers._loop import Poller
from pycellwatch.state.store import LocationStore
from pycellwatch.telephony._base import LocationService

_logger = logging.getLogger(__name__)

_REDACTED = "<redacted>"


class LocationPoller(Poller):
    """Poll the location service, log each fix and republish it.

    A cycle runs when any of *accepted_permissions* is granted (fine or
    coarse location by default).
    """

    name = "location poller"

    def __init__(
        self,
        location: LocationService,
        store: LocationStore,
        gate: PermissionGate,
        *,
        accepted_permissions: Iterable[PermissionKind] = LOCATION_PERMISSIONS,
        log_sensitive: bool = False,
    ) -> None:
        super().__init__(logger=_logger)
        self._location = location
        self._store = store
        self._gate = gate
        self._accepted = frozenset(accepted_permissions)
        self._log_sensitive = log_sensitive

    async def poll_once(self) -> LocationFix | None:
        if not self._gate.is_any_granted(self._accepted):
            _logger.debug("Location permissions missing; skipping cycle")
            return None

        try:
            fix = await self._location.get_current_location()
        except CellWatchError as exc:
            _logger.warning("error: %s", exc)
            return None

        if self._log_sensitive:
            _logger.debug("lat: %s long: %s", fix.latitude, fix.longitude)
        else:
            _logger.debug("lat: %s long: %s", _REDACTED, _REDACTED)
        self._store.replace((fix,))
        return fix
