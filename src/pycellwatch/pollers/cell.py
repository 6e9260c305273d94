"""Cell-info poller.

Each cycle queries the visible towers, keeps the records of the supported
technology that carry a country code and publishes the last one.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from pycellwatch.exceptions import CellWatchError, MalformedRecordError
from pycellwatch.models.cell import CellRecord, CellTechnology, parse_cell_info
from pycellwatch.permissions import CELL_INFO_PERMISSIONS, PermissionGate, PermissionKind
from pycellwatch.pollers._loop import Poller
from pycellwatch.state.store import CellInfoStore
from pycellwatch.telephony._base import TelephonyService

_logger = logging.getLogger(__name__)

DEFAULT_TECHNOLOGIES: frozenset[CellTechnology] = frozenset({CellTechnology.LTE})


class CellInfoPoller(Poller):
    """Poll the telephony service and republish the latest tower identity.

    Parameters
    ----------
    telephony : TelephonyService
        Radio query boundary.
    store : CellInfoStore
        Store this poller owns writes to.
    gate : PermissionGate
        Re-checked at the start of every cycle; a cycle without all of
        *required_permissions* is skipped.
    technologies : iterable of CellTechnology
        Technologies whose records are published. Defaults to LTE.
    """

    name = "cell-info poller"

    def __init__(
        self,
        telephony: TelephonyService,
        store: CellInfoStore,
        gate: PermissionGate,
        *,
        technologies: Iterable[CellTechnology] = DEFAULT_TECHNOLOGIES,
        required_permissions: Iterable[PermissionKind] = CELL_INFO_PERMISSIONS,
    ) -> None:
        super().__init__(logger=_logger)
        self._telephony = telephony
        self._store = store
        self._gate = gate
        self._technologies = frozenset(technologies)
        self._required = frozenset(required_permissions)

    async def poll_once(self) -> CellRecord | None:
        """Run one cycle; return the record written to the store, if any."""
        if not self._gate.is_granted(self._required):
            _logger.debug("Cell info permissions missing; skipping cycle")
            return None

        try:
            raw_cells = await self._telephony.get_all_cell_info()
        except CellWatchError as exc:
            _logger.warning("Cell info query failed: %s", exc)
            _logger.debug("Cell info query failure details", exc_info=True)
            return None

        latest: CellRecord | None = None
        for raw in raw_cells or ():
            try:
                info = parse_cell_info(raw)
            except MalformedRecordError as exc:
                _logger.debug("Skipping malformed cell record: %s", exc)
                continue

            if info.technology not in self._technologies:
                continue

            record = info.to_record()
            if record is None or record.mcc is None:
                continue

            self._store.replace((record,))
            latest = record

        return latest
