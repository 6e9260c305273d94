"""Shared timed loop for the pollers."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from pycellwatch._constants import POLL_INTERVAL_SECONDS


async def wait_or_stop(stop: asyncio.Event, interval: float) -> bool:
    """Sleep for *interval* seconds; return ``True`` early when *stop* is set."""
    try:
        await asyncio.wait_for(stop.wait(), interval)
    except TimeoutError:
        return False
    return True


class Poller:
    """Base for a poll loop with a single owned cycle.

    Subclasses implement :meth:`poll_once`. A cycle that raises is logged
    and the loop carries on with the next one; only cancellation or the
    stop event end it.
    """

    name = "poller"

    def __init__(self, *, logger: logging.Logger) -> None:
        self._logger = logger
        self.cycles = 0

    async def poll_once(self) -> Any:
        raise NotImplementedError

    async def run(self, interval: float = POLL_INTERVAL_SECONDS, stop: asyncio.Event | None = None) -> None:
        """Poll every *interval* seconds until *stop* is set or the task is cancelled."""
        if stop is None:
            stop = asyncio.Event()
        self._logger.debug("%s started (interval=%.1fs)", self.name, interval)
        try:
            while not stop.is_set():
                self.cycles += 1
                try:
                    await self.poll_once()
                except Exception:
                    self._logger.exception("%s cycle failed", self.name)
                if stop.is_set():
                    break
                if await wait_or_stop(stop, interval):
                    break
        finally:
            self._logger.debug("%s stopped after %d cycles", self.name, self.cycles)
