"""Observable in-memory state store.

A store holds the latest collection result of exactly one poller. The
poller is the only writer; presentation code reads snapshots and
subscribes to replacements.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import Generic, TypeVar

from pycellwatch.models.cell import CellRecord
from pycellwatch.models.location import LocationFix

_logger = logging.getLogger(__name__)

T = TypeVar("T")

Subscriber = Callable[[tuple[T, ...]], None]


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ObservableStore(Generic[T]):
    """Latest-snapshot store with synchronous change notification.

    ``replace`` swaps the whole contents and calls every subscriber with
    the new snapshot before returning, so a subscriber always sees the
    newest data in the same scheduling step as the write.
    """

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._items: tuple[T, ...] = ()
        self._subscribers: list[Subscriber[T]] = []
        self._updated_at: datetime | None = None
        self._version = 0

    @property
    def updated_at(self) -> datetime | None:
        """Time of the last ``replace``; ``None`` before the first write."""
        return self._updated_at

    @property
    def version(self) -> int:
        """Number of ``replace`` calls so far."""
        return self._version

    def current(self) -> tuple[T, ...]:
        """Return the latest snapshot."""
        return self._items

    def replace(self, items: Iterable[T]) -> None:
        """Clear prior contents, install *items* and notify subscribers."""
        self._items = tuple(items)
        self._updated_at = self._clock()
        self._version += 1
        self._notify()

    def subscribe(self, callback: Subscriber[T]) -> Callable[[], None]:
        """Register *callback*; returns a function that removes it again."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            with contextlib.suppress(ValueError):
                self._subscribers.remove(callback)

        return _unsubscribe

    def _notify(self) -> None:
        snapshot = self._items
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception:
                _logger.exception("State subscriber %r failed", callback)


class CellInfoStore(ObservableStore[CellRecord]):
    """Holds at most one :class:`CellRecord`: the latest qualifying tower."""

    def replace(self, items: Iterable[CellRecord]) -> None:
        records = tuple(items)
        if len(records) > 1:
            raise ValueError(f"CellInfoStore holds at most one record, got {len(records)}")
        super().replace(records)


class LocationStore(ObservableStore[LocationFix]):
    """Holds the latest :class:`LocationFix`."""

    def latest(self) -> LocationFix | None:
        items = self.current()
        return items[-1] if items else None
