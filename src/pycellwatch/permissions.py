"""Permission gate.

Every data collection path is gated on platform permissions. The gate
checks the current grants, prompts for the missing ones through a
:class:`PermissionProvider` and waits for the provider to report the
user's answer through its callback.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

from pycellwatch._constants import REQUEST_PERMISSION_CODE

_logger = logging.getLogger(__name__)

_ANDROID_PREFIX = "android.permission."


class PermissionKind(StrEnum):
    ACCESS_FINE_LOCATION = "android.permission.ACCESS_FINE_LOCATION"
    ACCESS_COARSE_LOCATION = "android.permission.ACCESS_COARSE_LOCATION"
    READ_PHONE_STATE = "android.permission.READ_PHONE_STATE"

    @classmethod
    def parse(cls, name: str) -> PermissionKind:
        """Resolve a full Android permission name or its bare constant."""
        text = name.strip()
        if not text.startswith(_ANDROID_PREFIX):
            text = _ANDROID_PREFIX + text.upper()
        return cls(text)


class PermissionResult(StrEnum):
    GRANTED = "granted"
    DENIED = "denied"


#: Permissions prompted for when the watcher starts.
STARTUP_PERMISSIONS: frozenset[PermissionKind] = frozenset(
    {PermissionKind.ACCESS_FINE_LOCATION, PermissionKind.READ_PHONE_STATE}
)

#: Permissions that must all be held for a cell-info query.
CELL_INFO_PERMISSIONS: frozenset[PermissionKind] = frozenset(
    {
        PermissionKind.ACCESS_FINE_LOCATION,
        PermissionKind.ACCESS_COARSE_LOCATION,
        PermissionKind.READ_PHONE_STATE,
    }
)

#: A location query needs either of these.
LOCATION_PERMISSIONS: frozenset[PermissionKind] = frozenset(
    {PermissionKind.ACCESS_FINE_LOCATION, PermissionKind.ACCESS_COARSE_LOCATION}
)

OnPermissionResult = Callable[[int, Sequence[PermissionKind], Sequence[bool]], None]


class PermissionProvider(Protocol):
    """Platform permission boundary.

    ``request_permissions`` must not block: the provider shows its prompt
    and later calls ``on_result(request_code, permissions, grant_results)``
    on the event loop thread.
    """

    def check_self_permission(self, kind: PermissionKind) -> bool: ...

    def request_permissions(
        self,
        kinds: Sequence[PermissionKind],
        request_code: int,
        on_result: OnPermissionResult,
    ) -> None: ...


class StaticPermissionProvider:
    """Provider with a fixed, in-process grant set.

    Used where the OS grants are held by another process (the Termux:API
    app or a companion app on the phone) and in tests.
    """

    def __init__(
        self,
        granted: Iterable[PermissionKind] = tuple(PermissionKind),
        *,
        grant_on_request: bool = False,
    ) -> None:
        self._granted: set[PermissionKind] = set(granted)
        self._grant_on_request = grant_on_request
        self.request_count = 0

    def grant(self, kind: PermissionKind) -> None:
        self._granted.add(kind)

    def revoke(self, kind: PermissionKind) -> None:
        self._granted.discard(kind)

    def check_self_permission(self, kind: PermissionKind) -> bool:
        return kind in self._granted

    def request_permissions(
        self,
        kinds: Sequence[PermissionKind],
        request_code: int,
        on_result: OnPermissionResult,
    ) -> None:
        self.request_count += 1
        results: list[bool] = []
        for kind in kinds:
            if self._grant_on_request:
                self._granted.add(kind)
            results.append(kind in self._granted)
        asyncio.get_running_loop().call_soon(on_result, request_code, tuple(kinds), tuple(results))


@dataclass(slots=True)
class _PendingRequest:
    kinds: tuple[PermissionKind, ...]
    future: asyncio.Future[PermissionResult]


class PermissionGate:
    """Check and request permissions before data collection starts.

    Usage::

        gate = PermissionGate(provider)
        if await gate.ensure_permissions(STARTUP_PERMISSIONS) is PermissionResult.GRANTED:
            ...
    """

    def __init__(
        self,
        provider: PermissionProvider,
        *,
        request_code: int = REQUEST_PERMISSION_CODE,
        timeout: float | None = None,
    ) -> None:
        self._provider = provider
        self._request_code = request_code
        self._timeout = timeout
        self._pending: dict[int, _PendingRequest] = {}

    @property
    def provider(self) -> PermissionProvider:
        return self._provider

    def missing(self, kinds: Iterable[PermissionKind]) -> tuple[PermissionKind, ...]:
        """Return the kinds not currently granted, in declaration order."""
        wanted = set(kinds)
        return tuple(
            kind for kind in PermissionKind if kind in wanted and not self._provider.check_self_permission(kind)
        )

    def is_granted(self, kinds: Iterable[PermissionKind]) -> bool:
        """Re-check current grants without prompting."""
        return not self.missing(kinds)

    def is_any_granted(self, kinds: Iterable[PermissionKind]) -> bool:
        return any(self._provider.check_self_permission(kind) for kind in kinds)

    def _next_request_code(self) -> int:
        code = self._request_code
        while code in self._pending:
            code += 1
        return code

    async def ensure_permissions(self, required: Iterable[PermissionKind]) -> PermissionResult:
        """Prompt for any missing permission in *required*.

        Returns :attr:`PermissionResult.GRANTED` only when every missing
        permission was accepted. A denial is final for this call; the
        gate does not retry.
        """
        missing = self.missing(required)
        if not missing:
            return PermissionResult.GRANTED

        loop = asyncio.get_running_loop()
        code = self._next_request_code()
        future: asyncio.Future[PermissionResult] = loop.create_future()
        self._pending[code] = _PendingRequest(kinds=missing, future=future)
        _logger.debug("Requesting permissions %s (request_code=%s)", [str(k) for k in missing], code)

        try:
            self._provider.request_permissions(missing, code, self.on_request_permissions_result)
            if self._timeout is None:
                result = await future
            else:
                try:
                    result = await asyncio.wait_for(future, self._timeout)
                except TimeoutError:
                    _logger.debug("Permission request %s timed out after %.1fs", code, self._timeout)
                    result = PermissionResult.DENIED
        finally:
            self._pending.pop(code, None)

        if result is PermissionResult.DENIED:
            _logger.warning("Permissions not granted by the user.")
        return result

    def on_request_permissions_result(
        self,
        request_code: int,
        permissions: Sequence[PermissionKind],
        grant_results: Sequence[bool],
    ) -> None:
        """Provider callback: resolve the pending request for *request_code*."""
        pending = self._pending.get(request_code)
        if pending is None or pending.future.done():
            _logger.debug("Ignoring permission result for unknown request_code=%s", request_code)
            return

        granted = bool(grant_results) and all(grant_results)
        if granted:
            pending.future.set_result(PermissionResult.GRANTED)
            return

        denied = [str(kind) for kind, ok in zip(permissions, grant_results, strict=False) if not ok]
        _logger.debug("Permission request %s denied: %s", request_code, denied or "no results")
        pending.future.set_result(PermissionResult.DENIED)
