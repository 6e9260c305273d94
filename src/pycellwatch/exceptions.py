"""Custom exception hierarchy for pycellwatch."""

from __future__ import annotations


class CellWatchError(Exception):
    """Base exception for all pycellwatch errors."""


class CellWatchConfigError(CellWatchError):
    """Invalid or missing configuration."""


class PermissionDeniedError(CellWatchError):
    """The user did not grant every required permission.

    Data collection does not start for the session. The gate does not
    retry; a new prompt needs an explicit new call.
    """

    def __init__(self, message: str, *, missing: frozenset[str] = frozenset()) -> None:
        self.missing = missing
        super().__init__(message)


class TelephonyQueryError(CellWatchError):
    """The platform telephony service could not be queried.

    Covers command failures (non-zero exit, timeout, missing executable),
    HTTP failures (network, non-200) and unparseable replies.
    """

    def __init__(
        self,
        message: str,
        *,
        source: str = "",
        status_code: int | None = None,
        returncode: int | None = None,
    ) -> None:
        self.source = source
        self.status_code = status_code
        self.returncode = returncode
        super().__init__(message)


class LocationQueryError(TelephonyQueryError):
    """The platform location service could not provide a fix."""


class MalformedRecordError(CellWatchError):
    """A raw cell record could not be validated."""
