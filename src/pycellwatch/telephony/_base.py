"""Platform service interfaces shared by the telephony backends."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Protocol

from pydantic import ValidationError

from pycellwatch._redact import redact_for_log
from pycellwatch.exceptions import LocationQueryError, TelephonyQueryError
from pycellwatch.models.location import LocationFix


class TelephonyService(Protocol):
    """Structural interface of the radio query used by the cell poller.

    ``get_all_cell_info`` returns the raw records of every visible tower.
    ``None`` or an empty list means no data this cycle; failures raise
    :class:`TelephonyQueryError`.
    """

    async def get_all_cell_info(self) -> list[Any] | None: ...


class LocationService(Protocol):
    """Structural interface of the location query used by the location poller."""

    async def get_current_location(self) -> LocationFix: ...


def debug_payload(logger: logging.Logger, label: str, payload: Any, *, sensitive: bool) -> None:
    """Log a raw payload at DEBUG, redacted unless *sensitive* logging is enabled."""
    if not logger.isEnabledFor(logging.DEBUG):
        return
    logger.debug("%s: %s", label, payload if sensitive else redact_for_log(payload))


# Termux:API reports plugin failures as {"API_ERROR": "..."}.
_ERROR_KEYS: tuple[str, ...] = ("error", "API_ERROR")


def _reported_error(decoded: Mapping[str, Any]) -> Any:
    for key in _ERROR_KEYS:
        if key in decoded:
            return decoded[key]
    return None


def coerce_cell_list(decoded: Any, *, source: str) -> list[Any]:
    """Accept a bare list or a ``{"cells": [...]}`` envelope."""
    if decoded is None:
        return []
    if isinstance(decoded, list):
        return decoded
    if isinstance(decoded, Mapping):
        error = _reported_error(decoded)
        if error is not None:
            raise TelephonyQueryError(f"{source} reported an error: {error}", source=source)
        cells = decoded.get("cells")
        if cells is None:
            return []
        if isinstance(cells, list):
            return cells
    raise TelephonyQueryError(f"Unexpected cell info payload from {source}: {type(decoded).__name__}", source=source)


def coerce_location(decoded: Any, *, source: str) -> LocationFix:
    """Validate a location payload, raising :class:`LocationQueryError` when there is no usable fix."""
    if not isinstance(decoded, Mapping) or not decoded:
        raise LocationQueryError(f"No location fix from {source}", source=source)
    error = _reported_error(decoded)
    if error is not None:
        raise LocationQueryError(f"{source} reported an error: {error}", source=source)
    try:
        return LocationFix.model_validate(dict(decoded))
    except ValidationError as exc:
        raise LocationQueryError(f"Invalid location fix from {source}: {exc}", source=source) from exc
