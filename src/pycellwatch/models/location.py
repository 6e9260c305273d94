"""Location fix model."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, Field, field_validator

from pycellwatch.models._base import CellWatchBaseModel
from pycellwatch.normalize import safe_float, safe_int, safe_str


class LocationFix(CellWatchBaseModel):
    """A single position reported by the platform location service.

    Parameters
    ----------
    latitude : float
        Latitude in degrees.
    longitude : float
        Longitude in degrees.
    altitude : float or None
        Altitude in metres.
    accuracy : float or None
        Horizontal accuracy radius in metres.
    bearing : float or None
        Heading in degrees.
    speed : float or None
        Speed in m/s.
    provider : str or None
        Name of the provider that produced the fix (``gps``, ``network``).
    elapsed_ms : int or None
        Age of the fix in milliseconds.
    raw : dict
        Full payload dict.
    """

    latitude: float = Field(validation_alias=AliasChoices("latitude", "lat"))
    longitude: float = Field(validation_alias=AliasChoices("longitude", "lng", "lon"))
    altitude: float | None = None
    accuracy: float | None = None
    bearing: float | None = None
    speed: float | None = None
    provider: str | None = None
    elapsed_ms: int | None = Field(default=None, validation_alias=AliasChoices("elapsedMs", "elapsed_ms"))

    @field_validator("latitude", "longitude", "altitude", "accuracy", "bearing", "speed", mode="before")
    @classmethod
    def _coerce_floats(cls, value: Any) -> float | None:
        return safe_float(value)

    @field_validator("elapsed_ms", mode="before")
    @classmethod
    def _coerce_elapsed(cls, value: Any) -> int | None:
        return safe_int(value)

    @field_validator("provider", mode="before")
    @classmethod
    def _coerce_provider(cls, value: Any) -> str | None:
        return safe_str(value)
