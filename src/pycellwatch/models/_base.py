"""Base model for platform service payloads.

Every payload model inherits from :class:`CellWatchBaseModel` which
provides:

* ``alias_generator=to_camel`` so camelCase keys (Android field names)
  map to snake_case fields, while snake_case keys (Termux:API) are still
  accepted through ``populate_by_name``.
* A ``model_validator(mode="before")`` that strips placeholder values
  (``""``, ``None``, NaN) so the field default is used.
* A ``raw`` dict that captures the original payload.
"""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

# Strings the platform services use for "not available".
_SENTINELS = frozenset({"", "--", "NaN", "nan"})


class CellWatchBaseModel(BaseModel):
    """Base for platform payload models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    raw: dict[str, Any] = Field(default_factory=dict)
    """Original payload dict."""

    @staticmethod
    def _clean_dict(values: dict[str, Any]) -> dict[str, Any]:
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, str) and value.strip() in _SENTINELS:
                continue
            if isinstance(value, float) and math.isnan(value):
                continue
            cleaned[key] = value
        return cleaned

    @model_validator(mode="before")
    @classmethod
    def _clean_platform_values(cls, values: Any) -> Any:
        """Strip placeholder values and stash the raw payload."""
        if not isinstance(values, dict):
            return values
        original = dict(values)
        cleaned = CellWatchBaseModel._clean_dict(original)

        # Keep an explicit raw= from keyword construction.
        if "raw" not in values:
            cleaned["raw"] = original
        return cleaned
