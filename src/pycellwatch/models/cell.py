"""Cell-tower records.

Raw radio reports are modelled as one variant per cell technology,
selected by :class:`CellTechnology`. :class:`CellRecord` is the identity
extracted from a variant and published to the store.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import Any, ClassVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from pycellwatch._constants import CELL_INFO_UNAVAILABLE
from pycellwatch.exceptions import MalformedRecordError
from pycellwatch.models._base import CellWatchBaseModel
from pycellwatch.normalize import safe_code, safe_identity, safe_int

# Keys that may carry the technology tag, in lookup order.
_TECHNOLOGY_KEYS: tuple[str, ...] = ("type", "technology", "cellType", "rat")


class CellTechnology(StrEnum):
    LTE = "lte"
    GSM = "gsm"
    WCDMA = "wcdma"
    TDSCDMA = "tdscdma"
    CDMA = "cdma"
    NR = "nr"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value: object) -> CellTechnology:
        if isinstance(value, str):
            text = value.strip().lower()
            # Android class names (CellInfoLte) and upper-case radio names (LTE).
            text = text.removeprefix("cellinfo")
            for member in cls:
                if member.value == text:
                    return member
        return cls.UNKNOWN


class CellRecord(BaseModel):
    """Identity of one visible cell tower.

    Parameters
    ----------
    ci : int
        Cell identifier.
    tac : int
        Tracking area code.
    mcc : str or None
        Mobile country code.
    mnc : str or None
        Mobile network code.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    ci: int
    tac: int
    mcc: str | None = None
    mnc: str | None = None


class CellInfoBase(CellWatchBaseModel):
    """Fields shared by every technology variant."""

    technology: ClassVar[CellTechnology] = CellTechnology.UNKNOWN

    registered: bool | None = None
    asu: int | None = None
    dbm: int | None = None
    level: int | None = None

    @field_validator("asu", "dbm", "level", mode="before")
    @classmethod
    def _coerce_signal(cls, value: Any) -> int | None:
        parsed = safe_int(value)
        if parsed is None or parsed == CELL_INFO_UNAVAILABLE:
            return None
        return parsed

    def to_record(self) -> CellRecord | None:
        """Extract the tower identity, or ``None`` for technologies without one."""
        return None


class _PlmnCellInfo(CellInfoBase):
    """Variants broadcasting a PLMN (country + network code)."""

    mcc: str | None = Field(default=None, validation_alias=AliasChoices("mcc", "mccString", "mcc_string"))
    mnc: str | None = Field(default=None, validation_alias=AliasChoices("mnc", "mncString", "mnc_string"))

    @field_validator("mcc", "mnc", mode="before")
    @classmethod
    def _coerce_code(cls, value: Any) -> str | None:
        return safe_code(value)


class LteCellInfo(_PlmnCellInfo):
    technology: ClassVar[CellTechnology] = CellTechnology.LTE

    ci: int | None = None
    tac: int | None = None
    pci: int | None = None
    earfcn: int | None = None
    timing_advance: int | None = None

    @field_validator("ci", "tac", "pci", "earfcn", "timing_advance", mode="before")
    @classmethod
    def _coerce_identity(cls, value: Any) -> int | None:
        return safe_identity(value)

    def to_record(self) -> CellRecord:
        return CellRecord(
            ci=CELL_INFO_UNAVAILABLE if self.ci is None else self.ci,
            tac=CELL_INFO_UNAVAILABLE if self.tac is None else self.tac,
            mcc=self.mcc,
            mnc=self.mnc,
        )


class NrCellInfo(_PlmnCellInfo):
    technology: ClassVar[CellTechnology] = CellTechnology.NR

    nci: int | None = None
    tac: int | None = None
    pci: int | None = None
    nrarfcn: int | None = None

    @field_validator("nci", "tac", "pci", "nrarfcn", mode="before")
    @classmethod
    def _coerce_identity(cls, value: Any) -> int | None:
        return safe_identity(value)

    def to_record(self) -> CellRecord:
        return CellRecord(
            ci=CELL_INFO_UNAVAILABLE if self.nci is None else self.nci,
            tac=CELL_INFO_UNAVAILABLE if self.tac is None else self.tac,
            mcc=self.mcc,
            mnc=self.mnc,
        )


class _LacCellInfo(_PlmnCellInfo):
    """2G/3G variants: cell id within a location area."""

    cid: int | None = None
    lac: int | None = None

    @field_validator("cid", "lac", mode="before")
    @classmethod
    def _coerce_identity(cls, value: Any) -> int | None:
        return safe_identity(value)

    def to_record(self) -> CellRecord:
        # The location area code plays the tracking area's role here.
        return CellRecord(
            ci=CELL_INFO_UNAVAILABLE if self.cid is None else self.cid,
            tac=CELL_INFO_UNAVAILABLE if self.lac is None else self.lac,
            mcc=self.mcc,
            mnc=self.mnc,
        )


class GsmCellInfo(_LacCellInfo):
    technology: ClassVar[CellTechnology] = CellTechnology.GSM

    arfcn: int | None = None
    bsic: int | None = None

    @field_validator("arfcn", "bsic", mode="before")
    @classmethod
    def _coerce_radio(cls, value: Any) -> int | None:
        return safe_identity(value)


class WcdmaCellInfo(_LacCellInfo):
    technology: ClassVar[CellTechnology] = CellTechnology.WCDMA

    psc: int | None = None
    uarfcn: int | None = None

    @field_validator("psc", "uarfcn", mode="before")
    @classmethod
    def _coerce_radio(cls, value: Any) -> int | None:
        return safe_identity(value)


class TdscdmaCellInfo(_LacCellInfo):
    technology: ClassVar[CellTechnology] = CellTechnology.TDSCDMA

    cpid: int | None = None
    uarfcn: int | None = None

    @field_validator("cpid", "uarfcn", mode="before")
    @classmethod
    def _coerce_radio(cls, value: Any) -> int | None:
        return safe_identity(value)


class CdmaCellInfo(CellInfoBase):
    technology: ClassVar[CellTechnology] = CellTechnology.CDMA

    basestation: int | None = Field(default=None, validation_alias=AliasChoices("basestation", "basestationId"))
    network: int | None = Field(default=None, validation_alias=AliasChoices("network", "networkId"))
    system: int | None = Field(default=None, validation_alias=AliasChoices("system", "systemId"))

    @field_validator("basestation", "network", "system", mode="before")
    @classmethod
    def _coerce_identity(cls, value: Any) -> int | None:
        return safe_identity(value)


class UnknownCellInfo(CellInfoBase):
    """A record whose technology tag is missing or not recognised."""

    tag: str | None = Field(default=None, validation_alias=AliasChoices(*_TECHNOLOGY_KEYS))


CellInfo = (
    LteCellInfo | NrCellInfo | GsmCellInfo | WcdmaCellInfo | TdscdmaCellInfo | CdmaCellInfo | UnknownCellInfo
)

_VARIANTS: dict[CellTechnology, type[CellInfoBase]] = {
    CellTechnology.LTE: LteCellInfo,
    CellTechnology.NR: NrCellInfo,
    CellTechnology.GSM: GsmCellInfo,
    CellTechnology.WCDMA: WcdmaCellInfo,
    CellTechnology.TDSCDMA: TdscdmaCellInfo,
    CellTechnology.CDMA: CdmaCellInfo,
    CellTechnology.UNKNOWN: UnknownCellInfo,
}


def technology_of(payload: Mapping[str, Any]) -> CellTechnology:
    """Read the technology tag of a raw record."""
    for key in _TECHNOLOGY_KEYS:
        value = payload.get(key)
        if value is not None:
            return CellTechnology(str(value))
    return CellTechnology.UNKNOWN


def parse_cell_info(payload: Any) -> CellInfo:
    """Validate one raw record into its technology variant.

    Raises :class:`MalformedRecordError` when *payload* is not a mapping
    or fails validation.
    """
    if not isinstance(payload, Mapping):
        raise MalformedRecordError(f"Cell record is not an object: {type(payload).__name__}")
    model_cls = _VARIANTS[technology_of(payload)]
    try:
        info: CellInfo = model_cls.model_validate(dict(payload))  # type: ignore[assignment]
    except ValidationError as exc:
        raise MalformedRecordError(f"Invalid {model_cls.technology} cell record: {exc}") from exc
    return info
