"""Payload and record models."""

from pycellwatch.models.cell import (
    CdmaCellInfo,
    CellInfo,
    CellInfoBase,
    CellRecord,
    CellTechnology,
    GsmCellInfo,
    LteCellInfo,
    NrCellInfo,
    TdscdmaCellInfo,
    UnknownCellInfo,
    WcdmaCellInfo,
    parse_cell_info,
)
from pycellwatch.models.location import LocationFix

__all__ = [
    "CdmaCellInfo",
    "CellInfo",
    "CellInfoBase",
    "CellRecord",
    "CellTechnology",
    "GsmCellInfo",
    "LocationFix",
    "LteCellInfo",
    "NrCellInfo",
    "TdscdmaCellInfo",
    "UnknownCellInfo",
    "WcdmaCellInfo",
    "parse_cell_info",
]
