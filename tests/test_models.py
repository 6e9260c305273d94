"""Tests for cell and location payload models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from pycellwatch._constants import CELL_INFO_UNAVAILABLE
from pycellwatch.exceptions import MalformedRecordError
from pycellwatch.models.cell import (
    CdmaCellInfo,
    CellRecord,
    CellTechnology,
    GsmCellInfo,
    LteCellInfo,
    NrCellInfo,
    UnknownCellInfo,
    parse_cell_info,
)
from pycellwatch.models.location import LocationFix

# ------------------------------------------------------------------
# CellTechnology
# ------------------------------------------------------------------


class TestCellTechnology:
    def test_known_value(self) -> None:
        assert CellTechnology("lte") is CellTechnology.LTE

    def test_upper_case_and_android_class_names(self) -> None:
        assert CellTechnology("LTE") is CellTechnology.LTE
        assert CellTechnology("CellInfoNr") is CellTechnology.NR
        assert CellTechnology("CellInfoWcdma") is CellTechnology.WCDMA

    def test_unknown_value_falls_back(self) -> None:
        assert CellTechnology("satellite") is CellTechnology.UNKNOWN


# ------------------------------------------------------------------
# parse_cell_info
# ------------------------------------------------------------------


class TestLteCellInfo:
    def test_termux_payload(self) -> None:
        payload = {
            "type": "lte",
            "registered": True,
            "asu": 38,
            "dbm": -102,
            "level": 2,
            "timing_advance": 3,
            "ci": 100,
            "pci": 212,
            "tac": 5,
            "mcc": 310,
            "mnc": 410,
        }
        info = parse_cell_info(payload)

        assert isinstance(info, LteCellInfo)
        assert info.technology is CellTechnology.LTE
        assert info.registered is True
        assert info.timing_advance == 3
        assert info.raw == payload
        assert info.to_record() == CellRecord(ci=100, tac=5, mcc="310", mnc="410")

    def test_android_field_names(self) -> None:
        info = parse_cell_info(
            {"type": "CellInfoLte", "ci": 7, "tac": 8, "mccString": "262", "mncString": "01", "timingAdvance": 1}
        )

        assert isinstance(info, LteCellInfo)
        assert info.mnc == "01"
        assert info.timing_advance == 1

    def test_unavailable_values_normalised(self) -> None:
        info = parse_cell_info(
            {
                "type": "lte",
                "ci": CELL_INFO_UNAVAILABLE,
                "tac": CELL_INFO_UNAVAILABLE,
                "dbm": CELL_INFO_UNAVAILABLE,
                "mcc": "",
                "mnc": None,
            }
        )

        assert isinstance(info, LteCellInfo)
        assert info.ci is None
        assert info.dbm is None
        assert info.mcc is None
        assert info.mnc is None

        record = info.to_record()
        assert record.ci == CELL_INFO_UNAVAILABLE
        assert record.tac == CELL_INFO_UNAVAILABLE
        assert record.mcc is None

    def test_numeric_strings_coerced(self) -> None:
        info = parse_cell_info({"type": "lte", "ci": "123", "tac": "45.0", "mcc": " 234 ", "mnc": "15"})

        assert isinstance(info, LteCellInfo)
        assert info.ci == 123
        assert info.tac == 45
        assert info.mcc == "234"


class TestOtherTechnologies:
    def test_gsm_uses_cid_and_lac(self) -> None:
        info = parse_cell_info({"type": "gsm", "cid": 7, "lac": 9, "mcc": "234", "mnc": "15", "bsic": 3})

        assert isinstance(info, GsmCellInfo)
        assert info.to_record() == CellRecord(ci=7, tac=9, mcc="234", mnc="15")

    def test_nr_uses_nci(self) -> None:
        info = parse_cell_info({"type": "nr", "nci": 68719476735 - 1, "tac": 11, "mcc": "310", "mnc": "260"})

        assert isinstance(info, NrCellInfo)
        record = info.to_record()
        assert record.ci == 68719476734
        assert record.tac == 11

    def test_cdma_has_no_record(self) -> None:
        info = parse_cell_info({"type": "cdma", "basestation": 1, "network": 2, "system": 3})

        assert isinstance(info, CdmaCellInfo)
        assert info.to_record() is None

    def test_unknown_tag(self) -> None:
        info = parse_cell_info({"type": "satellite", "ci": 1})

        assert isinstance(info, UnknownCellInfo)
        assert info.technology is CellTechnology.UNKNOWN
        assert info.tag == "satellite"
        assert info.to_record() is None

    def test_missing_tag(self) -> None:
        info = parse_cell_info({"ci": 1, "tac": 2})

        assert isinstance(info, UnknownCellInfo)
        assert info.tag is None


class TestMalformedRecords:
    def test_non_mapping(self) -> None:
        with pytest.raises(MalformedRecordError):
            parse_cell_info("lte")

    def test_validation_failure(self) -> None:
        with pytest.raises(MalformedRecordError) as exc_info:
            parse_cell_info({"type": "lte", "registered": "maybe"})
        assert "lte" in str(exc_info.value)


# ------------------------------------------------------------------
# CellRecord / LocationFix
# ------------------------------------------------------------------


def test_cell_record_is_frozen_value() -> None:
    record = CellRecord(ci=100, tac=5, mcc="310", mnc="410")

    assert record == CellRecord(ci=100, tac=5, mcc="310", mnc="410")
    with pytest.raises(ValidationError):
        record.ci = 1  # type: ignore[misc]


def test_location_fix_termux_payload() -> None:
    fix = LocationFix.model_validate(
        {
            "latitude": "52.1",
            "longitude": 4.3,
            "altitude": 12.0,
            "accuracy": 14.5,
            "bearing": 0.0,
            "speed": 0.0,
            "elapsedMs": 120,
            "provider": "gps",
        }
    )

    assert fix.latitude == 52.1
    assert fix.longitude == 4.3
    assert fix.elapsed_ms == 120
    assert fix.provider == "gps"


def test_location_fix_short_keys() -> None:
    fix = LocationFix.model_validate({"lat": 1.5, "lng": 2.5})

    assert fix.latitude == 1.5
    assert fix.longitude == 2.5
    assert fix.accuracy is None


def test_location_fix_requires_coordinates() -> None:
    with pytest.raises(ValidationError):
        LocationFix.model_validate({"accuracy": 3.0})
