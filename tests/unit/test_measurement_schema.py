"""
Unit tests for the measurement record schema.

Tests cover:
- Defaults, aliases and immutability
- Validation of pitch and areas_by_pitch
- Lenient payload coercion (from_payload)
- Derived helpers (total_squares, pitch_breakdown, zero_field_ratio)
- MeasurementOutcome provenance and serialization
"""

import pytest
from pydantic import ValidationError

from roof_measurements.schemas.measurement import (
    ExtractionStrategy,
    MeasurementOutcome,
    MeasurementRecord,
    Provenance,
)


# ---------------------------------------------------------------------------
# TestMeasurementRecord
# ---------------------------------------------------------------------------


class TestMeasurementRecord:
    """Tests for MeasurementRecord construction and validation."""

    def test_defaults(self) -> None:
        record = MeasurementRecord()
        assert record.total_area == 0.0
        assert record.predominant_pitch == "6:12"
        assert record.areas_by_pitch == {}

    def test_accepts_camel_and_snake_case(self) -> None:
        assert MeasurementRecord(totalArea=100).total_area == 100.0
        assert MeasurementRecord(total_area=100).total_area == 100.0

    def test_frozen(self) -> None:
        record = MeasurementRecord()
        with pytest.raises(ValidationError):
            record.total_area = 5.0  # type: ignore[misc]

    def test_negative_rejected(self) -> None:
        with pytest.raises(ValidationError):
            MeasurementRecord(ridge_length=-1)

    def test_pitch_normalized(self) -> None:
        assert MeasurementRecord(predominant_pitch="7/12").predominant_pitch == "7:12"

    def test_invalid_pitch_rejected(self) -> None:
        with pytest.raises(ValidationError):
            MeasurementRecord(predominant_pitch="steep")

    def test_areas_by_pitch_keys_normalized(self) -> None:
        record = MeasurementRecord(areas_by_pitch={"6/12": "1,200"})
        assert record.areas_by_pitch == {"6:12": 1200.0}


# ---------------------------------------------------------------------------
# TestFromPayload
# ---------------------------------------------------------------------------


class TestFromPayload:
    """Tests for MeasurementRecord.from_payload."""

    def test_full_payload(self) -> None:
        record = MeasurementRecord.from_payload(
            {
                "totalArea": 2250,
                "predominantPitch": "6/12",
                "ridgeLength": "112",
                "ridgeCount": 6,
                "chimneyCount": 1,
                "areasByPitch": {"6:12": 1875, "4:12": 375},
            }
        )
        assert record.total_area == 2250.0
        assert record.predominant_pitch == "6:12"
        assert record.ridge_length == 112.0
        assert record.ridge_count == 6
        assert record.areas_by_pitch == {"6:12": 1875.0, "4:12": 375.0}

    def test_missing_and_garbled_values_zeroed(self) -> None:
        record = MeasurementRecord.from_payload(
            {"totalArea": "N/A", "hipLength": None, "valleyCount": -3, "eaveLength": "lots"}
        )
        assert record.total_area == 0.0
        assert record.hip_length == 0.0
        assert record.valley_count == 0
        assert record.eave_length == 0.0

    def test_unusable_pitch_defaults(self) -> None:
        assert MeasurementRecord.from_payload({"predominantPitch": "N/A"}).predominant_pitch == "6:12"

    @pytest.mark.parametrize("pitch", [100, 0.00001, 12.5e3])
    def test_out_of_range_numeric_pitch_defaults(self, pitch) -> None:
        assert MeasurementRecord.from_payload({"predominantPitch": pitch}).predominant_pitch == "6:12"

    def test_out_of_range_numeric_pitch_keys_skipped(self) -> None:
        record = MeasurementRecord.from_payload(
            {"areasByPitch": [{"pitch": 100, "area": 50}, {"pitch": 8, "area": 900}]}
        )
        assert record.areas_by_pitch == {"8:12": 900.0}

    def test_areas_by_pitch_as_list(self) -> None:
        record = MeasurementRecord.from_payload(
            {"areasByPitch": [{"pitch": "8/12", "area": 900}, {"pitch": "bad", "area": 1}]}
        )
        assert record.areas_by_pitch == {"8:12": 900.0}

    def test_no_derivation(self) -> None:
        record = MeasurementRecord.from_payload({"ridgeLength": 100, "chimneyCount": 2})
        assert record.ridge_count == 0
        assert record.penetrations_area == 0.0

    def test_snake_case_keys(self) -> None:
        assert MeasurementRecord.from_payload({"pipe_vent_count": 3}).pipe_vent_count == 3


# ---------------------------------------------------------------------------
# TestDerivedHelpers
# ---------------------------------------------------------------------------


class TestDerivedHelpers:
    """Tests for computed helpers."""

    def test_total_squares_rounds_up(self) -> None:
        assert MeasurementRecord(total_area=2250).total_squares == 23
        assert MeasurementRecord(total_area=2200).total_squares == 22

    def test_pitch_breakdown(self) -> None:
        record = MeasurementRecord(
            total_area=2000,
            areas_by_pitch={"4:12": 500, "6:12": 1500},
        )
        breakdown = record.pitch_breakdown()

        assert [entry.pitch for entry in breakdown] == ["6:12", "4:12"]
        assert breakdown[0].percentage == 75.0
        assert breakdown[1].to_dict() == {"pitch": "4:12", "area": 500.0, "percentage": 25.0}

    def test_pitch_breakdown_zero_total(self) -> None:
        record = MeasurementRecord(areas_by_pitch={"6:12": 10})
        assert record.pitch_breakdown()[0].percentage == 0.0

    def test_zero_field_ratio(self) -> None:
        assert MeasurementRecord().zero_field_ratio() == 1.0
        assert MeasurementRecord(total_area=10).zero_field_ratio() < 1.0

    def test_payload_camel_case(self) -> None:
        payload = MeasurementRecord(total_area=250, step_flashing_length=8).to_payload()

        assert payload["totalArea"] == 250.0
        assert payload["stepFlashingLength"] == 8.0
        assert payload["totalSquares"] == 3
        assert "total_area" not in payload


# ---------------------------------------------------------------------------
# TestMeasurementOutcome
# ---------------------------------------------------------------------------


class TestMeasurementOutcome:
    """Tests for MeasurementOutcome."""

    def test_authentic(self) -> None:
        outcome = MeasurementOutcome.authentic_record(
            MeasurementRecord(total_area=100),
            ExtractionStrategy.TEXT_PATTERN,
            note="ok",
        )
        assert outcome.authentic is True
        assert outcome.simulated is False
        assert outcome.provenance == Provenance.AUTHENTIC
        assert outcome.diagnostic is None

    def test_simulated(self) -> None:
        outcome = MeasurementOutcome.simulated_record(MeasurementRecord(), diagnostic="boom")
        assert outcome.authentic is False
        assert outcome.strategy == ExtractionStrategy.SIMULATED
        assert outcome.diagnostic == "boom"
        assert outcome.note

    def test_to_dict(self) -> None:
        outcome = MeasurementOutcome.simulated_record(MeasurementRecord(), diagnostic="boom")
        data = outcome.to_dict()

        assert set(data) == {"measurements", "authentic", "note", "diagnostic", "strategy"}
        assert data["authentic"] is False
        assert data["strategy"] == "simulated"
        assert data["measurements"]["predominantPitch"] == "6:12"
