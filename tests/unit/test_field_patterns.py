"""
Unit tests for pattern-based field extraction.

Tests cover:
- Recovery of every labelled field from sample report text
- Label variants and priority order within a group
- Optional unit suffixes; ratios and count labels not read as lengths
- Garbled captures leaving the field unset
- Pitch-area sweep (all matches, last value wins)
- PatternGroup.match_or_raise and PartialMeasurements helpers
"""

import re

import pytest

from roof_measurements.extraction.errors import PatternMissError
from roof_measurements.extraction.field_patterns import (
    FIELD_GROUPS,
    PartialMeasurements,
    PatternGroup,
    PatternRule,
    extract_fields,
    extract_pitch_areas,
)
from roof_measurements.utils.string_utils import parse_number


# ---------------------------------------------------------------------------
# TestExtractFields
# ---------------------------------------------------------------------------


class TestExtractFields:
    """Tests for extract_fields over a full sample report."""

    def test_sample_report_values(self, sample_report_text: str) -> None:
        partial = extract_fields(sample_report_text)

        assert partial.total_area == 2250.0
        assert partial.predominant_pitch == "6:12"
        assert partial.ridge_length == 112.0
        assert partial.hip_length == 42.0
        assert partial.valley_length == 28.0
        assert partial.rake_length == 86.0
        assert partial.eave_length == 154.0
        assert partial.step_flashing_length == 32.0
        assert partial.flashing_length == 20.0
        assert partial.drip_edge_length == 240.0
        assert partial.chimney_count == 1
        assert partial.skylight_count == 2
        assert partial.pipe_vent_count == 4
        assert partial.turbine_vent_count == 0
        assert partial.areas_by_pitch == {"6:12": 1875.0, "4:12": 375.0}

    def test_unlabelled_fields_stay_unset(self, sample_report_text: str) -> None:
        partial = extract_fields(sample_report_text)

        assert partial.ridge_count is None
        assert partial.step_flashing_count is None
        assert partial.penetrations_area is None
        assert partial.penetrations_perimeter is None

    def test_matched_fields_recorded(self, sample_report_text: str) -> None:
        partial = extract_fields(sample_report_text)
        assert "total_area" in partial.matched_fields
        assert "ridge_count" not in partial.matched_fields

    def test_empty_text(self) -> None:
        partial = extract_fields("")
        assert partial.is_empty
        assert partial.total_area is None

    def test_unrelated_text(self) -> None:
        assert extract_fields("Thank you for your order. Invoice #42").is_empty


# ---------------------------------------------------------------------------
# TestLabelVariants
# ---------------------------------------------------------------------------


class TestLabelVariants:
    """Tests for alternative labels of the same field."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("Total Area: 1,800 sq ft", 1800.0),
            ("Area Measured = 2,000.5 sq. ft.", 2000.5),
            ("Total Surface Area: 3100 square feet", 3100.0),
            ("Roof Area: 950 sqft", 950.0),
            ("Total Roof Square Footage: 2,400", 2400.0),
            ("total area 1500 SQ FT", 1500.0),
        ],
    )
    def test_total_area(self, text: str, expected: float) -> None:
        assert extract_fields(text).total_area == expected

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("Predominant Pitch: 8/12", "8:12"),
            ("Primary Pitch = 7:12", "7:12"),
            ("Pitch: 5", "5:12"),
            ("Roof Slope: 4/12", "4:12"),
        ],
    )
    def test_pitch(self, text: str, expected: str) -> None:
        assert extract_fields(text).predominant_pitch == expected

    def test_predominant_pitch_preferred(self) -> None:
        text = "Pitch: 4/12 Predominant Pitch: 9/12"
        assert extract_fields(text).predominant_pitch == "9:12"

    @pytest.mark.parametrize(
        "text",
        [
            "Ridge Length: 45 ft",
            "Total Ridge: 45 feet",
            "Ridge Line: 45'",
            "Ridges Total: 45 ft",
        ],
    )
    def test_ridge_length(self, text: str) -> None:
        assert extract_fields(text).ridge_length == 45.0

    def test_counts(self) -> None:
        text = "Ridge Count: 6 Number of Valleys: 3 Chimney Count: 2 Number of Skylights: 1"
        partial = extract_fields(text)

        assert partial.ridge_count == 6
        assert partial.valley_count == 3
        assert partial.chimney_count == 2
        assert partial.skylight_count == 1

    def test_turbine_vents_not_pipe_vents(self) -> None:
        partial = extract_fields("Turbine Vent Count: 2")
        assert partial.turbine_vent_count == 2
        assert partial.pipe_vent_count is None

    def test_pipe_vent_variants(self) -> None:
        assert extract_fields("Number of Pipe Vents: 5").pipe_vent_count == 5
        assert extract_fields("Vents: 3").pipe_vent_count == 3

    def test_step_flashing_not_flashing(self) -> None:
        partial = extract_fields("Step Flashing Length: 32 ft")
        assert partial.step_flashing_length == 32.0
        assert partial.flashing_length is None

    def test_penetration_totals(self) -> None:
        partial = extract_fields("Penetrations Area: 26 sq ft Penetrations Perimeter: 38 ft")
        assert partial.penetrations_area == 26.0
        assert partial.penetrations_perimeter == 38.0

    def test_unitless_values(self) -> None:
        partial = extract_fields("Roof Area: 2,500 Ridges: 100 Total Hip: 40 Valley Length: 30")

        assert partial.total_area == 2500.0
        assert partial.ridge_length == 100.0
        assert partial.hip_length == 40.0
        assert partial.valley_length == 30.0

    def test_unitless_total_area(self) -> None:
        assert extract_fields("Total Area: 2,250 Predominant Pitch: 6/12").total_area == 2250.0

    @pytest.mark.parametrize("text", ["Ridge Length: 45%", "Hip Length: 6/12", "Roof Area: 12:00"])
    def test_unitless_value_not_a_ratio(self, text: str) -> None:
        partial = extract_fields(text)

        assert partial.ridge_length is None
        assert partial.hip_length is None
        assert partial.total_area is None

    def test_count_label_not_a_length(self) -> None:
        partial = extract_fields("Number of Valleys: 3 Ridge Count: 6")

        assert partial.valley_count == 3
        assert partial.valley_length is None
        assert partial.ridge_length is None


# ---------------------------------------------------------------------------
# TestPitchAreaSweep
# ---------------------------------------------------------------------------


class TestPitchAreaSweep:
    """Tests for extract_pitch_areas."""

    def test_all_matches_collected(self) -> None:
        text = "6/12 pitch area: 1,500 sq ft 4:12 slope - 300 8/12 Pitch 200 sq ft"
        assert extract_pitch_areas(text) == {"6:12": 1500.0, "4:12": 300.0, "8:12": 200.0}

    def test_repeated_pitch_keeps_last(self) -> None:
        text = "6/12 Pitch Area: 100 sq ft 6:12 Pitch Area: 250 sq ft"
        assert extract_pitch_areas(text) == {"6:12": 250.0}

    def test_no_matches(self) -> None:
        assert extract_pitch_areas("Predominant Pitch: 6/12") == {}


# ---------------------------------------------------------------------------
# TestPatternGroup
# ---------------------------------------------------------------------------


class TestPatternGroup:
    """Tests for PatternGroup rule ordering and failure."""

    def _group(self) -> PatternGroup:
        return PatternGroup(
            "total_area",
            (
                PatternRule(re.compile(r"First[:\s]+([0-9,]+)", re.I), parse_number),
                PatternRule(re.compile(r"Second[:\s]+([0-9,]+)", re.I), parse_number),
            ),
        )

    def test_first_rule_wins(self) -> None:
        assert self._group().match("Second: 2 First: 1") == 1.0

    def test_garbled_capture_leaves_field_unset(self) -> None:
        assert self._group().match("First: ,,, Second: 2") is None

    def test_garbled_capture_raises_miss(self) -> None:
        with pytest.raises(PatternMissError):
            self._group().match_or_raise("First: ,,, Second: 2")

    def test_no_match_returns_none(self) -> None:
        assert self._group().match("nothing here") is None

    def test_match_or_raise(self) -> None:
        with pytest.raises(PatternMissError) as exc_info:
            self._group().match_or_raise("nothing here")
        assert exc_info.value.field_name == "total_area"

    def test_every_group_targets_a_field(self) -> None:
        names = set(PartialMeasurements.__dataclass_fields__)
        for group in FIELD_GROUPS:
            assert group.field_name in names
            assert group.rules


# ---------------------------------------------------------------------------
# TestPartialMeasurements
# ---------------------------------------------------------------------------


class TestPartialMeasurements:
    """Tests for PartialMeasurements helpers."""

    def test_copy_is_independent(self) -> None:
        partial = PartialMeasurements(areas_by_pitch={"6:12": 100.0})
        clone = partial.copy()
        clone.areas_by_pitch["4:12"] = 50.0
        assert partial.areas_by_pitch == {"6:12": 100.0}

    def test_to_record_zero_fills(self) -> None:
        record = PartialMeasurements(ridge_length=20.0).to_record()
        assert record.ridge_length == 20.0
        assert record.hip_length == 0.0
        assert record.chimney_count == 0
        assert record.predominant_pitch == "6:12"
