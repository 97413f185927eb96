"""
Measurement record schema and extraction outcome types.

MeasurementRecord is the canonical, fully-populated set of roof facts
handed to downstream pricing. MeasurementOutcome wraps a record with its
provenance so callers can always tell an authentic extraction from a
simulated stand-in.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from roof_measurements.extraction.constants import (
    DEFAULT_PREDOMINANT_PITCH,
    SQUARE_FEET_PER_SQUARE,
)
from roof_measurements.utils.string_utils import normalize_pitch, parse_count, parse_number


class Provenance(str, Enum):
    """Where a measurement record came from."""

    AUTHENTIC = "authentic"
    SIMULATED = "simulated"


class ExtractionStrategy(str, Enum):
    """Strategy that produced a measurement record."""

    VISION = "vision"
    TEXT_PATTERN = "text_pattern"
    SIMULATED = "simulated"


@dataclass(frozen=True, slots=True)
class PitchArea:
    """
    Area share of a single roof pitch.

    Attributes:
        pitch: Pitch in "N:12" form.
        area: Area in square feet at this pitch.
        percentage: Share of the total roof area (0-100).
    """

    pitch: str
    area: float
    percentage: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "pitch": self.pitch,
            "area": self.area,
            "percentage": self.percentage,
        }


class MeasurementRecord(BaseModel):
    """
    Complete set of roof measurements for one report.

    Every field is always populated; absent facts are zero (or the
    default pitch). Attribute names are snake_case, serialized names are
    camelCase and either is accepted on input.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )

    total_area: float = Field(0.0, ge=0, description="Total roof area in sq ft")
    predominant_pitch: str = Field(
        DEFAULT_PREDOMINANT_PITCH,
        description="Most common roof pitch in N:12 form",
    )

    ridge_length: float = Field(0.0, ge=0)
    hip_length: float = Field(0.0, ge=0)
    valley_length: float = Field(0.0, ge=0)
    rake_length: float = Field(0.0, ge=0)
    eave_length: float = Field(0.0, ge=0)
    step_flashing_length: float = Field(0.0, ge=0)
    flashing_length: float = Field(0.0, ge=0)
    drip_edge_length: float = Field(0.0, ge=0)

    ridge_count: int = Field(0, ge=0)
    hip_count: int = Field(0, ge=0)
    valley_count: int = Field(0, ge=0)
    rake_count: int = Field(0, ge=0)
    eave_count: int = Field(0, ge=0)
    step_flashing_count: int = Field(0, ge=0)

    chimney_count: int = Field(0, ge=0)
    skylight_count: int = Field(0, ge=0)
    turbine_vent_count: int = Field(0, ge=0)
    pipe_vent_count: int = Field(0, ge=0)

    penetrations_area: float = Field(0.0, ge=0)
    penetrations_perimeter: float = Field(0.0, ge=0)

    areas_by_pitch: dict[str, float] = Field(
        default_factory=dict,
        description="Square feet per pitch, keyed N:12",
    )

    LENGTH_FIELDS: ClassVar[tuple[str, ...]] = (
        "total_area",
        "ridge_length",
        "hip_length",
        "valley_length",
        "rake_length",
        "eave_length",
        "step_flashing_length",
        "flashing_length",
        "drip_edge_length",
        "penetrations_area",
        "penetrations_perimeter",
    )
    COUNT_FIELDS: ClassVar[tuple[str, ...]] = (
        "ridge_count",
        "hip_count",
        "valley_count",
        "rake_count",
        "eave_count",
        "step_flashing_count",
        "chimney_count",
        "skylight_count",
        "turbine_vent_count",
        "pipe_vent_count",
    )

    @field_validator("predominant_pitch", mode="before")
    @classmethod
    def validate_pitch(cls, v: Any) -> str:
        """Normalize pitch notation to N:12 form."""
        pitch = normalize_pitch(v)
        if pitch is None:
            raise ValueError(f"Invalid pitch: {v!r}")
        return pitch

    @field_validator("areas_by_pitch", mode="before")
    @classmethod
    def validate_areas_by_pitch(cls, v: Any) -> dict[str, float]:
        """Normalize pitch keys and reject negative areas."""
        if not isinstance(v, Mapping):
            raise ValueError("areas_by_pitch must be a mapping")

        areas: dict[str, float] = {}
        for key, value in v.items():
            pitch = normalize_pitch(key)
            if pitch is None:
                raise ValueError(f"Invalid pitch key: {key!r}")
            area = parse_number(value)
            if area is None or area < 0:
                raise ValueError(f"Invalid area for pitch {key!r}: {value!r}")
            areas[pitch] = area
        return areas

    @property
    def total_squares(self) -> int:
        """Roofing squares (100 sq ft each), rounded up."""
        return math.ceil(self.total_area / SQUARE_FEET_PER_SQUARE)

    def pitch_breakdown(self) -> list[PitchArea]:
        """
        Break the roof area down by pitch.

        Returns:
            PitchArea entries sorted by descending area.
        """
        entries = []
        for pitch, area in self.areas_by_pitch.items():
            percentage = round(area / self.total_area * 100, 1) if self.total_area else 0.0
            entries.append(PitchArea(pitch=pitch, area=area, percentage=percentage))
        return sorted(entries, key=lambda entry: entry.area, reverse=True)

    def zero_field_ratio(self) -> float:
        """Fraction of numeric fields that are zero."""
        names = self.LENGTH_FIELDS + self.COUNT_FIELDS
        zeros = sum(1 for name in names if getattr(self, name) == 0)
        return zeros / len(names)

    def to_payload(self) -> dict[str, Any]:
        """
        Serialize to the camelCase payload consumed downstream.

        Returns:
            Dictionary with camelCase keys plus totalSquares.
        """
        payload = self.model_dump(by_alias=True)
        payload["totalSquares"] = self.total_squares
        return payload

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "MeasurementRecord":
        """
        Leniently coerce an untrusted payload into a record.

        Missing, negative or non-numeric values become zero; an unusable
        pitch becomes the default pitch. areasByPitch may be a mapping or a
        list of {"pitch", "area"} objects. No derivation is applied.

        Args:
            payload: Dictionary with camelCase or snake_case keys.

        Returns:
            Fully-populated MeasurementRecord.
        """
        values: dict[str, Any] = {}

        for name in cls.LENGTH_FIELDS:
            number = parse_number(_lookup(payload, name))
            values[name] = number if number is not None and number > 0 else 0.0

        for name in cls.COUNT_FIELDS:
            count = parse_count(_lookup(payload, name))
            values[name] = count if count is not None and count > 0 else 0

        pitch = normalize_pitch(_lookup(payload, "predominant_pitch"))
        values["predominant_pitch"] = pitch or DEFAULT_PREDOMINANT_PITCH
        values["areas_by_pitch"] = _coerce_areas_by_pitch(_lookup(payload, "areas_by_pitch"))

        return cls(**values)


def _lookup(payload: Mapping[str, Any], name: str) -> Any:
    """Get a value by camelCase alias, falling back to the snake_case name."""
    alias = to_camel(name)
    if alias in payload:
        return payload[alias]
    return payload.get(name)


def _coerce_areas_by_pitch(raw: Any) -> dict[str, float]:
    """Coerce a mapping or list of pitch/area pairs, skipping bad entries."""
    if isinstance(raw, Mapping):
        items = list(raw.items())
    elif isinstance(raw, list):
        items = [
            (item.get("pitch"), item.get("area"))
            for item in raw
            if isinstance(item, Mapping)
        ]
    else:
        return {}

    areas: dict[str, float] = {}
    for key, value in items:
        pitch = normalize_pitch(key)
        area = parse_number(value)
        if pitch is None or area is None or area < 0:
            continue
        areas[pitch] = area
    return areas


@dataclass(frozen=True, slots=True)
class MeasurementOutcome:
    """
    Result of a measurement extraction.

    Attributes:
        record: The fully-populated measurement record.
        provenance: Whether the record was extracted or simulated.
        strategy: Strategy that produced the record.
        note: Human-readable summary of how the record was produced.
        diagnostic: Detail of the failure that forced a simulated record.
    """

    record: MeasurementRecord
    provenance: Provenance
    strategy: ExtractionStrategy
    note: str = ""
    diagnostic: str | None = None

    @property
    def authentic(self) -> bool:
        """Whether the record was extracted from the document."""
        return self.provenance == Provenance.AUTHENTIC

    @property
    def simulated(self) -> bool:
        """Whether the record is a simulated stand-in."""
        return self.provenance == Provenance.SIMULATED

    @classmethod
    def authentic_record(
        cls,
        record: MeasurementRecord,
        strategy: ExtractionStrategy,
        note: str = "",
    ) -> "MeasurementOutcome":
        """Build an outcome for an extracted record."""
        return cls(
            record=record,
            provenance=Provenance.AUTHENTIC,
            strategy=strategy,
            note=note,
        )

    @classmethod
    def simulated_record(
        cls,
        record: MeasurementRecord,
        diagnostic: str,
        note: str = "",
    ) -> "MeasurementOutcome":
        """Build an outcome for a simulated fallback record."""
        return cls(
            record=record,
            provenance=Provenance.SIMULATED,
            strategy=ExtractionStrategy.SIMULATED,
            note=note or "Simulated measurements; extraction did not succeed",
            diagnostic=diagnostic,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "measurements": self.record.to_payload(),
            "authentic": self.authentic,
            "note": self.note,
            "diagnostic": self.diagnostic,
            "strategy": self.strategy.value,
        }
