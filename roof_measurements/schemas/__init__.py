"""
Schema definitions for roof measurement records.
"""

from roof_measurements.schemas.measurement import (
    ExtractionStrategy,
    MeasurementOutcome,
    MeasurementRecord,
    PitchArea,
    Provenance,
)


__all__ = [
    "MeasurementRecord",
    "MeasurementOutcome",
    "PitchArea",
    "Provenance",
    "ExtractionStrategy",
]
