"""
Simulated measurement records keyed by filename category.

Used as the terminal fallback when neither extraction strategy can
produce a record. Every record returned from here is flagged simulated
by the caller and never presented as extracted data.
"""

from types import MappingProxyType
from typing import Any, Mapping

from roof_measurements.config import get_logger
from roof_measurements.extraction.constants import SIMULATED_CATEGORY_RULES, SimulatedCategory
from roof_measurements.schemas.measurement import MeasurementRecord


logger = get_logger(__name__)


SIMULATED_PAYLOADS: Mapping[SimulatedCategory, Mapping[str, Any]] = MappingProxyType(
    {
        SimulatedCategory.EAGLEVIEW_DAISY: {
            "totalArea": 2250,
            "predominantPitch": "6:12",
            "ridgeLength": 112,
            "hipLength": 42,
            "valleyLength": 28,
            "rakeLength": 86,
            "eaveLength": 154,
            "ridgeCount": 6,
            "hipCount": 3,
            "valleyCount": 2,
            "rakeCount": 4,
            "eaveCount": 6,
            "stepFlashingLength": 32,
            "stepFlashingCount": 4,
            "chimneyCount": 1,
            "skylightCount": 2,
            "turbineVentCount": 0,
            "pipeVentCount": 4,
            "penetrationsArea": 26,
            "penetrationsPerimeter": 38,
            "areasByPitch": {"6:12": 1875, "4:12": 375},
        },
        SimulatedCategory.COMPLEX: {
            "totalArea": 3200,
            "predominantPitch": "8:12",
            "ridgeLength": 160,
            "hipLength": 95,
            "valleyLength": 120,
            "rakeLength": 110,
            "eaveLength": 185,
            "ridgeCount": 8,
            "hipCount": 7,
            "valleyCount": 8,
            "rakeCount": 5,
            "eaveCount": 8,
            "stepFlashingLength": 56,
            "stepFlashingCount": 7,
            "chimneyCount": 2,
            "skylightCount": 4,
            "turbineVentCount": 0,
            "pipeVentCount": 5,
            "penetrationsArea": 36,
            "penetrationsPerimeter": 62,
            "areasByPitch": {"8:12": 1920, "6:12": 800, "4:12": 480},
        },
        SimulatedCategory.LARGE_COMMERCIAL: {
            "totalArea": 4500,
            "predominantPitch": "3:12",
            "ridgeLength": 245,
            "hipLength": 120,
            "valleyLength": 85,
            "rakeLength": 160,
            "eaveLength": 320,
            "ridgeCount": 12,
            "hipCount": 8,
            "valleyCount": 6,
            "rakeCount": 7,
            "eaveCount": 13,
            "stepFlashingLength": 128,
            "stepFlashingCount": 16,
            "chimneyCount": 2,
            "skylightCount": 6,
            "turbineVentCount": 2,
            "pipeVentCount": 8,
            "penetrationsArea": 68,
            "penetrationsPerimeter": 134,
            "areasByPitch": {"3:12": 3600, "1:12": 900},
        },
        SimulatedCategory.STANDARD: {
            "totalArea": 1800,
            "predominantPitch": "5:12",
            "ridgeLength": 90,
            "hipLength": 36,
            "valleyLength": 24,
            "rakeLength": 72,
            "eaveLength": 120,
            "ridgeCount": 5,
            "hipCount": 3,
            "valleyCount": 2,
            "rakeCount": 3,
            "eaveCount": 5,
            "stepFlashingLength": 24,
            "stepFlashingCount": 3,
            "chimneyCount": 1,
            "skylightCount": 0,
            "turbineVentCount": 0,
            "pipeVentCount": 3,
            "penetrationsArea": 15,
            "penetrationsPerimeter": 24,
            "areasByPitch": {"5:12": 1600, "3:12": 200},
        },
    }
)


def classify_filename(filename: str | None) -> SimulatedCategory:
    """
    Classify a report filename into a simulated record category.

    Args:
        filename: Original upload filename; may be empty.

    Returns:
        First matching category, or STANDARD.

    Example:
        classify_filename("EagleView_Daisy_Report.pdf") -> EAGLEVIEW_DAISY
        classify_filename("custom-job.pdf") -> COMPLEX
    """
    name = (filename or "").lower()
    for category, alternatives in SIMULATED_CATEGORY_RULES:
        if any(all(keyword in name for keyword in keywords) for keywords in alternatives):
            return category
    return SimulatedCategory.STANDARD


def generate_simulated_record(filename: str | None) -> MeasurementRecord:
    """
    Return the fixed simulated record for a filename's category.

    Args:
        filename: Original upload filename; may be empty.

    Returns:
        A new MeasurementRecord; identical inputs give identical records.
    """
    category = classify_filename(filename)
    logger.info("simulated_record_generated", category=category.value, filename=filename)
    return MeasurementRecord.model_validate(SIMULATED_PAYLOADS[category])
