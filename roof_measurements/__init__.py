"""
Roof measurement extraction from aerial roof report PDFs.

Recovers a numeric measurement record from a report either by asking a
vision model about rendered pages or by pattern matching text scraped
from the raw PDF bytes, with a simulated record as the last resort.

Usage:
    from roof_measurements import MeasurementPipeline
    outcome = MeasurementPipeline().extract(document=pdf_bytes, filename="report.pdf")
"""

from importlib.metadata import PackageNotFoundError, version

from roof_measurements.config import get_logger, get_settings
from roof_measurements.extraction.errors import InvalidInputError, MeasurementExtractionError
from roof_measurements.pipeline import MeasurementPipeline, extract_measurements
from roof_measurements.schemas import MeasurementOutcome, MeasurementRecord, Provenance


try:
    __version__ = version("roof-measurement-extraction")
except PackageNotFoundError:
    __version__ = "1.0.0"


__all__ = [
    "__version__",
    "get_settings",
    "get_logger",
    "MeasurementPipeline",
    "extract_measurements",
    "MeasurementRecord",
    "MeasurementOutcome",
    "Provenance",
    "MeasurementExtractionError",
    "InvalidInputError",
]
