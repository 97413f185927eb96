"""
Measurement extraction strategies.

Submodules:
    text_scraper: raw text recovery from PDF bytes
    field_patterns: labelled value extraction from scraped text
    derived_fields: arithmetic backfill of missing values
    simulated: fixed fallback records
    response_parser: JSON recovery from vision model output
    vision_extractor: vision model coordination
"""

from roof_measurements.extraction.errors import (
    InferenceServiceError,
    InvalidInputError,
    MeasurementExtractionError,
    PatternMissError,
    ResponseParseError,
    ScrapeFailure,
)


__all__ = [
    "MeasurementExtractionError",
    "ScrapeFailure",
    "PatternMissError",
    "InferenceServiceError",
    "ResponseParseError",
    "InvalidInputError",
]
