"""
Pipeline module for roof measurement extraction.
"""

from roof_measurements.pipeline.runner import MeasurementPipeline, extract_measurements


__all__ = [
    "MeasurementPipeline",
    "extract_measurements",
]
