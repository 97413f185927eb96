"""
Prompts module for roof measurement extraction.
"""

from roof_measurements.prompts.measurement import (
    MEASUREMENT_FIELDS,
    build_measurement_system_prompt,
    build_measurement_user_prompt,
)


__all__ = [
    "MEASUREMENT_FIELDS",
    "build_measurement_system_prompt",
    "build_measurement_user_prompt",
]
