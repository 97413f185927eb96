"""
Utility modules for the roof measurement extraction pipeline.
"""

from roof_measurements.utils.string_utils import (
    normalize_pitch,
    normalize_whitespace,
    parse_count,
    parse_number,
)


__all__ = [
    "normalize_whitespace",
    "normalize_pitch",
    "parse_number",
    "parse_count",
]
