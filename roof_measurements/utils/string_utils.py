"""
String utility functions for measurement extraction.

Provides whitespace normalization, number parsing and pitch notation
helpers shared by the text-pattern and vision paths.
"""

import math
import re
from typing import Any


_PITCH_RE = re.compile(r"^\s*(\d{1,2}(?:\.\d+)?)\s*(?:[:/]\s*(\d{1,2}))?\s*(?:pitch)?\s*$", re.IGNORECASE)


def normalize_whitespace(text: str) -> str:
    """
    Normalize whitespace in text.

    Collapses multiple spaces, tabs, newlines into single spaces.

    Args:
        text: Text to normalize.

    Returns:
        Text with normalized whitespace.

    Example:
        normalize_whitespace("Ridge   Length\\n\\n") -> "Ridge Length"
    """
    if not text:
        return ""

    return " ".join(text.split())


def parse_number(value: Any) -> float | None:
    """
    Parse a measurement number, stripping thousands separators.

    Args:
        value: String or number such as "2,250.5", "112 ft" or 42.

    Returns:
        Float value, or None if the value is not a finite number.

    Example:
        parse_number("2,250") -> 2250.0
        parse_number(",,,") -> None
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else None

    cleaned = str(value).replace(",", "").strip()
    match = re.match(r"^-?\d+(?:\.\d+)?|^-?\.\d+", cleaned)
    if not match:
        return None

    number = float(match.group(0))
    return number if math.isfinite(number) else None


def parse_count(value: Any) -> int | None:
    """
    Parse a whole-number count.

    Fractional values are rounded to the nearest integer.

    Args:
        value: String or number such as "4" or 3.0.

    Returns:
        Integer value, or None if the value is not numeric.
    """
    number = parse_number(value)
    if number is None:
        return None
    return int(round(number))


def normalize_pitch(value: Any) -> str | None:
    """
    Normalize roof pitch notation to rise-over-run colon form.

    Args:
        value: Pitch such as "6/12", "6:12", "6" or "6 pitch".

    Returns:
        Pitch string like "6:12", or None if the value is not a pitch.

    Example:
        normalize_pitch("6/12") -> "6:12"
        normalize_pitch("8") -> "8:12"
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        if not math.isfinite(value) or value < 0:
            return None
        value = f"{value:g}"

    match = _PITCH_RE.match(str(value))
    if not match:
        return None

    rise, run = match.group(1), match.group(2) or "12"
    return f"{rise}:{run}"
