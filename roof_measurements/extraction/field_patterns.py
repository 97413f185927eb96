"""
Pattern-based field extraction from scraped report text.

Each measurement field owns an ordered group of (regex, parser) rules.
Rules are tried lazily in order and the first one whose regex matches and
whose capture parses sets the field. Fields no rule can set stay unset
(None) for the derived-field resolver to fill.
"""

import re
from dataclasses import dataclass, field, fields, replace
from typing import Any, Callable

from roof_measurements.config import get_logger
from roof_measurements.extraction.errors import PatternMissError
from roof_measurements.schemas.measurement import MeasurementRecord
from roof_measurements.utils.string_utils import normalize_pitch, parse_count, parse_number


logger = get_logger(__name__)


Parser = Callable[[str], Any]


@dataclass(slots=True)
class PartialMeasurements:
    """
    Measurement fields recovered so far; None means unset.

    Attributes:
        total_area: Total roof area in sq ft.
        predominant_pitch: Pitch in N:12 form.
        areas_by_pitch: Square feet per pitch collected by the sweep.
        matched_fields: Names of fields set by a pattern, in match order.
    """

    total_area: float | None = None
    predominant_pitch: str | None = None

    ridge_length: float | None = None
    hip_length: float | None = None
    valley_length: float | None = None
    rake_length: float | None = None
    eave_length: float | None = None
    step_flashing_length: float | None = None
    flashing_length: float | None = None
    drip_edge_length: float | None = None

    ridge_count: int | None = None
    hip_count: int | None = None
    valley_count: int | None = None
    rake_count: int | None = None
    eave_count: int | None = None
    step_flashing_count: int | None = None

    chimney_count: int | None = None
    skylight_count: int | None = None
    turbine_vent_count: int | None = None
    pipe_vent_count: int | None = None

    penetrations_area: float | None = None
    penetrations_perimeter: float | None = None

    areas_by_pitch: dict[str, float] = field(default_factory=dict)
    matched_fields: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """Whether no pattern matched anything."""
        return not self.matched_fields and not self.areas_by_pitch

    def copy(self) -> "PartialMeasurements":
        """Return an independent copy."""
        return replace(
            self,
            areas_by_pitch=dict(self.areas_by_pitch),
            matched_fields=list(self.matched_fields),
        )

    def to_record(self) -> MeasurementRecord:
        """
        Convert to a complete record, turning unset values into zero.

        Returns:
            MeasurementRecord with every field populated.
        """
        values: dict[str, Any] = {}
        for f in fields(self):
            if f.name in ("matched_fields", "predominant_pitch", "areas_by_pitch"):
                continue
            value = getattr(self, f.name)
            values[f.name] = 0 if value is None else value

        if self.predominant_pitch is not None:
            values["predominant_pitch"] = self.predominant_pitch
        values["areas_by_pitch"] = dict(self.areas_by_pitch)

        return MeasurementRecord(**values)


@dataclass(frozen=True, slots=True)
class PatternRule:
    """
    A single regex with the parser applied to its first capture group.

    Attributes:
        pattern: Compiled case-insensitive regex with one capture group.
        parser: Converts the capture to a value; None means garbled.
    """

    pattern: re.Pattern[str]
    parser: Parser

    def apply(self, text: str) -> tuple[bool, Any]:
        """
        Search the text and parse the first capture.

        Returns:
            (matched, value). value is None when nothing matched or the
            capture was garbled.
        """
        match = self.pattern.search(text)
        if not match:
            return False, None
        return True, self.parser(match.group(1))


@dataclass(frozen=True, slots=True)
class PatternGroup:
    """
    Ordered rules for one semantic field; the first rule that matches wins.

    Attributes:
        field_name: PartialMeasurements attribute the group sets.
        rules: Rules in priority order.
    """

    field_name: str
    rules: tuple[PatternRule, ...]

    def match(self, text: str) -> Any:
        """
        Return the parsed value of the first rule whose regex matches.

        Later rules are not tried once one matches, so a garbled capture
        leaves the field unset.
        """
        for rule in self.rules:
            matched, value = rule.apply(text)
            if matched:
                return value
        return None

    def match_or_raise(self, text: str) -> Any:
        """
        Return the value of the first successful rule.

        Raises:
            PatternMissError: If no rule matched or the capture was garbled.
        """
        value = self.match(text)
        if value is None:
            raise PatternMissError(self.field_name)
        return value


# Regex fragments
_SEP = r"[:\s=]+"
_NUMBER = r"([0-9,]+(?:\.\d+)?)"
_INTEGER = r"(\d+)"
# Unitless numbers may not run on into a percentage or a ratio
_BARE_END = r"(?![\d,]|\.\d|\s*(?:%|[:/]\s*\d))"
_AREA_UNIT = rf"(?:\s*(?:sq\.?\s*ft\.?|square\s+feet)|{_BARE_END})"
_LENGTH_UNIT = rf"(?:\s*(?:ft\b|feet\b|')|{_BARE_END})"
_PITCH = r"([0-9]{1,2}(?:/[0-9]{1,2}|:[0-9]{1,2})?)(?![\d/:])"


def _parse_length(raw: str) -> float | None:
    number = parse_number(raw)
    return number if number is not None and number >= 0 else None


def _rule(pattern: str, parser: Parser) -> PatternRule:
    return PatternRule(re.compile(pattern, re.IGNORECASE), parser)


def _group(field_name: str, parser: Parser, *patterns: str) -> PatternGroup:
    return PatternGroup(field_name, tuple(_rule(p, parser) for p in patterns))


def _length_group(field_name: str, label: str, *extra_labels: str) -> PatternGroup:
    """Build the group for a linear feature labelled e.g. "Ridge"."""
    patterns = [
        rf"\b{label}(?:\s+Length)?{_SEP}{_NUMBER}{_LENGTH_UNIT}",
        rf"\bTotal\s+{label}{_SEP}{_NUMBER}{_LENGTH_UNIT}",
    ]
    patterns.extend(rf"\b{extra}{_SEP}{_NUMBER}{_LENGTH_UNIT}" for extra in extra_labels)
    # "Number of Valleys: 3" is a count
    patterns.append(rf"(?<!of\s)\b{label}s?(?:\s+Total)?{_SEP}{_NUMBER}{_LENGTH_UNIT}")
    return _group(field_name, _parse_length, *patterns)


def _count_group(field_name: str, label: str) -> PatternGroup:
    """Build the group for a count labelled e.g. "Chimney"."""
    return _group(
        field_name,
        parse_count,
        rf"\b{label}s?(?:\s+Count)?{_SEP}{_INTEGER}\b",
        rf"\b{label}s?\s+Total{_SEP}{_INTEGER}\b",
        rf"\bNumber\s+of\s+{label}s?{_SEP}{_INTEGER}\b",
    )


def _feature_count_group(field_name: str, label: str) -> PatternGroup:
    """Build the group for a linear feature count, e.g. "Ridge Count: 6"."""
    return _group(
        field_name,
        parse_count,
        rf"\b{label}s?\s+Count{_SEP}{_INTEGER}\b",
        rf"\bNumber\s+of\s+{label}s?{_SEP}{_INTEGER}\b",
    )


FIELD_GROUPS: tuple[PatternGroup, ...] = (
    _group(
        "total_area",
        _parse_length,
        rf"\bTotal\s+Area{_SEP}{_NUMBER}{_AREA_UNIT}",
        rf"\bArea\s+(?:Measured|Calculated){_SEP}{_NUMBER}{_AREA_UNIT}",
        rf"\bTotal\s+Surface\s+Area{_SEP}{_NUMBER}{_AREA_UNIT}",
        rf"\bRoof\s+Area{_SEP}{_NUMBER}{_AREA_UNIT}",
        rf"\bTotal(?:\s+Roof)?\s+Square(?:\s+Footage)?{_SEP}{_NUMBER}{_AREA_UNIT}",
    ),
    _group(
        "predominant_pitch",
        normalize_pitch,
        rf"\b(?:Predominant|Primary|Main)\s+Pitch{_SEP}{_PITCH}",
        rf"\bPitch{_SEP}{_PITCH}",
        rf"\b(?:Roof|Main)\s+Slope{_SEP}{_PITCH}",
    ),
    _length_group("ridge_length", "Ridge", r"Ridge\s+Line"),
    _length_group("hip_length", "Hip"),
    _length_group("valley_length", "Valley"),
    _length_group("eave_length", "Eave"),
    _length_group("rake_length", "Rake"),
    _length_group("step_flashing_length", r"Step\s+Flashing"),
    _group(
        "flashing_length",
        _parse_length,
        rf"(?<!step\s)\bFlashing(?:\s+Length)?{_SEP}{_NUMBER}{_LENGTH_UNIT}",
        rf"\bTotal\s+Flashing{_SEP}{_NUMBER}{_LENGTH_UNIT}",
    ),
    _length_group("drip_edge_length", r"Drip\s+Edge"),
    _feature_count_group("ridge_count", "Ridge"),
    _feature_count_group("hip_count", "Hip"),
    _feature_count_group("valley_count", "Valley"),
    _feature_count_group("eave_count", "Eave"),
    _feature_count_group("rake_count", "Rake"),
    _feature_count_group("step_flashing_count", r"Step\s+Flashing"),
    _count_group("chimney_count", "Chimney"),
    _count_group("skylight_count", "Skylight"),
    _group(
        "turbine_vent_count",
        parse_count,
        rf"\bTurbines?(?:\s+Vents?)?(?:\s+Count)?{_SEP}{_INTEGER}\b",
        rf"\bNumber\s+of\s+Turbines?(?:\s+Vents?)?{_SEP}{_INTEGER}\b",
    ),
    _group(
        "pipe_vent_count",
        parse_count,
        rf"(?<!turbine\s)\b(?:Pipe\s+)?Vents?(?:\s+Count)?{_SEP}{_INTEGER}\b",
        rf"(?<!turbine\s)\b(?:Roof\s+)?Vents?\s+Total{_SEP}{_INTEGER}\b",
        rf"\bNumber\s+of\s+(?:Pipe\s+)?Vents?{_SEP}{_INTEGER}\b",
    ),
    _group(
        "penetrations_area",
        _parse_length,
        rf"\bPenetrations?\s+Area{_SEP}{_NUMBER}{_AREA_UNIT}",
    ),
    _group(
        "penetrations_perimeter",
        _parse_length,
        rf"\bPenetrations?\s+Perimeter{_SEP}{_NUMBER}{_LENGTH_UNIT}",
    ),
)

# "6/12 pitch area: 1,875 sq ft", "4:12 slope - 375"
PITCH_AREA_RE = re.compile(
    r"\b(\d+(?:/\d+|:\d+))\s*(?:pitch|slope)(?:\s+area)?[:\s=\-]+"
    r"([0-9,]+(?:\.\d+)?)\s*(?:sq\.?\s*ft\.?|square\s+feet)?",
    re.IGNORECASE,
)


def extract_pitch_areas(text: str) -> dict[str, float]:
    """
    Collect every pitch/area pair in the text.

    Args:
        text: Scraped report text.

    Returns:
        Square feet per pitch keyed N:12. A repeated pitch keeps the last
        value seen.
    """
    areas: dict[str, float] = {}
    for match in PITCH_AREA_RE.finditer(text):
        pitch = normalize_pitch(match.group(1))
        area = _parse_length(match.group(2))
        if pitch is None or area is None:
            continue
        areas[pitch] = area
    return areas


def extract_fields(text: str) -> PartialMeasurements:
    """
    Extract every labelled measurement from scraped text.

    Args:
        text: Scraped report text.

    Returns:
        PartialMeasurements with matched fields set and the rest None.
        Never raises.
    """
    partial = PartialMeasurements()
    if not text:
        return partial

    missed: list[str] = []
    for group in FIELD_GROUPS:
        try:
            value = group.match_or_raise(text)
        except PatternMissError as e:
            missed.append(e.field_name)
            continue
        setattr(partial, group.field_name, value)
        partial.matched_fields.append(group.field_name)

    partial.areas_by_pitch = extract_pitch_areas(text)

    logger.debug(
        "pattern_extraction_complete",
        matched=len(partial.matched_fields),
        missed=len(missed),
        pitch_areas=len(partial.areas_by_pitch),
    )

    return partial
