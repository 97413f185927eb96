"""
Derived field resolution for partially extracted measurements.

Backfills unset fields from fields that were recovered, using fixed
per-unit constants. Rules run once, in a fixed order, and a rule only
fires when its inputs are present and its target is still unset.
"""

import math

from roof_measurements.config import get_logger
from roof_measurements.extraction.constants import (
    DEFAULT_PREDOMINANT_PITCH,
    DEFAULT_TOTAL_AREA,
    FEATURE_UNIT_SPANS,
    PENETRATION_UNIT_AREAS,
    PENETRATION_UNIT_PERIMETERS,
    STEP_FLASHING_FEET_PER_PENETRATION,
    PenetrationKind,
)
from roof_measurements.extraction.field_patterns import PartialMeasurements


logger = get_logger(__name__)


def resolve_derived_fields(partial: PartialMeasurements) -> PartialMeasurements:
    """
    Fill unset fields from recovered ones.

    Order:
        1. total area from the sum of pitch areas
        2. feature counts as ceil(length / span)
        3. penetrations area from penetration counts
        4. penetrations perimeter from penetration counts
        5. step flashing from the total penetration count
        6. predominant pitch as the largest pitch area, else 6:12
        7. total area default of 2000 sq ft

    Args:
        partial: Extracted fields; not modified.

    Returns:
        New PartialMeasurements with derivable fields filled.
    """
    resolved = partial.copy()
    derived: list[str] = []

    if resolved.total_area is None and resolved.areas_by_pitch:
        resolved.total_area = sum(resolved.areas_by_pitch.values())
        derived.append("total_area")

    for kind, span in FEATURE_UNIT_SPANS.items():
        length = getattr(resolved, f"{kind.value}_length")
        count_name = f"{kind.value}_count"
        if length is not None and getattr(resolved, count_name) is None:
            setattr(resolved, count_name, math.ceil(length / span))
            derived.append(count_name)

    counts = {
        PenetrationKind.CHIMNEY: resolved.chimney_count or 0,
        PenetrationKind.SKYLIGHT: resolved.skylight_count or 0,
        PenetrationKind.PIPE_VENT: resolved.pipe_vent_count or 0,
    }
    total_penetrations = sum(counts.values())

    if resolved.penetrations_area is None and any(c > 0 for c in counts.values()):
        resolved.penetrations_area = sum(
            PENETRATION_UNIT_AREAS[kind] * count for kind, count in counts.items()
        )
        derived.append("penetrations_area")

    if resolved.penetrations_perimeter is None and any(c > 0 for c in counts.values()):
        resolved.penetrations_perimeter = sum(
            PENETRATION_UNIT_PERIMETERS[kind] * count for kind, count in counts.items()
        )
        derived.append("penetrations_perimeter")

    if resolved.step_flashing_length is None and total_penetrations > 0:
        resolved.step_flashing_length = STEP_FLASHING_FEET_PER_PENETRATION * total_penetrations
        derived.append("step_flashing_length")
        if resolved.step_flashing_count is None:
            resolved.step_flashing_count = total_penetrations
            derived.append("step_flashing_count")

    if resolved.predominant_pitch is None:
        resolved.predominant_pitch = _largest_pitch(resolved.areas_by_pitch)
        derived.append("predominant_pitch")

    if resolved.total_area is None:
        resolved.total_area = DEFAULT_TOTAL_AREA
        derived.append("total_area")

    logger.debug("derived_fields_resolved", derived=derived)

    return resolved


def _largest_pitch(areas_by_pitch: dict[str, float]) -> str:
    """
    Return the pitch with the largest positive area.

    The first key wins ties. Falls back to the default pitch when no area
    is positive.
    """
    if not areas_by_pitch:
        return DEFAULT_PREDOMINANT_PITCH
    # max() keeps the first maximal element
    pitch = max(areas_by_pitch, key=lambda p: areas_by_pitch[p])
    return pitch if areas_by_pitch[pitch] > 0 else DEFAULT_PREDOMINANT_PITCH

