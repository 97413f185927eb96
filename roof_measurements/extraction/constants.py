"""
Fixed configuration data for measurement derivation and simulation.

Values are frozen mappings so they can be imported, tested and tuned
independently of the code that consumes them.
"""

from enum import Enum
from types import MappingProxyType
from typing import Mapping


class FeatureKind(str, Enum):
    """Linear roof features that carry both a length and a count."""

    RIDGE = "ridge"
    HIP = "hip"
    VALLEY = "valley"
    RAKE = "rake"
    EAVE = "eave"
    STEP_FLASHING = "step_flashing"


class PenetrationKind(str, Enum):
    """Roof penetrations used for area and perimeter estimates."""

    CHIMNEY = "chimney"
    SKYLIGHT = "skylight"
    PIPE_VENT = "pipe_vent"


# Feet of feature length per installed unit
FEATURE_UNIT_SPANS: Mapping[FeatureKind, float] = MappingProxyType(
    {
        FeatureKind.RIDGE: 20.0,
        FeatureKind.HIP: 15.0,
        FeatureKind.VALLEY: 15.0,
        FeatureKind.RAKE: 25.0,
        FeatureKind.EAVE: 25.0,
    }
)

# Average square feet per penetration
PENETRATION_UNIT_AREAS: Mapping[PenetrationKind, float] = MappingProxyType(
    {
        PenetrationKind.CHIMNEY: 12.0,
        PenetrationKind.SKYLIGHT: 6.0,
        PenetrationKind.PIPE_VENT: 1.0,
    }
)

# Average perimeter feet per penetration
PENETRATION_UNIT_PERIMETERS: Mapping[PenetrationKind, float] = MappingProxyType(
    {
        PenetrationKind.CHIMNEY: 14.0,
        PenetrationKind.SKYLIGHT: 10.0,
        PenetrationKind.PIPE_VENT: 4.0,
    }
)

STEP_FLASHING_FEET_PER_PENETRATION = 8.0

DEFAULT_TOTAL_AREA = 2000.0
DEFAULT_PREDOMINANT_PITCH = "6:12"

SQUARE_FEET_PER_SQUARE = 100.0


class SimulatedCategory(str, Enum):
    """Filename categories for simulated measurement records."""

    EAGLEVIEW_DAISY = "eagleview_daisy"
    COMPLEX = "complex"
    LARGE_COMMERCIAL = "large_commercial"
    STANDARD = "standard"


# Evaluated in order; a rule matches when all keywords of any one
# alternative appear in the lower-cased filename.
SIMULATED_CATEGORY_RULES: tuple[tuple[SimulatedCategory, tuple[tuple[str, ...], ...]], ...] = (
    (SimulatedCategory.EAGLEVIEW_DAISY, (("eagleview", "daisy"),)),
    (SimulatedCategory.COMPLEX, (("complex",), ("custom",))),
    (SimulatedCategory.LARGE_COMMERCIAL, (("large",), ("commercial",))),
)
