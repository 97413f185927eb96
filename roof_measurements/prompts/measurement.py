"""
Measurement extraction prompts for the vision model.

The system instruction names every field of the measurement record and
the exact JSON shape expected back, so the response can be coerced
directly into a MeasurementRecord.
"""

import json


# (serialized field name, type/unit hint)
MEASUREMENT_FIELDS: tuple[tuple[str, str], ...] = (
    ("totalArea", "number, in sq ft"),
    ("predominantPitch", 'string, rise over run, e.g. "6:12"'),
    ("ridgeLength", "number, in feet"),
    ("ridgeCount", "number"),
    ("hipLength", "number, in feet"),
    ("hipCount", "number"),
    ("valleyLength", "number, in feet"),
    ("valleyCount", "number"),
    ("rakeLength", "number, in feet"),
    ("rakeCount", "number"),
    ("eaveLength", "number, in feet"),
    ("eaveCount", "number"),
    ("dripEdgeLength", "number, in feet"),
    ("flashingLength", "number, in feet"),
    ("stepFlashingLength", "number, in feet"),
    ("stepFlashingCount", "number"),
    ("chimneyCount", "number"),
    ("skylightCount", "number"),
    ("turbineVentCount", "number"),
    ("pipeVentCount", "number"),
    ("penetrationsArea", "number, in sq ft"),
    ("penetrationsPerimeter", "number, in feet"),
    ("areasByPitch", 'object mapping pitch to sq ft, e.g. {"6:12": 1875}'),
)


def _json_template() -> str:
    template: dict[str, object] = {}
    for name, _hint in MEASUREMENT_FIELDS:
        if name == "predominantPitch":
            template[name] = "6:12"
        elif name == "areasByPitch":
            template[name] = {"6:12": 0}
        else:
            template[name] = 0
    return json.dumps(template, indent=2)


def build_measurement_system_prompt() -> str:
    """
    Build the fixed system instruction for roof measurement extraction.

    Returns:
        System prompt listing every field and the required JSON shape.
    """
    field_lines = "\n".join(f"- {name} ({hint})" for name, hint in MEASUREMENT_FIELDS)

    return f"""You are a specialized assistant that extracts roofing measurements from
aerial roof measurement report pages (for example EagleView reports).

Extract all measurements into a single JSON object with these fields:

{field_lines}

### RULES

1. Report ONLY values that are printed in the pages. Never estimate.
2. If a value is not shown, use 0 for numbers and "N/A" for the pitch.
3. Do NOT generate example data or placeholder values.
4. Write pitches as rise:12 (convert "6/12" to "6:12").
5. Return ONLY the JSON object, no explanations or any other text.

### REQUIRED OUTPUT FORMAT

```json
{_json_template()}
```
"""


def build_measurement_user_prompt(page_count: int) -> str:
    """
    Build the user message accompanying the page images.

    Args:
        page_count: Number of page images attached.

    Returns:
        User prompt text.
    """
    noun = "page" if page_count == 1 else "pages"
    return (
        f"Extract all roof measurements from the {page_count} report {noun} attached. "
        "Return ONLY the JSON object with the exact structure described."
    )
