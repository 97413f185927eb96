"""
JSON extraction from free-form vision model responses.

Models often wrap their JSON answer in a markdown code fence or in prose.
This module locates the object, parses it, and applies a single cleanup
pass before giving up.
"""

import json
import re
from typing import Any

from roof_measurements.config import get_logger
from roof_measurements.extraction.errors import ResponseParseError


logger = get_logger(__name__)


_FENCED_BLOCK_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.IGNORECASE)
_FENCE_MARKER_RE = re.compile(r"```")
_LANGUAGE_TAG_RE = re.compile(r"^\s*json\b", re.IGNORECASE)


def parse_vision_response(text: str) -> dict[str, Any]:
    """
    Parse the JSON object out of a vision model response.

    Candidate selection, in order:
        1. interior of the first fenced code block
        2. span from the first "{" to the last "}"
        3. the trimmed whole response

    A failed parse gets one cleanup retry (fence markers, a leading json
    tag and blank lines removed).

    Args:
        text: Raw response content.

    Returns:
        Parsed JSON object.

    Raises:
        ResponseParseError: If no JSON object could be parsed.
    """
    raw = text or ""
    candidate = _select_candidate(raw)

    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError as first_error:
        cleaned = _cleanup(candidate)
        logger.debug("response_parse_retry", content_length=len(raw))
        try:
            parsed = json.loads(cleaned)
        except json.JSONDecodeError as e:
            logger.warning(
                "response_parse_failed",
                error=str(e),
                content_preview=raw[:200],
            )
            raise ResponseParseError(
                f"Response is not valid JSON: {first_error}",
                raw_response=raw,
            ) from e

    if not isinstance(parsed, dict):
        raise ResponseParseError(
            f"Expected a JSON object, got {type(parsed).__name__}",
            raw_response=raw,
        )

    return parsed


def _select_candidate(text: str) -> str:
    """Pick the substring most likely to hold the JSON object."""
    fenced = _FENCED_BLOCK_RE.search(text)
    if fenced:
        return fenced.group(1).strip()

    start = text.find("{")
    end = text.rfind("}")
    if start >= 0 and end > start:
        return text[start : end + 1]

    return text.strip()


def _cleanup(candidate: str) -> str:
    """Strip stray fence markers, a language tag and blank lines."""
    cleaned = _FENCE_MARKER_RE.sub("", candidate)
    cleaned = _LANGUAGE_TAG_RE.sub("", cleaned, count=1)
    lines = [line for line in cleaned.splitlines() if line.strip()]
    return "\n".join(lines).strip()
