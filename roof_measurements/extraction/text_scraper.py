"""
Raw text scraper for PDF byte streams.

Recovers human-readable text from a PDF without a PDF library by pattern
matching string literals in the raw bytes. Compressed content streams
yield nothing, which the pipeline treats as a scrape miss.
"""

import re

from roof_measurements.config import get_logger
from roof_measurements.extraction.errors import ScrapeFailure
from roof_measurements.utils.string_utils import normalize_whitespace


logger = get_logger(__name__)


# Parenthesised literal followed by a show-text operator: (Ridge Length: 112 ft) Tj
_LITERAL_TJ_RE = re.compile(r"\(((?:\\.|[^\\)])*)\)\s*Tj", re.DOTALL)

# Hex literal followed by a show-text operator: <5269646765> Tj
_HEX_TJ_RE = re.compile(r"<([0-9A-Fa-f\s]+)>\s*Tj")

_STREAM_RE = re.compile(r"stream\s(.*?)\sendstream", re.DOTALL)
_STREAM_LITERAL_RE = re.compile(r"\(((?:\\.|[^\\)])*)\)", re.DOTALL)

_OCTAL_ESCAPE_RE = re.compile(r"\\([0-7]{3})")


def scrape_text(data: bytes) -> str:
    """
    Scrape readable text from a raw PDF byte stream.

    Three passes run over the Latin-1 decoded bytes and their hits are
    concatenated in order: literal strings shown with Tj, hex strings
    shown with Tj, and multi-character literals inside content streams.
    PDF escapes are then unescaped and whitespace collapsed.

    Args:
        data: Raw document bytes.

    Returns:
        Normalized text, or an empty string when nothing was recovered.
        Never raises.
    """
    try:
        content = _decode(data)
    except ScrapeFailure as e:
        logger.debug("scrape_decode_failed", error=str(e))
        return ""

    fragments: list[str] = []
    fragments.extend(match.group(1) for match in _LITERAL_TJ_RE.finditer(content))
    fragments.extend(_decode_hex(match.group(1)) for match in _HEX_TJ_RE.finditer(content))

    for block in _STREAM_RE.finditer(content):
        for match in _STREAM_LITERAL_RE.finditer(block.group(1)):
            literal = match.group(1)
            if len(literal) > 1 and literal.strip():
                fragments.append(literal)

    text = normalize_whitespace(_unescape(" ".join(fragments)))

    logger.debug(
        "scrape_complete",
        input_bytes=len(content),
        fragments=len(fragments),
        text_length=len(text),
    )

    return text


def _decode(data: bytes) -> str:
    """Decode bytes one byte per character."""
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise ScrapeFailure(f"Expected bytes, got {type(data).__name__}")
    return bytes(data).decode("latin-1")


def _decode_hex(digits: str) -> str:
    """Decode hex digit pairs to characters, ignoring a trailing nibble."""
    digits = "".join(digits.split())
    return "".join(
        chr(int(digits[i : i + 2], 16))
        for i in range(0, len(digits) - 1, 2)
    )


def _unescape(text: str) -> str:
    """Resolve PDF string escapes."""
    text = _OCTAL_ESCAPE_RE.sub(lambda m: chr(int(m.group(1), 8)), text)
    return (
        text.replace("\\\\", "\\")
        .replace("\\(", "(")
        .replace("\\)", ")")
    )
