"""
Pytest Configuration and Shared Fixtures for Measurement Extraction Tests.

Provides sample report text, hand-built uncompressed PDFs and fake
inference services shared by the unit and integration suites.
"""

import logging
import time
from typing import Any, Callable, Sequence

import pytest
import structlog

from roof_measurements.config.logging_config import SecretFilter
from roof_measurements.config.settings import get_settings


SAMPLE_REPORT_LINES: list[str] = [
    "EAGLEVIEW PREMIUM REPORT",
    "Total Area: 2,250 sq ft",
    "Predominant Pitch: 6/12",
    "Ridge Length: 112 ft",
    "Hip Length: 42 ft",
    "Valley Length: 28 ft",
    "Rake Length: 86 ft",
    "Eave Length: 154 ft",
    "Step Flashing Length: 32 ft",
    "Flashing Length: 20 ft",
    "Drip Edge Length: 240 ft",
    "Chimneys: 1",
    "Skylights: 2",
    "Pipe Vents: 4",
    "Turbine Vents: 0",
    "6/12 Pitch Area: 1,875 sq ft",
    "4/12 Pitch Area: 375 sq ft",
]


def build_pdf(page_lines: Sequence[Sequence[str]]) -> bytes:
    """
    Build a minimal, uncompressed PDF with one text line per Tj operator.

    Args:
        page_lines: Text lines for each page.

    Returns:
        PDF bytes readable by PyMuPDF and by the raw text scraper.
    """
    page_count = len(page_lines)
    font_id = 3 + 2 * page_count
    kids = " ".join(f"{3 + 2 * i} 0 R" for i in range(page_count))

    objects: list[bytes] = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        f"<< /Type /Pages /Kids [{kids}] /Count {page_count} >>".encode("latin-1"),
    ]

    for i, lines in enumerate(page_lines):
        content_id = 4 + 2 * i
        objects.append(
            (
                f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
                f"/Contents {content_id} 0 R "
                f"/Resources << /Font << /F1 {font_id} 0 R >> >> >>"
            ).encode("latin-1")
        )

        ops = ["BT", "/F1 11 Tf", "14 TL", "72 740 Td"]
        for line in lines:
            escaped = line.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")
            ops.append(f"({escaped}) Tj T*")
        ops.append("ET")
        stream = "\n".join(ops).encode("latin-1")
        objects.append(
            b"<< /Length " + str(len(stream)).encode("latin-1") + b" >>\nstream\n"
            + stream
            + b"\nendstream"
        )

    objects.append(b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>")

    out = bytearray(b"%PDF-1.4\n")
    offsets: list[int] = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += f"{number} 0 obj\n".encode("latin-1") + body + b"\nendobj\n"

    xref_offset = len(out)
    out += f"xref\n0 {len(objects) + 1}\n".encode("latin-1")
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += f"{offset:010d} 00000 n \n".encode("latin-1")
    out += (
        f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\n"
        f"startxref\n{xref_offset}\n%%EOF\n"
    ).encode("latin-1")

    return bytes(out)


class FakeInferenceService:
    """
    Inference double that records calls and replays a response or error.

    Attributes:
        calls: Keyword snapshots of every infer() call.
    """

    def __init__(
        self,
        response: str = "",
        error: Exception | None = None,
        delay: float = 0.0,
    ) -> None:
        self.response = response
        self.error = error
        self.delay = delay
        self.calls: list[dict[str, Any]] = []

    def infer(
        self,
        images: Sequence[Any],
        instructions: str,
        *,
        model: str | None = None,
        timeout: float | None = None,
    ) -> str:
        self.calls.append(
            {
                "images": list(images),
                "instructions": instructions,
                "model": model,
                "timeout": timeout,
            }
        )
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.response


# =============================================================================
# Function-scoped Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Clear cached settings so environment overrides apply per test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def restore_logging():
    """Remove handlers installed by configure_logging() after each test."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in root.handlers[:]:
        if any(isinstance(f, SecretFilter) for f in handler.filters):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.fixture
def sample_report_lines() -> list[str]:
    """Labelled lines of a typical aerial roof report."""
    return list(SAMPLE_REPORT_LINES)


@pytest.fixture
def sample_report_text() -> str:
    """Sample report text as the scraper would return it."""
    return " ".join(SAMPLE_REPORT_LINES)


@pytest.fixture
def pdf_builder() -> Callable[[Sequence[Sequence[str]]], bytes]:
    """Factory for hand-built uncompressed PDFs."""
    return build_pdf


@pytest.fixture
def sample_pdf_bytes() -> bytes:
    """Single-page PDF holding the sample report lines."""
    return build_pdf([SAMPLE_REPORT_LINES])


@pytest.fixture
def fake_inference_factory() -> Callable[..., FakeInferenceService]:
    """Factory for FakeInferenceService instances."""
    return FakeInferenceService


# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config):
    """Pytest configuration hook."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow running tests")


def pytest_collection_modifyitems(config, items):
    """Add markers based on test location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
