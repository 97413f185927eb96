"""
PDF page rasterization using PyMuPDF.

Thin adapter that renders selected report pages to PNG images for the
vision model. Pages are rendered sequentially from a single open
document.
"""

import base64
import io
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Protocol

import fitz  # PyMuPDF
from PIL import Image

from roof_measurements.config import get_logger, get_settings


logger = get_logger(__name__)


class PDFRasterizationError(Exception):
    """Base exception for PDF rasterization errors."""


class PDFSizeError(PDFRasterizationError):
    """Raised when the PDF exceeds the configured size limit."""


class PDFPageRangeError(PDFRasterizationError):
    """Raised when a requested page does not exist in the document."""


@dataclass(frozen=True, slots=True)
class PageImage:
    """
    Immutable container for a rendered page image.

    Attributes:
        page_number: One-indexed page number.
        image_bytes: PNG image data as bytes.
        width: Image width in pixels.
        height: Image height in pixels.
        scale: Zoom factor the page was rendered at.
    """

    page_number: int
    image_bytes: bytes
    width: int
    height: int
    scale: float = 1.0

    @property
    def base64_encoded(self) -> str:
        """Get base64-encoded image data for API transmission."""
        return base64.b64encode(self.image_bytes).decode("utf-8")

    @property
    def data_uri(self) -> str:
        """Get data URI for embedding in API requests."""
        return f"data:image/png;base64,{self.base64_encoded}"

    @property
    def size_kb(self) -> float:
        """Get image size in kilobytes."""
        return len(self.image_bytes) / 1024

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation (without raw bytes)."""
        return {
            "page_number": self.page_number,
            "width": self.width,
            "height": self.height,
            "scale": self.scale,
            "size_kb": self.size_kb,
        }


class PageRasterizer(Protocol):
    """Renders pages of a PDF byte buffer to images."""

    def render(
        self, document: bytes, page_number: int, scale: float | None = None
    ) -> PageImage:
        ...

    def render_pages(
        self,
        document: bytes,
        page_numbers: Iterable[int],
        scale: float | None = None,
    ) -> list[PageImage]:
        ...


class PDFPageRasterizer:
    """
    Page rasterizer backed by PyMuPDF and Pillow.

    Example:
        rasterizer = PDFPageRasterizer()
        pages = rasterizer.render_pages(pdf_bytes, [1, 9, 10])
        for page in pages:
            # Use page.data_uri for vision requests
            pass
    """

    def __init__(
        self,
        scale: float | None = None,
        max_file_size_mb: int | None = None,
    ) -> None:
        """
        Initialize the rasterizer.

        Args:
            scale: Default zoom factor. Defaults to settings value.
            max_file_size_mb: Maximum PDF size in MB. Defaults to settings value.
        """
        settings = get_settings()

        self._scale = scale or settings.pdf.scale
        self._max_file_size_bytes = (
            max_file_size_mb * 1024 * 1024
            if max_file_size_mb
            else settings.pdf.max_file_size_bytes
        )

    @contextmanager
    def open_document(self, document: bytes) -> Iterator[fitz.Document]:
        """
        Context manager for safely opening and closing a PDF byte buffer.

        Args:
            document: Raw PDF bytes.

        Yields:
            Open PyMuPDF Document instance.

        Raises:
            PDFSizeError: If the buffer exceeds the size limit.
            PDFRasterizationError: If the buffer is not a readable PDF.
        """
        if len(document) > self._max_file_size_bytes:
            raise PDFSizeError(
                f"PDF size {len(document)} bytes exceeds limit of "
                f"{self._max_file_size_bytes} bytes"
            )

        try:
            doc = fitz.open(stream=document, filetype="pdf")
        except Exception as e:
            raise PDFRasterizationError(f"Cannot open PDF: {e}") from e

        try:
            yield doc
        finally:
            doc.close()

    def render(
        self,
        document: bytes,
        page_number: int,
        scale: float | None = None,
    ) -> PageImage:
        """
        Render a single page.

        Args:
            document: Raw PDF bytes.
            page_number: One-indexed page number.
            scale: Zoom factor. Defaults to the rasterizer's scale.

        Returns:
            PageImage containing PNG data.

        Raises:
            PDFRasterizationError: If the document or page cannot be rendered.
        """
        with self.open_document(document) as doc:
            return self._render_page(doc, page_number, scale or self._scale)

    def render_pages(
        self,
        document: bytes,
        page_numbers: Iterable[int],
        scale: float | None = None,
    ) -> list[PageImage]:
        """
        Render several pages, skipping pages that do not exist or fail.

        Args:
            document: Raw PDF bytes.
            page_numbers: One-indexed page numbers, in output order.
            scale: Zoom factor. Defaults to the rasterizer's scale.

        Returns:
            Rendered pages in the requested order; may be empty.

        Raises:
            PDFRasterizationError: If the document itself cannot be opened.
        """
        zoom = scale or self._scale
        requested = list(page_numbers)
        pages: list[PageImage] = []

        with self.open_document(document) as doc:
            for page_number in requested:
                try:
                    pages.append(self._render_page(doc, page_number, zoom))
                except PDFRasterizationError as e:
                    logger.warning(
                        "page_render_skipped",
                        page_number=page_number,
                        page_count=doc.page_count,
                        error=str(e),
                    )

        logger.info("pages_rendered", requested=len(requested), rendered=len(pages), scale=zoom)
        return pages

    def _render_page(self, doc: fitz.Document, page_number: int, scale: float) -> PageImage:
        """Render a one-indexed page of an open document to PNG."""
        if page_number < 1 or page_number > doc.page_count:
            raise PDFPageRangeError(
                f"Page {page_number} out of range (document has {doc.page_count} pages)"
            )

        try:
            page = doc[page_number - 1]

            pixmap = page.get_pixmap(
                matrix=fitz.Matrix(scale, scale),
                colorspace=fitz.csRGB,
                alpha=False,
            )

            img = Image.frombytes(
                "RGB",
                (pixmap.width, pixmap.height),
                pixmap.samples,
            )

            img_buffer = io.BytesIO()
            img.save(img_buffer, format="PNG", optimize=True)

            page_image = PageImage(
                page_number=page_number,
                image_bytes=img_buffer.getvalue(),
                width=pixmap.width,
                height=pixmap.height,
                scale=scale,
            )

        except Exception as e:
            raise PDFRasterizationError(f"Failed to render page {page_number}: {e}") from e

        logger.debug(
            "page_rendered",
            page_number=page_number,
            width=page_image.width,
            height=page_image.height,
            size_kb=page_image.size_kb,
        )

        return page_image
