"""
Preprocessing module for rendering report pages to images.
"""

from roof_measurements.preprocessing.pdf_rasterizer import (
    PageImage,
    PageRasterizer,
    PDFPageRangeError,
    PDFPageRasterizer,
    PDFRasterizationError,
    PDFSizeError,
)


__all__ = [
    "PageImage",
    "PageRasterizer",
    "PDFPageRasterizer",
    "PDFRasterizationError",
    "PDFSizeError",
    "PDFPageRangeError",
]
