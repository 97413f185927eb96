"""
Pipeline runner for roof measurement extraction.

Provides the single entry point other subsystems call:
- vision path when page images are supplied
- text-pattern path over raw PDF bytes otherwise
- simulated fallback when neither can produce a record
"""

from pathlib import Path
from typing import Any, Sequence

from roof_measurements.client.vision_client import VisionClient
from roof_measurements.config import get_logger, get_settings
from roof_measurements.extraction.derived_fields import resolve_derived_fields
from roof_measurements.extraction.errors import InvalidInputError
from roof_measurements.extraction.field_patterns import extract_fields
from roof_measurements.extraction.simulated import generate_simulated_record
from roof_measurements.extraction.text_scraper import scrape_text
from roof_measurements.extraction.vision_extractor import (
    InferenceService,
    VisionMeasurementExtractor,
)
from roof_measurements.preprocessing.pdf_rasterizer import (
    PageRasterizer,
    PDFPageRasterizer,
    PDFRasterizationError,
)
from roof_measurements.schemas.measurement import ExtractionStrategy, MeasurementOutcome


logger = get_logger(__name__)


class MeasurementPipeline:
    """
    Main entry point for extracting roof measurements.

    Only InvalidInputError is raised to callers; every other failure
    yields a simulated outcome with a diagnostic.

    Example:
        pipeline = MeasurementPipeline()
        outcome = pipeline.extract(document=pdf_bytes, filename="report.pdf")
        payload = outcome.to_dict()
    """

    def __init__(
        self,
        inference_service: InferenceService | None = None,
        rasterizer: PageRasterizer | None = None,
        timeout: float | None = None,
    ) -> None:
        """
        Initialize the pipeline.

        Args:
            inference_service: Vision capability. A VisionClient is created
                on first vision use when omitted.
            rasterizer: Page rasterizer for extract_file with vision.
            timeout: Default inference timeout in seconds.
        """
        self._settings = get_settings()
        self._inference_service = inference_service
        self._rasterizer = rasterizer
        self._timeout = timeout
        self._vision_extractor: VisionMeasurementExtractor | None = None

    def _get_vision_extractor(self) -> VisionMeasurementExtractor:
        """Get the lazily created vision coordinator."""
        if self._vision_extractor is None:
            if self._inference_service is None:
                self._inference_service = VisionClient()
            self._vision_extractor = VisionMeasurementExtractor(
                self._inference_service,
                timeout=self._timeout,
            )
        return self._vision_extractor

    def _get_rasterizer(self) -> PageRasterizer:
        if self._rasterizer is None:
            self._rasterizer = PDFPageRasterizer()
        return self._rasterizer

    def extract(
        self,
        document: bytes | None = None,
        images: Sequence[Any] | None = None,
        filename: str = "",
        model: str | None = None,
        timeout: float | None = None,
    ) -> MeasurementOutcome:
        """
        Extract a measurement record from page images or PDF bytes.

        Args:
            document: Raw PDF bytes for the text-pattern path.
            images: Page images for the vision path; take precedence.
            filename: Original filename, used to pick a simulated record.
            model: Vision model override.
            timeout: Inference timeout override in seconds.

        Returns:
            MeasurementOutcome with provenance.

        Raises:
            InvalidInputError: If neither images nor bytes were supplied.
        """
        if not images and document is None:
            raise InvalidInputError("Either page images or document bytes are required")

        if images:
            logger.info("starting_vision_extraction", filename=filename, images=len(images))
            return self._get_vision_extractor().extract(
                images,
                model=model,
                filename=filename,
                timeout=timeout,
            )

        logger.info("starting_text_extraction", filename=filename)
        return self._extract_text(document, filename)

    def extract_file(
        self,
        path: str | Path,
        use_vision: bool = False,
        pages: Sequence[int] | None = None,
        model: str | None = None,
        timeout: float | None = None,
    ) -> MeasurementOutcome:
        """
        Extract measurements from a PDF file on disk.

        Args:
            path: Path to the PDF report.
            use_vision: Render pages and take the vision path.
            pages: One-indexed pages to render. Defaults to settings.
            model: Vision model override.
            timeout: Inference timeout override in seconds.

        Returns:
            MeasurementOutcome with provenance.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        pdf_path = Path(path)
        if not pdf_path.exists():
            raise FileNotFoundError(f"PDF file not found: {pdf_path}")

        document = pdf_path.read_bytes()

        if use_vision:
            page_numbers = list(pages) if pages else self._settings.pdf.pages
            try:
                images = self._get_rasterizer().render_pages(document, page_numbers)
            except PDFRasterizationError as e:
                logger.warning("page_rendering_failed", filename=pdf_path.name, error=str(e))
                images = []

            if images:
                return self.extract(
                    images=images,
                    filename=pdf_path.name,
                    model=model,
                    timeout=timeout,
                )

            logger.warning("vision_skipped_no_pages", filename=pdf_path.name, pages=page_numbers)

        return self.extract(document=document, filename=pdf_path.name)

    def _extract_text(self, document: bytes, filename: str) -> MeasurementOutcome:
        """Run scrape, pattern extraction and derivation over raw bytes."""
        text = scrape_text(document)
        if not text:
            logger.warning("text_scrape_empty", filename=filename)
            return MeasurementOutcome.simulated_record(
                generate_simulated_record(filename),
                diagnostic="No text could be scraped from the document",
            )

        partial = extract_fields(text)
        if partial.is_empty:
            logger.warning("text_patterns_unmatched", filename=filename, text_length=len(text))
            return MeasurementOutcome.simulated_record(
                generate_simulated_record(filename),
                diagnostic="No measurement labels matched the scraped text",
            )

        record = resolve_derived_fields(partial).to_record()
        matched = len(partial.matched_fields) + len(partial.areas_by_pitch)

        logger.info(
            "text_extraction_complete",
            filename=filename,
            matched_fields=partial.matched_fields,
            pitch_areas=len(partial.areas_by_pitch),
            total_area=record.total_area,
        )

        return MeasurementOutcome.authentic_record(
            record,
            ExtractionStrategy.TEXT_PATTERN,
            note=f"Measurements extracted from document text ({matched} values matched)",
        )


def extract_measurements(
    path: str | Path,
    use_vision: bool = False,
) -> dict[str, Any]:
    """
    Convenience function for simple measurement extraction.

    Args:
        path: Path to the PDF report.
        use_vision: Whether to use the vision path.

    Returns:
        Outcome dictionary for downstream consumers.
    """
    pipeline = MeasurementPipeline()
    return pipeline.extract_file(path, use_vision=use_vision).to_dict()
