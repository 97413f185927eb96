"""
Vision extraction coordinator.

Sends page images to an inference service once, parses the JSON answer
into a MeasurementRecord, and falls back to a simulated record when the
service or the response fails.
"""

from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Protocol, Sequence

from pydantic import ValidationError

from roof_measurements.config import get_logger, get_settings
from roof_measurements.extraction.errors import InferenceServiceError, ResponseParseError
from roof_measurements.extraction.response_parser import parse_vision_response
from roof_measurements.extraction.simulated import generate_simulated_record
from roof_measurements.prompts.measurement import build_measurement_system_prompt
from roof_measurements.schemas.measurement import (
    ExtractionStrategy,
    MeasurementOutcome,
    MeasurementRecord,
)


logger = get_logger(__name__)


class InferenceService(Protocol):
    """Capability that answers an instruction about a set of images."""

    def infer(
        self,
        images: Sequence[Any],
        instructions: str,
        *,
        model: str | None = None,
        timeout: float | None = None,
    ) -> str:
        ...


class VisionMeasurementExtractor:
    """
    Extracts measurements from page images with a vision model.

    The service is called exactly once per extraction and the call is
    bounded by a timeout. Failures never propagate; they produce a
    simulated outcome carrying the failure as its diagnostic.

    Example:
        extractor = VisionMeasurementExtractor(VisionClient())
        outcome = extractor.extract(pages, filename="report.pdf")
        if outcome.authentic:
            record = outcome.record
    """

    def __init__(
        self,
        service: InferenceService,
        timeout: float | None = None,
        placeholder_zero_ratio: float | None = None,
    ) -> None:
        """
        Initialize the coordinator.

        Args:
            service: Inference capability to call.
            timeout: Default timeout in seconds. Defaults to settings.
            placeholder_zero_ratio: Zero-field ratio above which an
                authentic record is flagged as likely placeholder data.
                Defaults to settings.
        """
        settings = get_settings()

        self._service = service
        self._timeout = timeout if timeout is not None else settings.vision.timeout
        self._placeholder_zero_ratio = (
            placeholder_zero_ratio
            if placeholder_zero_ratio is not None
            else settings.extraction.placeholder_zero_ratio
        )
        self._instructions = build_measurement_system_prompt()

    def extract(
        self,
        images: Sequence[Any],
        model: str | None = None,
        filename: str = "",
        timeout: float | None = None,
    ) -> MeasurementOutcome:
        """
        Extract a measurement record from page images.

        Args:
            images: Page images (PageImage, PNG bytes or data URIs).
            model: Model override passed to the service.
            filename: Original filename, used to pick a simulated record.
            timeout: Timeout override in seconds.

        Returns:
            Authentic outcome on success, simulated outcome otherwise.
        """
        effective_timeout = timeout if timeout is not None else self._timeout

        try:
            content = self._infer(images, model, effective_timeout)
        except InferenceServiceError as e:
            logger.warning(
                "vision_inference_failed",
                filename=filename,
                retryable=e.retryable,
                status_code=e.status_code,
                error=str(e),
            )
            return MeasurementOutcome.simulated_record(
                generate_simulated_record(filename),
                diagnostic=f"Inference service error: {e}",
            )

        try:
            payload = parse_vision_response(content)
        except ResponseParseError as e:
            logger.warning("vision_response_unparsable", filename=filename, error=str(e))
            return MeasurementOutcome.simulated_record(
                generate_simulated_record(filename),
                diagnostic=f"Response parse error: {e}",
            )

        try:
            record = MeasurementRecord.from_payload(payload)
        except ValidationError as e:
            logger.warning("vision_record_invalid", filename=filename, error=str(e))
            return MeasurementOutcome.simulated_record(
                generate_simulated_record(filename),
                diagnostic=f"Invalid measurement values: {e.error_count()} field error(s)",
            )

        note = f"Measurements extracted from {len(images)} page image(s)"

        zero_ratio = record.zero_field_ratio()
        if zero_ratio > self._placeholder_zero_ratio:
            logger.warning(
                "vision_record_mostly_zero",
                filename=filename,
                zero_ratio=round(zero_ratio, 2),
            )
            note += f"; warning: {zero_ratio:.0%} of numeric fields are zero"

        logger.info(
            "vision_extraction_complete",
            filename=filename,
            total_area=record.total_area,
            predominant_pitch=record.predominant_pitch,
        )

        return MeasurementOutcome.authentic_record(record, ExtractionStrategy.VISION, note=note)

    def _infer(self, images: Sequence[Any], model: str | None, timeout: float) -> str:
        """
        Call the service once, waiting at most ``timeout`` seconds.

        Raises:
            InferenceServiceError: On timeout or any service failure.
        """
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="vision-infer")
        future = executor.submit(
            self._service.infer,
            images,
            self._instructions,
            model=model,
            timeout=timeout,
        )
        try:
            content = future.result(timeout=timeout)
        except FutureTimeoutError as e:
            future.cancel()
            raise InferenceServiceError(
                f"Inference timed out after {timeout}s",
                retryable=True,
            ) from e
        except InferenceServiceError:
            raise
        except Exception as e:
            raise InferenceServiceError(f"Inference failed: {e}") from e
        finally:
            executor.shutdown(wait=False)

        if not isinstance(content, str):
            raise InferenceServiceError(
                f"Inference returned {type(content).__name__}, expected text"
            )
        return content
