"""
Exception hierarchy for the measurement extraction pipeline.

Only InvalidInputError ever reaches a caller of the pipeline façade;
every other error is raised and recovered inside the extraction stages.
"""


class MeasurementExtractionError(Exception):
    """Base exception for measurement extraction errors."""


class ScrapeFailure(MeasurementExtractionError):
    """Raised when a document byte stream cannot be decoded for scraping."""


class PatternMissError(MeasurementExtractionError):
    """Raised when no pattern of a field's group matched the scraped text."""

    def __init__(self, field_name: str) -> None:
        super().__init__(f"No pattern matched for field '{field_name}'")
        self.field_name = field_name


class InferenceServiceError(MeasurementExtractionError):
    """
    Raised when the vision inference service call fails.

    Attributes:
        retryable: Whether the failure is transient (timeout, connection,
            rate limit, 5xx). The pipeline never retries on its own; the flag
            is informational for callers.
        status_code: HTTP status code reported by the service, if any.
    """

    def __init__(
        self,
        message: str,
        retryable: bool = False,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.retryable = retryable
        self.status_code = status_code


class ResponseParseError(MeasurementExtractionError):
    """Raised when a vision response holds no parsable JSON object."""

    def __init__(self, message: str, raw_response: str = "") -> None:
        super().__init__(message)
        self.raw_response = raw_response


class InvalidInputError(MeasurementExtractionError):
    """Raised when neither page images nor document bytes were supplied."""
