"""
Vision inference client for OpenAI-compatible chat completion APIs.

Sends report page images with a fixed instruction and returns the raw
model text. Transport failures are mapped onto InferenceServiceError;
the client never retries.
"""

import base64
import threading
import time
import uuid
from enum import Enum
from typing import Any, Sequence

import httpx
from openai import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    OpenAI,
    OpenAIError,
    RateLimitError,
)

from roof_measurements.config import get_logger, get_settings
from roof_measurements.extraction.errors import InferenceServiceError
from roof_measurements.preprocessing.pdf_rasterizer import PageImage
from roof_measurements.prompts.measurement import build_measurement_user_prompt


logger = get_logger(__name__)


ImageInput = PageImage | bytes | str


class MessageRole(str, Enum):
    """Chat message roles."""

    SYSTEM = "system"
    USER = "user"


def to_image_url(image: ImageInput) -> str:
    """
    Convert an image input to a URL accepted by the chat API.

    Args:
        image: Rendered PageImage, raw PNG bytes, a data URI, an http(s)
            URL or bare base64 PNG data.

    Returns:
        Data URI or URL string.
    """
    if isinstance(image, PageImage):
        return image.data_uri
    if isinstance(image, (bytes, bytearray)):
        return f"data:image/png;base64,{base64.b64encode(bytes(image)).decode('utf-8')}"
    if image.startswith(("data:", "http://", "https://")):
        return image
    return f"data:image/png;base64,{image}"


class VisionClient:
    """
    Client for an OpenAI-compatible vision model.

    Example:
        with VisionClient() as client:
            if client.is_healthy():
                text = client.infer(pages, build_measurement_system_prompt())
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
        timeout: float | None = None,
        image_detail: str | None = None,
    ) -> None:
        """
        Initialize the vision client.

        Args:
            base_url: API base URL. Defaults to settings.
            api_key: API key. Defaults to settings.
            model: Default model identifier. Defaults to settings.
            max_tokens: Response token limit. Defaults to settings.
            temperature: Sampling temperature. Defaults to settings.
            timeout: Request timeout in seconds. Defaults to settings.
            image_detail: Image detail level. Defaults to settings.
        """
        settings = get_settings()

        self._base_url = base_url or settings.vision.base_url_str
        self._api_key = api_key or settings.vision.api_key.get_secret_value()
        self._model = model or settings.vision.model
        self._max_tokens = max_tokens or settings.vision.max_tokens
        self._temperature = (
            temperature if temperature is not None else settings.vision.temperature
        )
        self._timeout = timeout if timeout is not None else settings.vision.timeout
        self._image_detail = image_detail or settings.vision.image_detail.value

        self._client: OpenAI | None = None
        self._client_lock = threading.Lock()

        # HTTP client for health checks
        self._http_client = httpx.Client(
            base_url=self._base_url,
            timeout=10.0,
            headers={"Authorization": f"Bearer {self._api_key}"} if self._api_key else None,
        )

        self._closed = False

        logger.info(
            "vision_client_initialized",
            base_url=self._base_url,
            model=self._model,
            timeout=self._timeout,
        )

    @property
    def model(self) -> str:
        """Default model identifier."""
        return self._model

    def _get_client(self) -> OpenAI:
        """Get the lazily created OpenAI client."""
        if self._client is None:
            with self._client_lock:
                if self._client is None:
                    self._client = OpenAI(
                        base_url=self._base_url,
                        api_key=self._api_key or "not-needed",
                        timeout=float(self._timeout),
                        max_retries=0,
                    )
        return self._client

    def is_healthy(self) -> bool:
        """
        Check if the inference service is reachable.

        Returns:
            True if the models endpoint responds with 200, False otherwise.
        """
        try:
            response = self._http_client.get("models")
        except httpx.HTTPError as e:
            logger.debug("vision_health_check_failed", error=str(e))
            return False
        return response.status_code == 200

    def infer(
        self,
        images: Sequence[ImageInput],
        instructions: str,
        *,
        model: str | None = None,
        timeout: float | None = None,
    ) -> str:
        """
        Send page images with an instruction and return the model text.

        Args:
            images: Page images to analyse, in order.
            instructions: System instruction for the model.
            model: Model override for this request.
            timeout: Request timeout override in seconds.

        Returns:
            Raw response content (may be empty).

        Raises:
            InferenceServiceError: If the request fails.
        """
        request_id = f"req_{uuid.uuid4().hex[:12]}"
        model_name = model or self._model
        start_time = time.perf_counter()

        user_content: list[dict[str, Any]] = [
            {
                "type": "image_url",
                "image_url": {
                    "url": to_image_url(image),
                    "detail": self._image_detail,
                },
            }
            for image in images
        ]
        user_content.append(
            {
                "type": "text",
                "text": build_measurement_user_prompt(len(images)),
            }
        )

        messages: list[dict[str, Any]] = [
            {"role": MessageRole.SYSTEM.value, "content": instructions},
            {"role": MessageRole.USER.value, "content": user_content},
        ]

        try:
            response = self._get_client().chat.completions.create(
                model=model_name,
                messages=messages,
                max_tokens=self._max_tokens,
                temperature=self._temperature,
                timeout=timeout if timeout is not None else self._timeout,
            )
        except OpenAIError as e:
            error = self._map_error(e)
            logger.warning(
                "vision_request_failed",
                request_id=request_id,
                model=model_name,
                retryable=error.retryable,
                status_code=error.status_code,
                error=str(e),
            )
            raise error from e

        latency_ms = int((time.perf_counter() - start_time) * 1000)
        content = ""
        if response.choices:
            content = response.choices[0].message.content or ""

        logger.info(
            "vision_request_complete",
            request_id=request_id,
            model=model_name,
            images=len(images),
            latency_ms=latency_ms,
            tokens=response.usage.total_tokens if response.usage else 0,
            content_length=len(content),
        )

        return content

    def _map_error(self, error: OpenAIError) -> InferenceServiceError:
        """Translate an SDK error into an InferenceServiceError."""
        # APITimeoutError subclasses APIConnectionError
        if isinstance(error, APITimeoutError):
            return InferenceServiceError(f"Request timed out: {error}", retryable=True)
        if isinstance(error, APIConnectionError):
            return InferenceServiceError(f"Connection failed: {error}", retryable=True)
        if isinstance(error, RateLimitError):
            return InferenceServiceError(
                f"Rate limit exceeded: {error}",
                retryable=True,
                status_code=error.status_code,
            )
        if isinstance(error, APIStatusError):
            return InferenceServiceError(
                f"Service returned HTTP {error.status_code}: {error}",
                retryable=error.status_code >= 500,
                status_code=error.status_code,
            )
        return InferenceServiceError(f"Inference request failed: {error}")

    def close(self) -> None:
        """Close client connections and release resources."""
        if self._closed:
            return

        self._closed = True
        self._http_client.close()
        if self._client is not None:
            self._client.close()

        logger.debug("vision_client_closed")

    def __enter__(self) -> "VisionClient":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit."""
        self.close()
