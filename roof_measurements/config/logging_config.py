"""
Structured logging configuration using structlog.

Events from the pipeline and from third-party libraries (openai, httpx,
PyMuPDF) share one stdlib handler chain. Credentials are masked and long
values such as raw model output are clipped before anything is written.
"""

import logging
import logging.handlers
import re
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from roof_measurements.config.settings import LogFormat, get_settings


# Credentials that may leak through SDK error messages
SECRET_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\bsk-[A-Za-z0-9_\-]{8,}"), "[API-KEY-MASKED]"),
    (re.compile(r"\bBearer\s+[A-Za-z0-9._\-]{8,}", re.IGNORECASE), "Bearer [TOKEN-MASKED]"),
    (re.compile(r"(api[_-]?key['\"]?\s*[:=]\s*['\"]?)[^\s'\",]+", re.IGNORECASE), r"\1[MASKED]"),
]

QUIET_LOGGERS: tuple[str, ...] = ("httpx", "httpcore", "openai", "PIL")

MAX_VALUE_LENGTH = 2000


def mask_text(value: str) -> str:
    """
    Mask credentials in a single string.

    Args:
        value: Text that may contain an API key or bearer token.

    Returns:
        Text with credentials replaced by placeholders.
    """
    for pattern, replacement in SECRET_PATTERNS:
        value = pattern.sub(replacement, value)
    return value


def _mask_nested(value: Any) -> Any:
    if isinstance(value, str):
        return mask_text(value)
    if isinstance(value, dict):
        return {k: _mask_nested(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return type(value)(_mask_nested(item) for item in value)
    return value


def mask_secrets(
    logger: logging.Logger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Mask API keys and bearer tokens anywhere in an event."""
    return {key: _mask_nested(val) for key, val in event_dict.items()}


class ClipLongValues:
    """
    Processor that shortens oversized string values.

    Raw model responses and scraped report text can run to many
    kilobytes; only the head is kept, with the original length noted.
    """

    def __init__(self, max_length: int = MAX_VALUE_LENGTH) -> None:
        self._max_length = max_length

    def __call__(
        self,
        logger: logging.Logger,
        method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        for key, value in event_dict.items():
            if key != "event" and isinstance(value, str) and len(value) > self._max_length:
                event_dict[key] = f"{value[: self._max_length]}... [{len(value)} chars]"
        return event_dict


def add_app_context(
    logger: logging.Logger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Tag events with the application name, version and environment."""
    settings = get_settings()
    event_dict.setdefault("app", settings.name)
    event_dict.setdefault("version", settings.version)
    event_dict.setdefault("environment", settings.env.value)
    return event_dict


class SecretFilter(logging.Filter):
    """
    Logging filter that masks credentials in standard library records.

    Third-party loggers bypass the structlog processors, so their
    messages are masked here before they are emitted.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = mask_text(record.msg)
        if record.args and isinstance(record.args, tuple):
            record.args = tuple(
                mask_text(arg) if isinstance(arg, str) else arg for arg in record.args
            )
        return True


def build_shared_processors(log_format: LogFormat) -> list[Processor]:
    """
    Processors applied to both structlog and foreign stdlib events.

    Args:
        log_format: Output format; JSON events also carry app context.

    Returns:
        Processor chain without a renderer.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
    ]
    if log_format == LogFormat.JSON:
        processors.append(add_app_context)
    processors += [
        structlog.processors.format_exc_info,
        ClipLongValues(),
        mask_secrets,
    ]
    return processors


def build_renderer(log_format: LogFormat) -> Processor:
    """Return the final renderer for the configured format."""
    if log_format == LogFormat.JSON:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging() -> None:
    """
    Configure structlog and the root stdlib logger from settings.

    Output goes to stderr, plus a rotating file when LOG_FILE_PATH is
    set. Calling this again replaces previously installed handlers.
    """
    settings = get_settings()
    log_settings = settings.logging
    log_level = getattr(logging, log_settings.level.value)

    shared = build_shared_processors(log_settings.format)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[structlog.stdlib.ExtraAdder(), *shared],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            build_renderer(log_settings.format),
        ],
    )

    # stdout is reserved for CLI output
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_settings.file_path is not None:
        handlers.append(
            logging.handlers.RotatingFileHandler(
                filename=str(log_settings.file_path),
                maxBytes=log_settings.file_max_size_mb * 1024 * 1024,
                backupCount=log_settings.file_backup_count,
                encoding="utf-8",
            )
        )

    root_logger = logging.getLogger()
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(SecretFilter())
        root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structlog logger bound to a module name.

    Args:
        name: Logger name, usually ``__name__``.

    Returns:
        structlog BoundLogger instance.
    """
    return structlog.get_logger(name)
