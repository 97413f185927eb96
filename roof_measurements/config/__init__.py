"""
Configuration module for the roof measurement extraction pipeline.

Provides centralized configuration management using Pydantic Settings,
environment variable loading, and structured logging setup.
"""

from roof_measurements.config.logging_config import configure_logging, get_logger
from roof_measurements.config.settings import Environment, Settings, get_settings


__all__ = [
    "Settings",
    "get_settings",
    "Environment",
    "configure_logging",
    "get_logger",
]
