"""Utility functions."""

from .logging import LoggingMiddleware, setup_logging
from .loguru_config import EngineLogContext, get_logger

__all__ = [
    "EngineLogContext",
    "LoggingMiddleware",
    "get_logger",
    "setup_logging",
]
