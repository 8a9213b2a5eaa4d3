"""Centralized logging configuration with loguru."""

import sys
from typing import Any

from loguru import logger

from ..core.config import get_settings

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}"


def setup_loguru() -> None:
    """Setup loguru logging: console always, rotating files when enabled."""
    settings = get_settings()

    # Remove default handler
    logger.remove()

    # Console logging with colors
    logger.add(
        sys.stdout,
        format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
               "<level>{level: <8}</level> | "
               "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
               "<level>{message}</level>",
        level="DEBUG" if settings.debug else settings.log_level.upper(),
        colorize=True,
        backtrace=True,
        diagnose=settings.debug,
    )

    if not settings.log_to_file:
        logger.info("Loguru logging initialized (console only)")
        return

    logs_dir = settings.resolved_logs_dir
    logs_dir.mkdir(parents=True, exist_ok=True)

    # General application log
    logger.add(
        logs_dir / "app.log",
        format=FILE_FORMAT,
        level="DEBUG",
        rotation="20 MB",
        retention="14 days",
        compression="gz",
    )

    # Error log
    logger.add(
        logs_dir / "errors.log",
        format=FILE_FORMAT,
        level="ERROR",
        rotation="10 MB",
        retention="30 days",
        compression="gz",
        backtrace=True,
    )

    # Inference server traffic
    logger.add(
        logs_dir / "engine.log",
        format=FILE_FORMAT,
        level="DEBUG",
        rotation="20 MB",
        retention="7 days",
        compression="gz",
        filter=lambda record: "services" in record["name"] or "ollama" in record["message"].lower(),
    )

    logger.info("Loguru logging initialized")
    logger.info(f"Logs directory: {logs_dir}")
    logger.info(f"Debug mode: {settings.debug}")


def get_logger(name: str) -> Any:
    """Get logger instance with context."""
    return logger.bind(name=name)


class LogContext:
    """Context manager for detailed operation logging."""

    def __init__(self, operation: str, **context):
        self.operation = operation
        self.context = context
        self.logger = logger.bind(operation=operation, **context)

    def __enter__(self):
        self.logger.info(f"Starting {self.operation}")
        return self.logger

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            self.logger.error(f"{self.operation} failed: {exc_val}")
        else:
            self.logger.info(f"{self.operation} completed successfully")


class ChatLogContext(LogContext):
    """Specialized context for chat operations."""

    def __init__(self, operation: str, model: str = None, role: str = None, **context):
        super().__init__(
            operation=f"Chat: {operation}",
            model=model,
            role=role,
            **context
        )


class EngineLogContext(LogContext):
    """Specialized context for inference server operations."""

    def __init__(self, operation: str, model: str = None, base_url: str = None, **context):
        super().__init__(
            operation=f"Engine: {operation}",
            model=model,
            base_url=base_url,
            **context
        )
