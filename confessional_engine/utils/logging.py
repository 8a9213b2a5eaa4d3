"""Logging middleware built on Loguru."""

from typing import Any
import time
import uuid

from .loguru_config import setup_loguru, get_logger


def setup_logging() -> None:
    """Initialize Loguru-based logging."""
    setup_loguru()


class LoggingMiddleware:
    """HTTP logging middleware using Loguru with request-id context."""

    def __init__(self, app: Any):
        self.app = app
        self.base_logger = get_logger("middleware.logging")

    async def __call__(self, scope, receive, send):
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        method = scope.get("method", "?")
        path = scope.get("path", "?")
        client = scope.get("client") or ("unknown", 0)
        request_id = str(uuid.uuid4())

        logger = self.base_logger.bind(
            request_id=request_id,
            method=method,
            path=path,
            client_ip=client[0],
        )

        scope.setdefault("state", {})
        scope["state"]["request_id"] = request_id

        start_time = time.time()
        logger.info(f"Request started: {method} {path}")

        async def send_wrapper(message):
            if message.get("type") == "http.response.start":
                status_code = message.get("status", 0)
                processing_time = time.time() - start_time
                logger.bind(status_code=status_code, duration_ms=int(processing_time * 1000)).info(
                    f"Request completed: {method} {path} -> {status_code}"
                )
            await send(message)

        await self.app(scope, receive, send_wrapper)
