"""Ollama HTTP API client with a shared connection pool and bounded timeouts."""

import asyncio
from typing import Any, AsyncIterator, Dict, List, Optional

import aiohttp
from aiohttp import ClientTimeout

from ..core.config import settings
from ..core.exceptions import (
    PartialInstallFailure,
    ProtocolError,
    ServerError,
    ServerUnavailableError,
)
from ..utils.loguru_config import get_logger

logger = get_logger(__name__)

TRANSPORT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError)


def _is_success(status: int) -> bool:
    return 200 <= status < 300


class OllamaClient:
    """Issues requests to an Ollama server.

    The base URL is passed per call because the engine config is re-read for
    every operation. Every request carries its own total timeout.
    """

    def __init__(
        self,
        probe_timeout: float = None,
        chat_timeout: float = None,
        report_timeout: float = None,
        pull_timeout: float = None,
        connector_limit: int = 20,
    ):
        self.probe_timeout = probe_timeout or settings.probe_timeout
        self.chat_timeout = chat_timeout or settings.chat_timeout
        self.report_timeout = report_timeout or settings.report_timeout
        self.pull_timeout = pull_timeout or settings.pull_timeout
        self.connector_limit = connector_limit

        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session with connection pooling."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=self.connector_limit,
                limit_per_host=10,
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                headers={"Content-Type": "application/json"},
            )
        return self._session

    async def close(self):
        """Close the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def probe(self, base_url: str) -> bool:
        """Check whether the server answers the model listing with a 2xx."""
        try:
            session = await self._get_session()
            async with session.get(
                f"{base_url}/api/tags",
                timeout=ClientTimeout(total=self.probe_timeout),
            ) as response:
                return _is_success(response.status)
        except TRANSPORT_ERRORS as e:
            logger.debug(f"Ollama not reachable at {base_url}: {e!r}")
            return False

    async def list_installed(self, base_url: str) -> List[str]:
        """Names of the models installed on the server, in server order."""
        try:
            session = await self._get_session()
            async with session.get(
                f"{base_url}/api/tags",
                timeout=ClientTimeout(total=self.probe_timeout),
            ) as response:
                if not _is_success(response.status):
                    body = await response.text()
                    raise ServerError(
                        response.status,
                        body,
                        message=f"Ollama returned status: {response.status}",
                    )
                try:
                    data = await response.json(content_type=None)
                except ValueError as e:
                    raise ProtocolError(f"Failed to parse Ollama response: {e}") from e
        except TRANSPORT_ERRORS as e:
            raise ServerUnavailableError(
                f"Failed to connect to Ollama: {e}",
                timed_out=isinstance(e, asyncio.TimeoutError),
            ) from e

        models = data.get("models") if isinstance(data, dict) else None
        if not isinstance(models, list):
            raise ProtocolError("Invalid response format from Ollama")

        names = []
        for model_data in models:
            name = model_data.get("name") if isinstance(model_data, dict) else None
            if not isinstance(name, str):
                logger.warning(f"Skipping model entry without a name: {model_data}")
                continue
            names.append(name)
        return names

    async def pull_model(self, base_url: str, model_name: str) -> None:
        """Pull/download a model, blocking until the server reports completion."""
        payload = {"name": model_name, "stream": False}
        try:
            session = await self._get_session()
            async with session.post(
                f"{base_url}/api/pull",
                json=payload,
                timeout=ClientTimeout(total=self.pull_timeout),
            ) as response:
                if not _is_success(response.status):
                    error_text = await response.text()
                    logger.error(f"Failed to pull model {model_name}: {response.status} {error_text}")
                    raise PartialInstallFailure(model_name, f"{response.status} {error_text}".strip())
        except TRANSPORT_ERRORS as e:
            logger.error(f"Error pulling model {model_name}: {e!r}")
            raise PartialInstallFailure(model_name, str(e) or type(e).__name__) from e

    async def stream_chat_completion(self, base_url: str, payload: Dict[str, Any]) -> AsyncIterator[bytes]:
        """Yield raw body chunks of a streaming chat completion as they arrive."""
        session = await self._get_session()
        try:
            async with session.post(
                f"{base_url}/v1/chat/completions",
                json=payload,
                timeout=ClientTimeout(total=self.chat_timeout),
            ) as response:
                if not _is_success(response.status):
                    error_text = await response.text()
                    raise ServerError(response.status, error_text)

                async for chunk in response.content.iter_any():
                    yield chunk
        except TRANSPORT_ERRORS as e:
            raise ServerUnavailableError(
                f"Stream error: {e!r}",
                timed_out=isinstance(e, asyncio.TimeoutError),
            ) from e

    async def chat_completion(self, base_url: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Run a non-streaming chat completion and return the decoded body."""
        try:
            session = await self._get_session()
            async with session.post(
                f"{base_url}/v1/chat/completions",
                json=payload,
                timeout=ClientTimeout(total=self.report_timeout),
            ) as response:
                if not _is_success(response.status):
                    error_text = await response.text()
                    raise ServerError(response.status, error_text)
                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    raise ProtocolError(f"Failed to parse response: {e}") from e
        except TRANSPORT_ERRORS as e:
            raise ServerUnavailableError(
                f"Failed to call Ollama: {e!r}",
                timed_out=isinstance(e, asyncio.TimeoutError),
            ) from e
