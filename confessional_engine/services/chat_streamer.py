"""Streaming chat relay."""

import inspect
from contextlib import aclosing
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from ..models.chat import ChatRequest
from ..models.engine import EngineConfig
from ..utils.loguru_config import ChatLogContext, get_logger
from .config_store import ConfigStore
from .ollama_client import OllamaClient
from .prompts import build_system_prompt, build_user_prompt
from .stream_parser import ChatStreamParser

logger = get_logger(__name__)

IncrementListener = Callable[[str], Union[None, Awaitable[None]]]
DoneListener = Callable[[], Union[None, Awaitable[None]]]

CHAT_OPTIONS = {"temperature": 0.8, "top_p": 0.6, "top_k": 2}


async def _notify(listener: Callable[..., Any], *args: Any) -> None:
    result = listener(*args)
    if inspect.isawaitable(result):
        await result


def build_chat_payload(model: str, request: ChatRequest) -> Dict[str, Any]:
    return {
        "model": model,
        "messages": [
            {"role": "system", "content": build_system_prompt(request.role)},
            {
                "role": "user",
                "content": build_user_prompt(
                    request.question,
                    request.context_summary,
                    request.project_meta,
                ),
            },
        ],
        "stream": True,
        **CHAT_OPTIONS,
    }


class ChatStreamer:
    """Relays a streaming chat completion to a listener."""

    def __init__(self, client: OllamaClient):
        self.client = client

    async def chat(
        self,
        config: EngineConfig,
        request: ChatRequest,
        emit: IncrementListener,
        emit_done: Optional[DoneListener] = None,
    ) -> str:
        """
        Stream an answer.

        Each increment is passed to ``emit`` as soon as it is parsed, and the
        next body chunk is not read before ``emit`` returns. ``emit_done``
        fires once after the body closed cleanly; on error it never fires and
        increments already emitted stay emitted.

        Returns:
            Full accumulated answer
        """
        # Both roles share the analysis model; role only changes prompt style
        model = ConfigStore.active_pack(config).analysis_model
        payload = build_chat_payload(model, request)
        parser = ChatStreamParser()
        parts = []

        with ChatLogContext("stream", model=model, role=request.role):
            stream = self.client.stream_chat_completion(config.server_url, payload)
            async with aclosing(stream):
                async for chunk in stream:
                    for increment in parser.feed(chunk):
                        parts.append(increment)
                        await _notify(emit, increment)

            for increment in parser.close():
                parts.append(increment)
                await _notify(emit, increment)

            if parser.skipped_frames:
                logger.debug(f"Skipped {parser.skipped_frames} malformed stream frames")

        if emit_done is not None:
            await _notify(emit_done)
        return "".join(parts)
