"""Engine endpoints: packs, chat and reports."""

import asyncio
import contextlib
from typing import AsyncIterator, List, Optional, Tuple

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from ...core.exceptions import EngineError, unexpected_error_dict
from ...models.chat import ChatRequest, ChatResponse, ReportRequest, ReportResponse
from ...models.engine import EngineConfig, EngineHealth
from ...services.engine import EngineService
from ...utils.loguru_config import get_logger
from ...utils.streaming import sse_event
from ..dependencies import get_engine

logger = get_logger(__name__)

router = APIRouter(prefix="/engine", tags=["engine"])

# Bounded so a slow client slows down reading from the inference server
CHAT_QUEUE_SIZE = 64


@router.get("/health", response_model=EngineHealth)
async def engine_health(engine: EngineService = Depends(get_engine)) -> EngineHealth:
    """Recompute engine health."""
    return await engine.health()


@router.get("/config", response_model=EngineConfig)
async def engine_config(engine: EngineService = Depends(get_engine)) -> EngineConfig:
    """Current engine config document."""
    return engine.load_config()


@router.post("/packs/{pack_id}/install", response_model=EngineHealth)
async def install_pack(pack_id: str, engine: EngineService = Depends(get_engine)) -> EngineHealth:
    """Pull every model of a pack and activate it."""
    logger.info(f"Installing pack {pack_id}")
    return await engine.install_pack(pack_id)


@router.post("/chat")
async def chat_stream(request: ChatRequest, engine: EngineService = Depends(get_engine)) -> StreamingResponse:
    """
    Stream an answer as server-sent events.

    ``chunk`` events carry increments, one ``done`` event carries the full
    answer. ``error`` replaces ``done`` when the engine fails.
    """
    queue: "asyncio.Queue[Optional[Tuple[str, dict]]]" = asyncio.Queue(maxsize=CHAT_QUEUE_SIZE)
    parts: List[str] = []

    async def on_chunk(increment: str) -> None:
        parts.append(increment)
        await queue.put(("chunk", {"content": increment}))

    async def on_done() -> None:
        await queue.put(("done", {"content": "".join(parts)}))

    async def relay() -> None:
        try:
            await engine.chat(request, on_chunk, on_done)
        except EngineError as e:
            logger.warning(f"Chat failed: {e}")
            await queue.put(("error", e.to_dict()))
        except Exception as e:
            logger.error(f"Unexpected chat failure: {e}", exc_info=True)
            await queue.put(("error", unexpected_error_dict(e)))
        # Not reached on cancellation; nobody reads the queue then
        await queue.put(None)

    async def event_stream() -> AsyncIterator[bytes]:
        task = asyncio.create_task(relay())
        try:
            while True:
                item = await queue.get()
                if item is None:
                    break
                event, data = item
                yield sse_event(event, data)
        finally:
            if not task.done():
                task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

    return StreamingResponse(event_stream(), media_type="text/event-stream")


@router.post("/chat/sync", response_model=ChatResponse)
async def chat_sync(request: ChatRequest, engine: EngineService = Depends(get_engine)) -> ChatResponse:
    """Answer without streaming."""

    async def discard(increment: str) -> None:
        return None

    content = await engine.chat(request, discard)
    return ChatResponse(content=content)


@router.post("/report", response_model=ReportResponse)
async def generate_report(request: ReportRequest, engine: EngineService = Depends(get_engine)) -> ReportResponse:
    """Draft a markdown report."""
    return await engine.generate_report(request)
