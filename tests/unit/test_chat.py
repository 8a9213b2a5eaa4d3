"""Tests for the streaming chat relay."""

import asyncio
import json

import pytest

from confessional_engine.core.exceptions import ConfigError, ServerError, ServerUnavailableError
from confessional_engine.models.chat import ChatRequest, ProjectMeta
from confessional_engine.services.engine import EngineService
from confessional_engine.services.ollama_client import OllamaClient


def frame(content: str) -> bytes:
    return ("data: " + json.dumps({"choices": [{"delta": {"content": content}}]}) + "\n").encode()


def make_request(role: str = "analysis") -> ChatRequest:
    return ChatRequest(
        role=role,
        question="Which region grew fastest?",
        context_summary="Table sales: North +12%, South -3%",
        project_meta=ProjectMeta(name="Sales 2024", audience="exec"),
    )


class Recorder:
    """Collects listener events in order."""

    def __init__(self):
        self.events = []

    def emit(self, increment: str) -> None:
        self.events.append(("chunk", increment))

    def emit_done(self) -> None:
        self.events.append(("done",))


@pytest.mark.asyncio
async def test_chat_relays_increments_then_done(engine, configure, fake_ollama):
    configure(fake_ollama.base_url)
    body = frame("North ") + frame("grew ") + frame("12%.")
    fake_ollama.chat_chunks = [body[:10], body[10:37], body[37:]]
    recorder = Recorder()

    answer = await engine.chat(make_request(), recorder.emit, recorder.emit_done)

    assert answer == "North grew 12%."
    assert recorder.events == [("chunk", "North "), ("chunk", "grew "), ("chunk", "12%."), ("done",)]


@pytest.mark.asyncio
async def test_chat_request_payload(engine, configure, fake_ollama):
    configure(fake_ollama.base_url)
    fake_ollama.chat_chunks = [frame("ok")]

    await engine.chat(make_request(), Recorder().emit)

    payload = fake_ollama.chat_requests[0]
    assert payload["model"] == "model-a"
    assert payload["stream"] is True
    assert payload["temperature"] == 0.8
    assert payload["top_p"] == 0.6
    assert payload["top_k"] == 2
    system, user = payload["messages"]
    assert system["role"] == "system"
    assert "CONFESSION" in system["content"]
    assert "data gossip" not in system["content"]
    assert user["role"] == "user"
    assert "Project name: Sales 2024" in user["content"]
    assert "Intended audience: exec" in user["content"]
    assert "North +12%, South -3%" in user["content"]
    assert user["content"].endswith("Which region grew fastest?")


@pytest.mark.asyncio
async def test_gossip_uses_analysis_model_with_style(engine, configure, fake_ollama):
    configure(fake_ollama.base_url)
    fake_ollama.chat_chunks = [frame("ok")]

    await engine.chat(make_request(role="gossip"), Recorder().emit)

    payload = fake_ollama.chat_requests[0]
    assert payload["model"] == "model-a"
    assert "data gossip" in payload["messages"][0]["content"]


@pytest.mark.asyncio
async def test_done_sentinel_is_advisory(engine, configure, fake_ollama):
    """Frames after [DONE] still arrive; done fires once at body close."""
    configure(fake_ollama.base_url)
    fake_ollama.chat_chunks = [frame("a") + b"data: [DONE]\n", frame("b")]
    recorder = Recorder()

    answer = await engine.chat(make_request(), recorder.emit, recorder.emit_done)

    assert answer == "ab"
    assert recorder.events == [("chunk", "a"), ("chunk", "b"), ("done",)]


@pytest.mark.asyncio
async def test_malformed_frames_skipped(engine, configure, fake_ollama):
    configure(fake_ollama.base_url)
    fake_ollama.chat_chunks = [b"data: {broken\n", frame("fine"), b'data: {"choices": []}\n']
    recorder = Recorder()

    answer = await engine.chat(make_request(), recorder.emit, recorder.emit_done)

    assert answer == "fine"
    assert recorder.events == [("chunk", "fine"), ("done",)]


@pytest.mark.asyncio
async def test_async_listener_is_awaited(engine, configure, fake_ollama):
    configure(fake_ollama.base_url)
    fake_ollama.chat_chunks = [frame("x"), frame("y")]
    seen = []

    async def emit(increment):
        await asyncio.sleep(0)
        seen.append(increment)

    async def emit_done():
        seen.append(None)

    await engine.chat(make_request(), emit, emit_done)

    assert seen == ["x", "y", None]


@pytest.mark.asyncio
async def test_server_error_status(engine, configure, fake_ollama):
    """HTTP 500: body surfaced, no events."""
    configure(fake_ollama.base_url)
    fake_ollama.chat_status = 500
    fake_ollama.chat_error = '{"error":"model not loaded"}'
    recorder = Recorder()

    with pytest.raises(ServerError) as exc_info:
        await engine.chat(make_request(), recorder.emit, recorder.emit_done)

    assert exc_info.value.status == 500
    assert exc_info.value.body == '{"error":"model not loaded"}'
    assert "model not loaded" in str(exc_info.value)
    assert recorder.events == []


@pytest.mark.asyncio
async def test_no_active_pack_makes_no_request(engine, configure, fake_ollama):
    configure(fake_ollama.base_url, active_pack_id=None)
    recorder = Recorder()

    with pytest.raises(ConfigError):
        await engine.chat(make_request(), recorder.emit, recorder.emit_done)

    assert fake_ollama.chat_requests == []
    assert recorder.events == []


@pytest.mark.asyncio
async def test_stalled_stream_times_out(config_store, configure, fake_ollama):
    """Increments before the failure stay emitted; done never fires."""
    configure(fake_ollama.base_url)
    fake_ollama.chat_chunks = [frame("partial")]
    fake_ollama.stall_after_chunks = 1.0
    client = OllamaClient(probe_timeout=1, chat_timeout=0.3, report_timeout=1, pull_timeout=1)
    engine = EngineService(config_store=config_store, client=client)
    recorder = Recorder()

    try:
        with pytest.raises(ServerUnavailableError) as excinfo:
            await engine.chat(make_request(), recorder.emit, recorder.emit_done)
    finally:
        await engine.close()

    assert recorder.events == [("chunk", "partial")]
    assert excinfo.value.timed_out
    assert excinfo.value.to_dict()["code"] == "TIMEOUT"
