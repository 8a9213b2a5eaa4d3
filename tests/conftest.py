"""Pytest configuration and fixtures."""

import asyncio
import os
from typing import Dict, List, Optional

os.environ.setdefault("LOG_TO_FILE", "false")

import keyring
import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer
from fastapi.testclient import TestClient
from keyring.backend import KeyringBackend
from keyring.errors import PasswordDeleteError
from unittest.mock import AsyncMock, MagicMock

from confessional_engine.api.dependencies import get_credentials, get_engine
from confessional_engine.main import app
from confessional_engine.models.engine import EngineConfig, GpuSummary, ModelPack
from confessional_engine.services.config_store import ConfigStore
from confessional_engine.services.credential_store import CredentialStore
from confessional_engine.services.engine import EngineService
from confessional_engine.services.ollama_client import OllamaClient
from confessional_engine.services.prober import AvailabilityProber

PACKS = {
    "test_pack": ModelPack(
        label="Test Pack",
        analysis_model="model-a",
        report_model="model-b",
        embedding_model="model-c",
    ),
    "other_pack": ModelPack(
        label="Other Pack",
        analysis_model="model-x",
        report_model="model-x",
        embedding_model="model-c",
    ),
}


class FakeOllama:
    """In-process stand-in for an Ollama server."""

    def __init__(self):
        self.installed: List[str] = []
        self.tags_status = 200
        self.tags_body: Optional[str] = None
        self.pull_failures: Dict[str, int] = {}
        self.pulls: List[dict] = []
        self.chat_requests: List[dict] = []
        self.chat_status = 200
        self.chat_error = ""
        self.chat_chunks: List[bytes] = []
        self.stall_after_chunks: Optional[float] = None
        self.completion: dict = {}
        self.base_url = ""

    def app(self) -> web.Application:
        application = web.Application()
        application.router.add_get("/api/tags", self.tags)
        application.router.add_post("/api/pull", self.pull)
        application.router.add_post("/v1/chat/completions", self.chat_completions)
        return application

    async def tags(self, request: web.Request) -> web.Response:
        if self.tags_status != 200:
            return web.Response(status=self.tags_status, text="tags unavailable")
        if self.tags_body is not None:
            return web.Response(text=self.tags_body, content_type="application/json")
        return web.json_response({"models": [{"name": name, "size": 1} for name in self.installed]})

    async def pull(self, request: web.Request) -> web.Response:
        body = await request.json()
        self.pulls.append(body)
        status = self.pull_failures.get(body["name"])
        if status is not None:
            return web.Response(status=status, text=f"pull of {body['name']} failed")
        if body["name"] not in self.installed:
            self.installed.append(body["name"])
        return web.json_response({"status": "success"})

    async def chat_completions(self, request: web.Request) -> web.StreamResponse:
        body = await request.json()
        self.chat_requests.append(body)
        if self.chat_status != 200:
            return web.Response(status=self.chat_status, text=self.chat_error)
        if not body.get("stream"):
            return web.json_response(self.completion)

        response = web.StreamResponse(status=200, headers={"Content-Type": "text/event-stream"})
        await response.prepare(request)
        for chunk in self.chat_chunks:
            await response.write(chunk)
        if self.stall_after_chunks is not None:
            await asyncio.sleep(self.stall_after_chunks)
        await response.write_eof()
        return response

    @property
    def pulled_names(self) -> List[str]:
        return [body["name"] for body in self.pulls]


@pytest_asyncio.fixture
async def fake_ollama():
    """Running fake Ollama server."""
    fake = FakeOllama()
    server = TestServer(fake.app())
    await server.start_server()
    fake.base_url = f"http://{server.host}:{server.port}"
    yield fake
    await server.close()


@pytest.fixture
def config_store(tmp_path) -> ConfigStore:
    """Config store writing into a temporary directory."""
    return ConfigStore(tmp_path / "engine" / "engine-config.json")


def write_config(store: ConfigStore, base_url: str, active_pack_id: Optional[str] = "test_pack") -> EngineConfig:
    config = EngineConfig(
        provider="ollama",
        base_url=base_url,
        active_pack_id=active_pack_id,
        packs={pack_id: pack.model_copy() for pack_id, pack in PACKS.items()},
    )
    store.save(config)
    return config


@pytest.fixture
def configure(config_store):
    """Write an engine config pointing at the given server."""
    def _configure(base_url: str, active_pack_id: Optional[str] = "test_pack") -> EngineConfig:
        return write_config(config_store, base_url, active_pack_id)
    return _configure


async def no_gpu() -> GpuSummary:
    return GpuSummary(vendor="unknown", vram_gb=None)


@pytest_asyncio.fixture
async def ollama_client():
    """Ollama client with short timeouts."""
    client = OllamaClient(probe_timeout=2, chat_timeout=5, report_timeout=5, pull_timeout=5)
    yield client
    await client.close()


@pytest.fixture
def engine(config_store, ollama_client) -> EngineService:
    """Engine service over the temporary config and the test client."""
    prober = AvailabilityProber(ollama_client, gpu_detector=no_gpu)
    return EngineService(config_store=config_store, client=ollama_client, prober=prober)


class MemoryKeyring(KeyringBackend):
    """Keyring backend keeping secrets in a dict."""

    priority = 1

    def __init__(self):
        super().__init__()
        self.passwords = {}

    def set_password(self, service, username, password):
        self.passwords[(service, username)] = password

    def get_password(self, service, username):
        return self.passwords.get((service, username))

    def delete_password(self, service, username):
        if (service, username) not in self.passwords:
            raise PasswordDeleteError("Password not found")
        del self.passwords[(service, username)]


@pytest.fixture
def memory_keyring():
    """Swap the platform vault for an in-memory one."""
    previous = keyring.get_keyring()
    backend = MemoryKeyring()
    keyring.set_keyring(backend)
    yield backend
    keyring.set_keyring(previous)


@pytest.fixture
def mock_engine():
    """Mock engine service."""
    service = MagicMock(spec=EngineService)
    service.health = AsyncMock()
    service.install_pack = AsyncMock()
    service.chat = AsyncMock(return_value="")
    service.generate_report = AsyncMock()
    return service


@pytest.fixture
def client(mock_engine, memory_keyring):
    """Test client with the engine and credential store replaced."""
    app.dependency_overrides[get_engine] = lambda: mock_engine
    app.dependency_overrides[get_credentials] = lambda: CredentialStore(service="test-target", username="api_key")
    yield TestClient(app)
    app.dependency_overrides.clear()
