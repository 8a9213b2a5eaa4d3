"""Engine facade used by the command surface."""

from functools import lru_cache
from typing import Optional

from ..models.chat import ChatRequest, ReportRequest, ReportResponse
from ..models.engine import EngineConfig, EngineHealth
from .chat_streamer import ChatStreamer, DoneListener, IncrementListener
from .config_store import ConfigStore
from .installer import PackInstaller
from .ollama_client import OllamaClient
from .prober import AvailabilityProber
from .report_generator import ReportGenerator


class EngineService:
    """Runs each engine operation against a freshly loaded config."""

    def __init__(
        self,
        config_store: Optional[ConfigStore] = None,
        client: Optional[OllamaClient] = None,
        prober: Optional[AvailabilityProber] = None,
    ):
        self.config_store = config_store or ConfigStore()
        self.client = client or OllamaClient()
        self.prober = prober or AvailabilityProber(self.client)
        self.installer = PackInstaller(self.client, self.prober, self.config_store)
        self.chat_streamer = ChatStreamer(self.client)
        self.report_generator = ReportGenerator(self.client)

    def load_config(self) -> EngineConfig:
        return self.config_store.load()

    async def health(self) -> EngineHealth:
        return await self.prober.compute_health(self.config_store.load())

    async def install_pack(self, pack_id: str) -> EngineHealth:
        return await self.installer.install(pack_id, self.config_store.load())

    async def chat(
        self,
        request: ChatRequest,
        emit: IncrementListener,
        emit_done: Optional[DoneListener] = None,
    ) -> str:
        return await self.chat_streamer.chat(self.config_store.load(), request, emit, emit_done)

    async def generate_report(self, request: ReportRequest) -> ReportResponse:
        return await self.report_generator.generate_report(self.config_store.load(), request)

    async def close(self):
        await self.client.close()


@lru_cache()
def get_engine_service() -> EngineService:
    """Get singleton engine service instance."""
    return EngineService()
