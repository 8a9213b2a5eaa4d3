"""Inference server availability and engine readiness."""

from typing import Awaitable, Callable, List, Optional

from ..core.exceptions import EngineError
from ..models.engine import EngineConfig, EngineHealth, GpuSummary, ModelPack
from ..utils.loguru_config import get_logger
from .gpu import detect_gpu
from .ollama_client import OllamaClient

logger = get_logger(__name__)


def find_missing_models(pack: ModelPack, installed: List[str]) -> List[str]:
    """Required models of the pack absent from the installed list."""
    installed_set = set(installed)
    return [model for model in pack.required_models if model not in installed_set]


class AvailabilityProber:
    """Computes engine health from the server's live state."""

    def __init__(
        self,
        client: OllamaClient,
        gpu_detector: Optional[Callable[[], Awaitable[GpuSummary]]] = None,
    ):
        self.client = client
        self.gpu_detector = gpu_detector or detect_gpu

    async def probe(self, base_url: str) -> bool:
        return await self.client.probe(base_url)

    async def list_installed(self, base_url: str) -> List[str]:
        return await self.client.list_installed(base_url)

    async def compute_health(self, config: EngineConfig) -> EngineHealth:
        """Probe the server and compare installed models with the active pack."""
        base_url = config.server_url
        gpu_summary = await self.gpu_detector()

        if not await self.probe(base_url):
            logger.info(f"Ollama unavailable at {base_url}")
            return EngineHealth(
                ollama_available=False,
                engine_configured=False,
                active_pack_id=config.active_pack_id,
                missing_models=[],
                gpu_summary=gpu_summary,
            )

        try:
            installed = await self.list_installed(base_url)
        except EngineError as e:
            logger.warning(f"Failed to list installed models, assuming none: {e}")
            installed = []

        missing_models: List[str] = []
        engine_configured = False
        pack = config.active_pack
        if pack is not None:
            missing_models = find_missing_models(pack, installed)
            engine_configured = not missing_models
        elif config.active_pack_id is not None:
            logger.warning(f"Active pack '{config.active_pack_id}' is not defined in config")

        logger.debug(
            f"Engine health: pack={config.active_pack_id} installed={len(installed)} missing={missing_models}"
        )
        return EngineHealth(
            ollama_available=True,
            engine_configured=engine_configured,
            active_pack_id=config.active_pack_id,
            missing_models=missing_models,
            gpu_summary=gpu_summary,
        )
