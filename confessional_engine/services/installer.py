"""Model pack installation."""

from typing import Optional

from ..core.exceptions import ConfigError, ServerUnavailableError
from ..models.engine import EngineConfig, EngineHealth
from ..utils.loguru_config import EngineLogContext, get_logger
from .config_store import ConfigStore
from .ollama_client import OllamaClient
from .prober import AvailabilityProber

logger = get_logger(__name__)


class PackInstaller:
    """Pulls every model of a pack, then makes it the active pack."""

    def __init__(self, client: OllamaClient, prober: AvailabilityProber, config_store: ConfigStore):
        self.client = client
        self.prober = prober
        self.config_store = config_store

    async def install(self, pack_id: str, config: Optional[EngineConfig] = None) -> EngineHealth:
        """
        Install a pack.

        Pulls run one after another; the first failure aborts with
        PartialInstallFailure and leaves ``active_pack_id`` untouched. Models
        already pulled stay on the server.

        Returns:
            Health recomputed from a fresh config read
        """
        config = config if config is not None else self.config_store.load()
        base_url = config.server_url

        if not await self.prober.probe(base_url):
            raise ServerUnavailableError(
                "Ollama is not available. Please install and start Ollama first."
            )

        pack = config.packs.get(pack_id)
        if pack is None:
            raise ConfigError(f"Pack '{pack_id}' not found")

        with EngineLogContext(f"install pack {pack_id}", base_url=base_url):
            for model in pack.required_models:
                logger.info(f"Pulling model {model}")
                await self.client.pull_model(base_url, model)

            config.active_pack_id = pack_id
            self.config_store.save(config)

        return await self.prober.compute_health(self.config_store.load())
