"""Engine config document persistence."""

from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from ..core.config import settings
from ..core.exceptions import ConfigError
from ..models.engine import EngineConfig, ModelPack
from ..utils.loguru_config import get_logger

logger = get_logger(__name__)


def default_config() -> EngineConfig:
    """Built-in config written on first run."""
    return EngineConfig(
        provider="ollama",
        base_url="http://127.0.0.1:11434",
        active_pack_id="analyst_fast",
        packs={
            "light_fast": ModelPack(
                label="Fast & Light",
                analysis_model="qwen3:4b",
                report_model="qwen3:4b",
                embedding_model="qwen3-embedding:4b",
            ),
            "analyst_fast": ModelPack(
                label="Analyst Pack (Recommended)",
                analysis_model="gurubot/glm-4.6v-flash-gguf:q4_k_m",
                report_model="gurubot/glm-4.6v-flash-gguf:q4_k_m",
                embedding_model="qwen3-embedding:4b",
            ),
        },
    )


class ConfigStore:
    """Reads and writes the engine config JSON document.

    Nothing is cached: every ``load`` goes to disk so edits made by other
    processes are picked up by the next operation.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else settings.resolved_engine_config_path

    def load(self) -> EngineConfig:
        """Load config, writing the built-in default on first run."""
        if not self.path.exists():
            logger.info(f"No engine config at {self.path}, writing defaults")
            config = default_config()
            self.save(config)
            return config

        try:
            content = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Failed to read config file: {e}") from e

        try:
            return EngineConfig.model_validate_json(content)
        except ValidationError as e:
            raise ConfigError(f"Failed to parse config: {e}") from e

    def save(self, config: EngineConfig) -> None:
        """Persist config as pretty-printed JSON."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(config.model_dump_json(indent=2), encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Failed to write config file: {e}") from e
        logger.debug(f"Engine config saved to {self.path} (active pack: {config.active_pack_id})")

    @staticmethod
    def active_pack(config: EngineConfig) -> ModelPack:
        """Resolve the active pack or fail with a config error."""
        pack = config.active_pack
        if pack is None:
            raise ConfigError("No active engine pack configured")
        return pack
