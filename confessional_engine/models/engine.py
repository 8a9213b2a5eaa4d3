"""Engine configuration and health data models."""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class ModelPack(BaseModel):
    """Named bundle of the three models one deployment needs."""

    label: str = Field(..., description="Display name")
    analysis_model: str = Field(..., description="Model answering chat questions")
    report_model: str = Field(..., description="Model drafting reports")
    embedding_model: str = Field(..., description="Model producing embeddings")

    @property
    def required_models(self) -> List[str]:
        """Models of the pack in analysis, report, embedding order, without duplicates."""
        models: List[str] = []
        for model in (self.analysis_model, self.report_model, self.embedding_model):
            if model not in models:
                models.append(model)
        return models


class EngineConfig(BaseModel):
    """Persisted engine configuration document."""

    provider: str = Field(default="ollama", description="Inference provider tag")
    base_url: str = Field(default="http://127.0.0.1:11434", description="Inference server address")
    active_pack_id: Optional[str] = Field(default=None, description="Key into packs")
    packs: Dict[str, ModelPack] = Field(default_factory=dict, description="Available packs")

    @property
    def active_pack(self) -> Optional[ModelPack]:
        """Get active pack, None when unset or unresolvable."""
        if self.active_pack_id is None:
            return None
        return self.packs.get(self.active_pack_id)

    @property
    def server_url(self) -> str:
        """Base URL without trailing slash."""
        return self.base_url.rstrip("/")

    class Config:
        json_schema_extra = {
            "example": {
                "provider": "ollama",
                "base_url": "http://127.0.0.1:11434",
                "active_pack_id": "light_fast",
                "packs": {
                    "light_fast": {
                        "label": "Fast & Light",
                        "analysis_model": "qwen3:4b",
                        "report_model": "qwen3:4b",
                        "embedding_model": "qwen3-embedding:4b",
                    }
                },
            }
        }


class GpuSummary(BaseModel):
    """Best-effort GPU description, informational only."""

    vendor: str = Field(default="unknown", description="GPU vendor")
    vram_gb: Optional[int] = Field(default=None, description="Video memory in GB")


class EngineHealth(BaseModel):
    """Engine readiness, recomputed on every probe."""

    ollama_available: bool = Field(default=False, description="Inference server reachable")
    engine_configured: bool = Field(default=False, description="All models of the active pack installed")
    active_pack_id: Optional[str] = Field(default=None, description="Active pack id from config")
    missing_models: List[str] = Field(default_factory=list, description="Required models not installed")
    gpu_summary: Optional[GpuSummary] = Field(default=None, description="Best-effort GPU info")

    class Config:
        json_schema_extra = {
            "example": {
                "ollama_available": True,
                "engine_configured": False,
                "active_pack_id": "analyst_fast",
                "missing_models": ["qwen3-embedding:4b"],
                "gpu_summary": {"vendor": "nvidia", "vram_gb": 8},
            }
        }
