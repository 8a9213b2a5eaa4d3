"""Data models."""

from .chat import ChatRequest, ChatResponse, ProjectMeta, ReportRequest, ReportResponse
from .engine import EngineConfig, EngineHealth, GpuSummary, ModelPack

__all__ = [
    "ChatRequest",
    "ChatResponse",
    "ProjectMeta",
    "ReportRequest",
    "ReportResponse",
    "EngineConfig",
    "EngineHealth",
    "GpuSummary",
    "ModelPack",
]
