"""Service layer components."""

from .config_store import ConfigStore
from .credential_store import CredentialStore, get_credential_store
from .engine import EngineService, get_engine_service
from .ollama_client import OllamaClient

__all__ = [
    "ConfigStore",
    "CredentialStore",
    "get_credential_store",
    "EngineService",
    "get_engine_service",
    "OllamaClient",
]
