"""FastAPI dependencies."""

from ..services.credential_store import CredentialStore, get_credential_store
from ..services.engine import EngineService, get_engine_service


async def get_engine() -> EngineService:
    """Dependency to get engine service instance."""
    return get_engine_service()


async def get_credentials() -> CredentialStore:
    """Dependency to get credential store instance."""
    return get_credential_store()
