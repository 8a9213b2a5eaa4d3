"""API key endpoints backed by the platform credential vault."""

from typing import Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ...services.credential_store import CredentialStore
from ..dependencies import get_credentials

router = APIRouter(prefix="/credentials", tags=["credentials"])


class StoreApiKeyRequest(BaseModel):
    """Request to store the API key."""
    key: str = Field(..., min_length=1)


@router.post("/api-key")
async def store_api_key(
    request: StoreApiKeyRequest,
    store: CredentialStore = Depends(get_credentials),
) -> Dict[str, str]:
    store.store(request.key)
    return {"status": "stored"}


@router.get("/api-key")
async def get_api_key(store: CredentialStore = Depends(get_credentials)) -> Dict[str, str]:
    return {"key": store.get()}


@router.get("/api-key/exists")
async def has_api_key(store: CredentialStore = Depends(get_credentials)) -> Dict[str, bool]:
    return {"exists": store.has()}


@router.delete("/api-key")
async def delete_api_key(store: CredentialStore = Depends(get_credentials)) -> Dict[str, str]:
    store.delete()
    return {"status": "deleted"}
