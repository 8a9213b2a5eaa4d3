"""API layer components."""

from .routes import credentials, engine, health
from .dependencies import get_credentials, get_engine

__all__ = [
    "credentials",
    "engine",
    "health",
    "get_credentials",
    "get_engine",
]
