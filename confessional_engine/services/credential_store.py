"""API key storage in the platform credential vault."""

from functools import lru_cache

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from ..core.config import settings
from ..utils.loguru_config import get_logger

logger = get_logger(__name__)


class CredentialError(Exception):
    """Credential vault error."""

    def __init__(self, message: str, not_found: bool = False):
        super().__init__(message)
        self.not_found = not_found


class CredentialStore:
    """Stores one opaque secret under a fixed vault entry."""

    def __init__(self, service: str = None, username: str = None):
        self.service = service or settings.credential_target
        self.username = username or settings.credential_username

    def store(self, secret: str) -> None:
        try:
            keyring.set_password(self.service, self.username, secret)
        except KeyringError as e:
            raise CredentialError(f"Failed to store API key in credential vault: {e}") from e
        logger.info(f"API key stored under '{self.service}'")

    def get(self) -> str:
        try:
            secret = keyring.get_password(self.service, self.username)
        except KeyringError as e:
            raise CredentialError(f"Failed to read API key from credential vault: {e}") from e
        if secret is None:
            raise CredentialError("API key not found in credential vault", not_found=True)
        return secret

    def has(self) -> bool:
        try:
            self.get()
        except CredentialError:
            return False
        return True

    def delete(self) -> None:
        try:
            keyring.delete_password(self.service, self.username)
        except PasswordDeleteError as e:
            raise CredentialError(f"Failed to delete API key: {e}", not_found=True) from e
        except KeyringError as e:
            raise CredentialError(f"Failed to delete API key: {e}") from e
        logger.info(f"API key deleted from '{self.service}'")


@lru_cache()
def get_credential_store() -> CredentialStore:
    """Get singleton credential store instance."""
    return CredentialStore()
