"""Credential store using system keyring for secure secret storage.

Lets the OAuth token live in the system keyring (GNOME Keyring, KWallet,
macOS Keychain, etc.) instead of the environment or settings.json.
"""

import logging

import keyring
from keyring.backends.fail import Keyring as FailKeyring
from keyring.errors import KeyringError, PasswordDeleteError

logger = logging.getLogger(__name__)

SERVICE_NAME = "twch"

KEY_OAUTH_TOKEN = "oauth_token"


def is_available() -> bool:
    """Check if a usable keyring backend is configured."""
    backend = keyring.get_keyring()
    if isinstance(backend, FailKeyring):
        logger.debug("Keyring backend is FailKeyring - keyring unavailable")
        return False
    return True


def store_secret(key: str, value: str) -> bool:
    """Store a secret in the system keyring.

    Returns True if stored, False if the keyring is unavailable.
    """
    if not value:
        delete_secret(key)
        return True

    if not is_available():
        return False

    try:
        keyring.set_password(SERVICE_NAME, key, value)
        return True
    except KeyringError as e:
        logger.warning(f"Failed to store secret '{key}' in keyring: {e}")
        return False


def get_secret(key: str) -> str | None:
    """Retrieve a secret from the system keyring.

    Returns the secret value, or None if not found or keyring unavailable.
    """
    if not is_available():
        return None

    try:
        return keyring.get_password(SERVICE_NAME, key)
    except KeyringError as e:
        logger.warning(f"Failed to get secret '{key}' from keyring: {e}")
        return None


def delete_secret(key: str) -> None:
    """Delete a secret from the system keyring."""
    if not is_available():
        return

    try:
        keyring.delete_password(SERVICE_NAME, key)
    except PasswordDeleteError:
        logger.debug(f"No secret '{key}' to delete")
