"""Fernet encryption of per-user provider API keys.

The settings page stores each user's keys encrypted; the key vault
decrypts them per call. Both sides derive the Fernet key from
``SECRETS_ENCRYPTION_KEY`` with SHA-256, so any secret string works.
"""

import base64
import hashlib

from cryptography.fernet import Fernet


def _fernet(secret: str) -> Fernet:
    digest = hashlib.sha256(secret.encode()).digest()
    return Fernet(base64.urlsafe_b64encode(digest))


def encrypt_secret(plaintext: str, secret: str) -> str:
    return _fernet(secret).encrypt(plaintext.encode()).decode()


def decrypt_secret(encrypted: str, secret: str) -> str:
    """Decrypt a stored key.

    Raises:
        cryptography.fernet.InvalidToken: If the token is malformed or was
            encrypted with a different secret
    """
    return _fernet(secret).decrypt(encrypted.encode()).decode()
