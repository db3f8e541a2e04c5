"""
Fernet encryption for seller OAuth tokens stored in ``ebay_connections``.

ENCRYPTION_KEY must be a Fernet key (urlsafe base64 of 32 bytes):
    python -c "from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())"
"""

from functools import lru_cache

from cryptography.fernet import Fernet, InvalidToken

from listora.config import get_settings


@lru_cache
def _get_fernet() -> Fernet:
    return Fernet(get_settings().encryption_key.encode())


def encrypt_token(plaintext: str | None) -> str:
    """Encrypt a token for storage. Empty input stays empty."""
    if not plaintext:
        return ""
    return _get_fernet().encrypt(plaintext.encode()).decode()


def decrypt_token(ciphertext: str | None) -> str:
    """
    Decrypt a stored token.

    Rows written before encryption was switched on hold the plaintext token;
    those are returned as-is.
    """
    if not ciphertext:
        return ""
    try:
        return _get_fernet().decrypt(ciphertext.encode()).decode()
    except InvalidToken:
        return ciphertext
