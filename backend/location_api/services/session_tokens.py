"""Opaque session token generation."""
import hashlib
import secrets

TOKEN_BYTES = 32


def generate_session_token() -> str:
    """Return 256 bits from the OS CSPRNG as 64 hex characters."""
    return secrets.token_hex(TOKEN_BYTES)


def hash_session_token(token: str) -> str:
    """Hash a session token before persisting or looking it up."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
