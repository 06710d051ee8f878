"""Password hashing.

Passwords are peppered with the server secret (HMAC-SHA256) and then hashed
with bcrypt, which embeds a random per-record salt in the digest. Digests
written by the earlier scheme (hex SHA-256 of ``password + secret``) are
still accepted by :func:`verify_password` and reported by
:func:`needs_rehash` so callers can rotate them.
"""
import base64
import hashlib
import hmac
import re

import bcrypt

_LEGACY_DIGEST = re.compile(r"^[0-9a-f]{64}$")


def _pepper(password: str, secret: str) -> bytes:
    # bcrypt truncates input at 72 bytes; the base64 HMAC is always 44.
    mac = hmac.new(secret.encode("utf-8"), password.encode("utf-8"), hashlib.sha256).digest()
    return base64.b64encode(mac)


def _legacy_digest(password: str, secret: str) -> str:
    return hashlib.sha256((password + secret).encode("utf-8")).hexdigest()


def is_legacy_digest(digest: str) -> bool:
    return bool(digest) and _LEGACY_DIGEST.match(digest) is not None


def hash_password(password: str, secret: str) -> str:
    """Hash a password with the server secret and a fresh salt."""
    if not password:
        raise ValueError("Password must not be empty.")
    if not secret:
        raise ValueError("Secret must not be empty.")
    return bcrypt.hashpw(_pepper(password, secret), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, secret: str, digest: str | None) -> bool:
    """Check a password against a stored digest. Never raises."""
    if not password or not secret or not digest:
        return False

    try:
        if is_legacy_digest(digest):
            return hmac.compare_digest(_legacy_digest(password, secret), digest)
        return bcrypt.checkpw(_pepper(password, secret), digest.encode("utf-8"))
    except ValueError:
        # Malformed digest or input that is not valid UTF-8 (lone surrogates)
        return False


def needs_rehash(digest: str | None) -> bool:
    """True when a digest was produced by the legacy unsalted scheme."""
    return digest is not None and is_legacy_digest(digest)
