"""
One-way hashing for login secrets and one-time recovery codes.

Both are stored with the same salted, adaptive bcrypt hash; only the field
they end up in differs.
"""
import logging

import bcrypt

logger = logging.getLogger(__name__)

DEFAULT_ROUNDS = 10
# bcrypt only reads the first 72 bytes of a secret
MAX_SECRET_BYTES = 72


def _to_bytes(secret: str) -> bytes:
    return secret.encode('utf-8')[:MAX_SECRET_BYTES]


def hash_secret(secret: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """Hash a secret with a fresh salt."""
    if not secret:
        raise ValueError("Cannot hash an empty secret")
    hashed = bcrypt.hashpw(_to_bytes(secret), bcrypt.gensalt(rounds=rounds))
    return hashed.decode('utf-8')


def verify_secret(secret: str, digest: str) -> bool:
    """Check a secret against a stored bcrypt digest."""
    if not secret or not digest:
        return False
    try:
        return bcrypt.checkpw(_to_bytes(secret), digest.encode('utf-8'))
    except ValueError:
        logger.warning("Stored digest is not a valid bcrypt hash")
        return False
