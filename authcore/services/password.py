"""Password hashing and verification."""

import secrets
from functools import lru_cache

import bcrypt

MIN_ROUNDS = 10


def hash_password(password: str, rounds: int = MIN_ROUNDS) -> str:
    """Hash a password with bcrypt using a fresh salt.

    Raises ValueError if ``rounds`` is below the minimum cost, or if bcrypt
    rejects the input (passwords longer than 72 bytes).
    """
    if rounds < MIN_ROUNDS:
        raise ValueError(f"bcrypt cost must be at least {MIN_ROUNDS}, got {rounds}")
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a stored bcrypt hash. Never raises."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except (ValueError, TypeError, AttributeError):
        return False


@lru_cache
def dummy_hash(rounds: int = MIN_ROUNDS) -> str:
    """Hash of a random password nobody knows, for checks against missing accounts."""
    return hash_password(secrets.token_urlsafe(16), rounds)
