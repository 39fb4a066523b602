"""
Idempotency-Key values for unsafe requests.
"""

import secrets
import time

KEY_PREFIX = "asnk"
MAX_KEY_LENGTH = 128


def make_idempotency_key() -> str:
    """Return a fresh ``asnk-<epoch ms>-<24 hex chars>`` key."""
    return f"{KEY_PREFIX}-{int(time.time() * 1000)}-{secrets.token_hex(12)}"


def check_idempotency_key(key: str) -> str:
    """
    Validate a caller-supplied key.

    Raises:
        ValueError: If ``key`` is blank or longer than ``MAX_KEY_LENGTH``
    """
    if not key.strip():
        raise ValueError("Idempotency key must not be blank")
    if len(key) > MAX_KEY_LENGTH:
        raise ValueError(f"Idempotency key too long ({len(key)} > {MAX_KEY_LENGTH} characters)")
    return key
