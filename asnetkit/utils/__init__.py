"""
Utility modules for asnetkit.
"""

from .idempotency import check_idempotency_key, make_idempotency_key
from .redact import redact_headers

__all__ = [
    "check_idempotency_key",
    "make_idempotency_key",
    "redact_headers",
]
