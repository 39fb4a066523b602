"""
Redaction of sensitive values before they reach log output.
"""

from typing import Dict, Mapping

SENSITIVE_KEYS = {"authorization", "api_key", "api-key", "token", "secret", "password", "cookie"}


def redact_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    """
    Replace sensitive header values with a placeholder.

    Example:
        >>> redact_headers({"Authorization": "Bearer abc", "Accept": "*/*"})
        {'Authorization': '***REDACTED***', 'Accept': '*/*'}
    """
    sanitized = {}
    for key, value in headers.items():
        if any(sensitive in key.lower() for sensitive in SENSITIVE_KEYS):
            sanitized[key] = "***REDACTED***"
        else:
            sanitized[key] = value
    return sanitized
