"""
Response validation: acceptable status codes and content types.
"""

from typing import List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .exceptions import ServerError
from .models import ResponsePayload

DEFAULT_STATUS_CODES = range(200, 300)


class ValidationPolicy(BaseModel):
    """
    Which responses count as a semantic success.

    ``acceptable_status_codes`` is a half-open range (200 inclusive, 300
    exclusive by default). ``acceptable_content_types`` is ``None`` to accept
    any content type, or a list of substrings of which the response's
    Content-Type header must contain at least one.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    acceptable_status_codes: range = Field(DEFAULT_STATUS_CODES)
    acceptable_content_types: Optional[List[str]] = Field(None)

    @field_validator("acceptable_status_codes")
    @classmethod
    def validate_status_codes(cls, v):
        if v.step != 1:
            raise ValueError("acceptable_status_codes must be a contiguous range")
        return v


def is_acceptable(
    status_code: int,
    content_type: Optional[str],
    policy: ValidationPolicy,
) -> bool:
    """
    Check a status code and Content-Type header against ``policy``.

    The content-type check is a case-sensitive substring match. A missing
    header is rejected whenever the policy constrains content types.
    """
    if status_code not in policy.acceptable_status_codes:
        return False
    allowed: Optional[Sequence[str]] = policy.acceptable_content_types
    if allowed is None:
        return True
    if content_type is None:
        return False
    return any(entry in content_type for entry in allowed)


def validate_payload(payload: ResponsePayload, policy: ValidationPolicy) -> ResponsePayload:
    """
    Return ``payload`` if it passes ``policy``.

    Raises:
        ServerError: Carrying the status code and body of the rejected response
    """
    if not is_acceptable(payload.status_code, payload.content_type, policy):
        raise ServerError(payload.status_code, payload.body, payload.content_type)
    return payload
