"""
Tests for response validation.
"""

import pytest
from pydantic import ValidationError

from asnetkit.exceptions import ServerError
from asnetkit.models import ResponsePayload
from asnetkit.validation import ValidationPolicy, is_acceptable, validate_payload

JSON_ONLY = ValidationPolicy(
    acceptable_status_codes=range(200, 300),
    acceptable_content_types=["application/json"],
)


class TestStatusCodes:
    """Test the half-open status range."""

    @pytest.mark.parametrize("status", [200, 204, 299])
    def test_accepted(self, status):
        assert is_acceptable(status, None, ValidationPolicy())

    @pytest.mark.parametrize("status", [199, 300, 404, 500])
    def test_rejected(self, status):
        assert not is_acceptable(status, None, ValidationPolicy())

    def test_validate_payload_raises_server_error(self):
        payload = ResponsePayload(status_code=300, body=b"moved")
        with pytest.raises(ServerError) as exc_info:
            validate_payload(payload, ValidationPolicy())
        assert exc_info.value.status_code == 300
        assert exc_info.value.body == b"moved"

    def test_validate_payload_returns_payload(self):
        payload = ResponsePayload(status_code=200)
        assert validate_payload(payload, ValidationPolicy()) is payload

    def test_stepped_range_rejected(self):
        with pytest.raises(ValidationError):
            ValidationPolicy(acceptable_status_codes=range(200, 300, 2))


class TestContentTypes:
    """Test the content-type allow-list."""

    @pytest.mark.parametrize(
        "content_type", ["application/json", "application/json; charset=utf-8"]
    )
    def test_substring_match(self, content_type):
        assert is_acceptable(250, content_type, JSON_ONLY)

    def test_other_type_rejected(self):
        assert not is_acceptable(250, "text/plain", JSON_ONLY)

    def test_missing_header_rejected(self):
        assert not is_acceptable(250, None, JSON_ONLY)

    def test_match_is_case_sensitive(self):
        assert not is_acceptable(200, "Application/JSON", JSON_ONLY)

    def test_status_checked_first(self):
        assert not is_acceptable(500, "application/json", JSON_ONLY)

    def test_no_constraint_accepts_anything(self):
        assert is_acceptable(200, "image/png", ValidationPolicy())
