"""
Tests for request adapters.
"""

import pytest

from asnetkit.adapters import (
    AdapterChain,
    BearerTokenAdapter,
    DefaultHeadersAdapter,
    FunctionAdapter,
    IdempotencyKeyAdapter,
    RequestAdapter,
)
from asnetkit.exceptions import RequestAdaptationError
from asnetkit.models import HTTPMethod, RequestSpec
from asnetkit.utils.idempotency import MAX_KEY_LENGTH, check_idempotency_key, make_idempotency_key


@pytest.fixture
def spec():
    return RequestSpec(url="https://api.example.com/orders", method=HTTPMethod.POST)


class AppendHeader(RequestAdapter):
    def __init__(self, value):
        self.value = value

    def adapt(self, spec):
        trail = spec.headers.get("X-Trail")
        return spec.with_header("X-Trail", f"{trail},{self.value}" if trail else self.value)


class TestAdapterChain:
    """Test adapter composition."""

    def test_empty_chain_is_identity(self, spec):
        assert AdapterChain().apply(spec) == spec

    def test_adapters_run_in_order(self, spec):
        chain = AdapterChain([AppendHeader("a"), AppendHeader("b")])
        chain.append(AppendHeader("c"))
        assert chain.apply(spec).headers["X-Trail"] == "a,b,c"

    def test_callables_are_wrapped(self, spec):
        chain = AdapterChain([lambda s: s.with_header("X-Fn", "1")])
        assert isinstance(chain.adapters[0], FunctionAdapter)
        assert chain.apply(spec).headers["X-Fn"] == "1"

    def test_first_failure_stops_chain(self, spec):
        calls = []

        def failing(s):
            raise PermissionError("no token")

        def later(s):
            calls.append(s)
            return s

        chain = AdapterChain([failing, later])
        with pytest.raises(RequestAdaptationError) as exc_info:
            chain.apply(spec)
        assert isinstance(exc_info.value.cause, PermissionError)
        assert calls == []

    def test_wrong_return_type(self, spec):
        with pytest.raises(RequestAdaptationError) as exc_info:
            AdapterChain([lambda s: None]).apply(spec)
        assert isinstance(exc_info.value.cause, TypeError)

    def test_copy_is_independent(self, spec):
        chain = AdapterChain([AppendHeader("a")])
        copy = chain.copy()
        chain.append(AppendHeader("b"))
        assert len(copy) == 1
        assert len(chain) == 2

    def test_not_an_adapter(self):
        with pytest.raises(TypeError):
            AdapterChain(["nope"])


class TestBuiltinAdapters:
    """Test the bundled adapters."""

    def test_bearer_token_read_on_every_call(self, spec):
        tokens = iter(["t1", "t2"])
        adapter = BearerTokenAdapter(lambda: next(tokens))
        assert adapter.adapt(spec).headers["Authorization"] == "Bearer t1"
        assert adapter.adapt(spec).headers["Authorization"] == "Bearer t2"

    def test_bearer_token_none_leaves_request(self, spec):
        assert BearerTokenAdapter(lambda: None).adapt(spec) == spec

    def test_default_headers_overwrite(self, spec):
        spec = spec.with_header("accept", "text/html")
        adapted = DefaultHeadersAdapter({"Accept": "application/json", "X-App": "demo"}).adapt(spec)
        assert adapted.headers["accept"] == "application/json"
        assert adapted.headers["x-app"] == "demo"

    def test_idempotency_key_added_to_post(self, spec):
        adapted = IdempotencyKeyAdapter(key_factory=lambda: "key-1").adapt(spec)
        assert adapted.headers["Idempotency-Key"] == "key-1"

    def test_idempotency_key_kept(self, spec):
        spec = spec.with_header("idempotency-key", "mine")
        adapted = IdempotencyKeyAdapter(key_factory=lambda: "other").adapt(spec)
        assert adapted.headers["Idempotency-Key"] == "mine"

    def test_idempotency_key_too_long_fails_chain(self, spec):
        spec = spec.with_header("Idempotency-Key", "x" * (MAX_KEY_LENGTH + 1))
        chain = AdapterChain([IdempotencyKeyAdapter(key_factory=lambda: "other")])
        with pytest.raises(RequestAdaptationError) as exc_info:
            chain.apply(spec)
        assert isinstance(exc_info.value.cause, ValueError)

    def test_idempotency_key_skips_get(self):
        spec = RequestSpec(url="https://api.example.com/orders")
        assert "Idempotency-Key" not in IdempotencyKeyAdapter().adapt(spec).headers

    def test_idempotency_key_not_checked_on_get(self):
        spec = RequestSpec(url="https://api.example.com/orders").with_header("Idempotency-Key", " ")
        assert IdempotencyKeyAdapter().adapt(spec) == spec


class TestIdempotencyKey:
    def test_generated_format(self):
        key = make_idempotency_key()
        assert key.startswith("asnk-")
        assert len(key) <= MAX_KEY_LENGTH
        assert make_idempotency_key() != key

    def test_check_accepts_key(self):
        assert check_idempotency_key("order-12345") == "order-12345"
        assert check_idempotency_key("x" * MAX_KEY_LENGTH) == "x" * MAX_KEY_LENGTH

    def test_check_rejects_blank(self):
        with pytest.raises(ValueError, match="blank"):
            check_idempotency_key("  ")

    def test_check_rejects_too_long(self):
        with pytest.raises(ValueError, match="too long"):
            check_idempotency_key("x" * (MAX_KEY_LENGTH + 1))
