"""
Tests for retry policies.
"""

import pytest

from asnetkit.exceptions import TransportConnectionError, TransportTimeoutError
from asnetkit.models import RequestSpec
from asnetkit.retry import ExponentialBackoffRetrier, FunctionRetrier, NeverRetrier

SPEC = RequestSpec(url="https://example.com")


class TestExponentialBackoffRetrier:
    """Test the default retry policy."""

    def test_default_budget(self):
        retrier = ExponentialBackoffRetrier()
        error = TransportConnectionError("offline")
        assert retrier.should_retry(SPEC, error, 0)
        assert retrier.should_retry(SPEC, error, 1)
        assert not retrier.should_retry(SPEC, error, 2)

    def test_default_delays(self):
        retrier = ExponentialBackoffRetrier()
        assert retrier.retry_delay(0) == pytest.approx(0.6)
        assert retrier.retry_delay(1) == pytest.approx(1.2)
        assert retrier.retry_delay(2) == pytest.approx(2.4)

    def test_max_delay_caps(self):
        retrier = ExponentialBackoffRetrier(base_delay=1.0, max_delay=3.0)
        assert retrier.retry_delay(5) == 3.0

    def test_jitter_bounds(self):
        retrier = ExponentialBackoffRetrier(base_delay=1.0, jitter=0.5)
        for _ in range(20):
            assert 1.0 <= retrier.retry_delay(0) < 1.5

    def test_retry_on_filters_errors(self):
        retrier = ExponentialBackoffRetrier(retry_on=(TransportTimeoutError,))
        assert retrier.should_retry(SPEC, TransportTimeoutError("slow"), 0)
        assert not retrier.should_retry(SPEC, TransportConnectionError("reset"), 0)

    def test_zero_retries(self):
        retrier = ExponentialBackoffRetrier(max_retries=0)
        assert not retrier.should_retry(SPEC, TransportConnectionError("offline"), 0)

    @pytest.mark.parametrize("kwargs", [{"max_retries": -1}, {"base_delay": -0.1}])
    def test_invalid_arguments(self, kwargs):
        with pytest.raises(ValueError):
            ExponentialBackoffRetrier(**kwargs)


class TestOtherRetriers:
    def test_never(self):
        assert not NeverRetrier().should_retry(SPEC, TransportConnectionError("x"), 0)
        assert NeverRetrier().retry_delay(0) == 0.0

    def test_function(self):
        retrier = FunctionRetrier(lambda s, e, a: a < 1, delay=lambda a: 0.25 * (a + 1))
        assert retrier.should_retry(SPEC, TransportConnectionError("x"), 0)
        assert not retrier.should_retry(SPEC, TransportConnectionError("x"), 1)
        assert retrier.retry_delay(1) == 0.5
