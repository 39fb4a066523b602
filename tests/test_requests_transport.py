"""
Tests for the requests transport, using requests-mock.
"""

import threading
from unittest import mock

import pytest
import requests
import requests_mock

from asnetkit import ExponentialBackoffRetrier, Session, SessionConfig, UnderlyingError
from asnetkit.exceptions import (
    RequestCancelledError,
    TransportConnectionError,
    TransportError,
    TransportTimeoutError,
)
from asnetkit.models import HTTPMethod, RequestSpec
from asnetkit.transport import RequestsTransport

URL = "https://api.example.com/items"


@pytest.fixture
def transport():
    transport = RequestsTransport()
    yield transport
    transport.close()


class TestRequestsTransport:
    """Test the requests-based transport."""

    def test_send(self, transport):
        spec = RequestSpec(
            url=URL,
            method=HTTPMethod.POST,
            headers={"X-Trace": "t-1", "Content-Type": "text/plain"},
            body=b"payload",
        )
        with requests_mock.Mocker() as m:
            m.post(URL, status_code=201, content=b"created", headers={"Location": "/items/9"})
            response = transport.send(spec, timeout=5)

        assert response.status_code == 201
        assert response.body == b"created"
        assert response.headers["Location"] == "/items/9"
        assert m.last_request.headers["X-Trace"] == "t-1"
        assert m.last_request.body == b"payload"
        assert m.last_request.timeout == 5

    def test_error_statuses_are_responses(self, transport):
        with requests_mock.Mocker() as m:
            m.get(URL, status_code=503, text="unavailable")
            response = transport.send(RequestSpec(url=URL))
        assert response.status_code == 503

    @pytest.mark.parametrize(
        "exc, expected",
        [
            (requests.exceptions.ConnectTimeout, TransportTimeoutError),
            (requests.exceptions.ReadTimeout, TransportTimeoutError),
            (requests.exceptions.ConnectionError, TransportConnectionError),
            (requests.exceptions.TooManyRedirects, TransportError),
        ],
    )
    def test_error_mapping(self, transport, exc, expected):
        with requests_mock.Mocker() as m:
            m.get(URL, exc=exc)
            with pytest.raises(expected):
                transport.send(RequestSpec(url=URL))

    def test_cancel_while_reading(self, transport):
        event = threading.Event()
        event.set()
        with requests_mock.Mocker() as m:
            m.get(URL, content=b"x" * 1024)
            with pytest.raises(RequestCancelledError):
                transport.send(RequestSpec(url=URL), cancel_event=event)

    def test_send_for_file(self, transport):
        with requests_mock.Mocker() as m:
            m.get(URL, content=b"file body", headers={"Content-Type": "application/pdf"})
            response = transport.send_for_file(RequestSpec(url=URL))
        try:
            assert response.path.read_bytes() == b"file body"
            assert response.headers["Content-Type"] == "application/pdf"
        finally:
            response.path.unlink()

    def test_external_session_left_open(self):
        session = mock.Mock(spec=requests.Session)
        RequestsTransport(session=session).close()
        session.close.assert_not_called()


class TestSessionOverRequests:
    """End-to-end tests with the default transport."""

    def test_retries_then_succeeds(self):
        config = SessionConfig(retry_base_delay=0.0)
        with requests_mock.Mocker() as m, Session(config=config) as session:
            m.get(
                URL,
                [
                    {"exc": requests.exceptions.ConnectionError},
                    {"exc": requests.exceptions.ConnectTimeout},
                    {"json": [{"id": 1}], "headers": {"Content-Type": "application/json"}},
                ],
            )
            data = session.request(URL).validate(content_types=["application/json"]).json()

        assert data == [{"id": 1}]
        assert m.call_count == 3

    def test_gives_up_after_budget(self):
        with requests_mock.Mocker() as m, Session(retrier=ExponentialBackoffRetrier(base_delay=0.0)) as session:
            m.get(URL, exc=requests.exceptions.ConnectionError)
            with pytest.raises(UnderlyingError):
                session.request(URL).data()
        assert m.call_count == 3

    def test_query_parameters_sent(self):
        with requests_mock.Mocker() as m, Session() as session:
            m.get(URL, json={})
            session.request(URL, params={"page": 2, "q": "a b"}).json()
        assert m.last_request.qs == {"page": ["2"], "q": ["a b"]}
        assert m.last_request.headers["User-Agent"].startswith("asnetkit/")
