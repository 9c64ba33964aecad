"""Tests for the HTTP backends."""

from unittest.mock import patch

import pytest
import requests

from wavecli.builder import build_request
from wavecli.errors import TransportFailure
from wavecli.executor import HttpResponse, MockBackend, RequestsBackend, get_backend


def _fake_response(status_code=200, headers=None, content=b"{}"):
    return type(
        "Response",
        (),
        {
            "status_code": status_code,
            "headers": headers or {"Content-Type": "application/json"},
            "content": content,
        },
    )()


class TestRequestsBackend:
    @patch("wavecli.executor.requests.request")
    def test_passes_resolved_request(self, mock_req):
        mock_req.return_value = _fake_response(201, content=b'{"id":1}')
        req = build_request(
            method="POST",
            url="https://api.example.com/users",
            headers=[("X-Trace", "1")],
            fields=[("name", "alice")],
        )
        resp = RequestsBackend().send(req, timeout=5)

        kwargs = mock_req.call_args[1]
        assert kwargs["method"] == "POST"
        assert kwargs["url"] == "https://api.example.com/users"
        assert kwargs["headers"] == {"X-Trace": "1", "Content-Type": "application/json"}
        assert kwargs["data"] == b'{"name":"alice"}'
        assert kwargs["timeout"] == 5
        assert resp.status_code == 201
        assert resp.body == b'{"id":1}'
        assert resp.header("content-type") == "application/json"

    @patch("wavecli.executor.requests.request")
    def test_no_body(self, mock_req):
        mock_req.return_value = _fake_response()
        RequestsBackend().send(build_request(method="GET", url="https://x.io"))
        assert mock_req.call_args[1]["data"] is None

    @patch("wavecli.executor.requests.request")
    def test_error_status_is_not_a_failure(self, mock_req):
        mock_req.return_value = _fake_response(503, content=b"down")
        resp = RequestsBackend().send(build_request(method="GET", url="https://x.io"))
        assert resp.status_code == 503
        assert resp.is_error()

    @patch("wavecli.executor.requests.request")
    def test_connection_error_passed_through(self, mock_req):
        mock_req.side_effect = requests.exceptions.ConnectionError(
            "Failed to resolve 'nowhere.invalid'",
        )
        with pytest.raises(TransportFailure) as exc:
            RequestsBackend().send(build_request(method="GET", url="https://nowhere.invalid"))
        assert str(exc.value) == "Failed to resolve 'nowhere.invalid'"

    @patch("wavecli.executor.requests.request")
    def test_timeout_passed_through(self, mock_req):
        mock_req.side_effect = requests.exceptions.Timeout("read timed out")
        with pytest.raises(TransportFailure, match="read timed out"):
            RequestsBackend().send(build_request(method="GET", url="https://x.io"))


class TestMockBackend:
    def test_records_and_replays(self):
        canned = HttpResponse(status_code=204)
        backend = MockBackend(response=canned)
        req = build_request(method="DELETE", url="https://x.io/1")
        assert backend.send(req, timeout=3) is canned
        assert backend.sent == [req]
        assert backend.last is req
        assert backend.timeouts == [3]

    def test_raises_configured_error(self):
        backend = MockBackend(error=TransportFailure("tls handshake failed"))
        with pytest.raises(TransportFailure):
            backend.send(build_request(method="GET", url="https://x.io"))
        assert len(backend.sent) == 1

    def test_default_response(self):
        assert MockBackend().last is None
        resp = MockBackend().send(build_request(method="GET", url="https://x.io"))
        assert resp.status_code == 200


class TestGetBackend:
    def test_live_backend_by_default(self):
        assert isinstance(get_backend(), RequestsBackend)


class TestHttpResponse:
    def test_text_decodes_utf8(self):
        assert HttpResponse(body="héllo".encode()).text == "héllo"

    def test_content_type(self):
        resp = HttpResponse(headers=[("content-type", "text/html")])
        assert resp.content_type == "text/html"
