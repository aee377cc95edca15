# (c) Copyright IBM Corp. 2024

import json
from typing import Generator
from unittest.mock import MagicMock, patch

import pytest
import requests

from tracegate.constants import SAMPLING_PRIORITY_KEY
from tracegate.span import Span
from tracegate.transport.api import default_apis
from tracegate.transport.env import Env
from tracegate.transport.http import HTTPInvoker
from tracegate.transport.request import Parcel, Request, TracesParcel
from tracegate.transport.response import HTTPResponse, InternalErrorResponse
from tracegate.transport.traces import TraceTransport
from tracegate.version import VERSION


def mock_http_response(status_code: int, content: bytes = b"") -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.content = content
    return response


class TestHTTPInvoker:
    @pytest.fixture(autouse=True)
    def _resource(self) -> Generator[None, None, None]:
        self.apis = default_apis()
        self.invoker = HTTPInvoker(host="agent", port=8126, timeout=0.5)
        span = Span("web.request", service="checkout", trace_id=42, span_id=7)
        span.set_metric(SAMPLING_PRIORITY_KEY, 1)
        self.traces = [[span]]
        yield

    def test_prepare(self) -> None:
        env = Env(Request(TracesParcel(self.traces)))

        self.invoker.prepare(self.apis["v0.4"], env)

        assert env.path == "/v0.4/traces"
        assert env.headers["Content-Type"] == "application/json"
        assert env.headers["X-Datadog-Trace-Count"] == "1"
        assert env.headers["Datadog-Meta-Tracer-Version"] == VERSION

        payload = json.loads(env.body)
        assert payload[0][0]["trace_id"] == 42
        assert payload[0][0]["span_id"] == 7
        assert payload[0][0]["service"] == "checkout"
        assert payload[0][0]["metrics"] == {SAMPLING_PRIORITY_KEY: 1}

    def test_prepare_plain_parcel(self) -> None:
        env = Env(Request(Parcel({"hello": "world"})))

        self.invoker.prepare(self.apis["v0.3"], env)

        assert env.path == "/v0.3/traces"
        assert json.loads(env.body) == {"hello": "world"}
        assert "X-Datadog-Trace-Count" not in env.headers

    @patch.object(requests.Session, "request")
    def test_call(self, mock_request: MagicMock) -> None:
        mock_request.return_value = mock_http_response(200, b"{}")
        env = Env(Request(TracesParcel(self.traces)))

        response = self.invoker(self.apis["v0.4"], env)

        assert isinstance(response, HTTPResponse)
        assert response.ok
        args, kwargs = mock_request.call_args
        assert args == ("POST", "http://agent:8126/v0.4/traces")
        assert kwargs["timeout"] == 0.5
        assert kwargs["data"] == env.body


class TestTraceTransport:
    @pytest.fixture(autouse=True)
    def _resource(self) -> Generator[None, None, None]:
        self.transport = TraceTransport(default_apis(), "v0.4", HTTPInvoker(host="agent"))
        self.traces = [[Span("web.request", service="checkout")]]
        yield

    @patch.object(requests.Session, "request")
    def test_downgrades_to_v03(self, mock_request: MagicMock) -> None:
        mock_request.side_effect = [
            mock_http_response(404),
            mock_http_response(200, b"OK"),
        ]

        response = self.transport.send_traces(self.traces)

        assert response.ok
        assert self.transport.client.api_id == "v0.3"
        urls = [call.args[1] for call in mock_request.call_args_list]
        assert urls == [
            "http://agent:8126/v0.4/traces",
            "http://agent:8126/v0.3/traces",
        ]
        assert self.transport.service_rates(response) is None

    @patch.object(requests.Session, "request")
    def test_service_rates(self, mock_request: MagicMock) -> None:
        mock_request.return_value = mock_http_response(
            200, b'{"rate_by_service": {"service:checkout,env:": 0.5}}'
        )

        response = self.transport.send_traces(self.traces)

        assert self.transport.service_rates(response) == {"service:checkout,env:": 0.5}
        assert self.transport.stats.success == 1

    @patch.object(requests.Session, "request")
    def test_connection_error(self, mock_request: MagicMock) -> None:
        mock_request.side_effect = requests.exceptions.ConnectionError("refused")

        response = self.transport.send_traces(self.traces)

        assert isinstance(response, InternalErrorResponse)
        assert isinstance(response.error, requests.exceptions.ConnectionError)
        assert self.transport.service_rates(response) is None
        assert self.transport.stats.internal_error == 1
        assert self.transport.stats.consecutive_errors == 1

    @patch.object(requests.Session, "request")
    def test_unencodable_trace(self, mock_request: MagicMock) -> None:
        span = self.traces[0][0]
        span.set_metric(("bad", "key"), 1)

        response = self.transport.send_traces(self.traces)

        assert isinstance(response, InternalErrorResponse)
        assert isinstance(response.error, TypeError)
        mock_request.assert_not_called()
        assert self.transport.stats.internal_error == 1
        assert self.transport.stats.success == 0
        assert self.transport.stats.requests == 0

    @patch.object(requests.Session, "request")
    def test_encoder_without_payload(self, mock_request: MagicMock) -> None:
        apis = default_apis()
        apis["v0.4"].encoder = lambda data: None
        transport = TraceTransport(apis, "v0.4", HTTPInvoker(host="agent"))

        response = transport.send_traces(self.traces)

        assert isinstance(response, InternalErrorResponse)
        assert isinstance(response.error, ValueError)
        assert "produced no payload" in str(response.error)
        mock_request.assert_not_called()
        assert transport.stats.internal_error == 1
