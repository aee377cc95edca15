# (c) Copyright IBM Corp. 2024

"""
Invoker performing the actual HTTP call to the collector agent.
"""

from typing import Optional

import requests

from tracegate.constants import DEFAULT_AGENT_HOST, DEFAULT_AGENT_PORT, DEFAULT_TIMEOUT
from tracegate.transport.api import API
from tracegate.transport.env import Env
from tracegate.transport.request import TracesParcel
from tracegate.transport.response import HTTPResponse
from tracegate.version import VERSION


class HTTPInvoker(object):
    """
    Callable used as the invoker of a TransportClient.  Exceptions raised by
    requests are left to the client, which turns them into responses.
    """

    def __init__(
        self,
        host: str = DEFAULT_AGENT_HOST,
        port: int = DEFAULT_AGENT_PORT,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.host = host
        self.port = port
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()

    def __call__(self, api: API, env: Env) -> HTTPResponse:
        self.prepare(api, env)

        response = self.session.request(
            env.verb,
            self.url(env.path),
            data=env.body,
            headers=env.headers,
            timeout=self.timeout,
        )
        return HTTPResponse(response)

    def prepare(self, api: API, env: Env) -> None:
        """
        Fills the envelope for <api>: path, headers and encoded body.
        """
        parcel = env.parcel
        payload = parcel.to_payload() if isinstance(parcel, TracesParcel) else parcel.data

        env.path = api.endpoint
        env.body = api.encode(payload)
        env.headers = {
            "Content-Type": api.content_type,
            "Datadog-Meta-Lang": "python",
            "Datadog-Meta-Tracer-Version": VERSION,
        }
        if isinstance(parcel, TracesParcel):
            env.headers["X-Datadog-Trace-Count"] = str(parcel.count)

    def url(self, path: str) -> str:
        return f"http://{self.host}:{self.port}{path}"
