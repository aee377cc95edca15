# (c) Copyright IBM Corp. 2024

from typing import Dict, List, Optional

from tracegate.span import Span
from tracegate.transport.api import APIMap
from tracegate.transport.client import Invoker, TransportClient
from tracegate.transport.request import Request, TracesParcel
from tracegate.transport.response import Response


class TraceTransport(object):
    """
    Sends lists of traces to the collector agent through a TransportClient.
    """

    def __init__(self, apis: APIMap, api_id: str, invoker: Invoker) -> None:
        self.client = TransportClient(apis, api_id)
        self.invoker = invoker

    @property
    def stats(self):
        return self.client.stats

    def send_traces(self, traces: List[List[Span]]) -> Response:
        request = Request(TracesParcel(traces))
        return self.client.send_request(request, self.invoker)

    def service_rates(self, response: Response) -> Optional[Dict[str, float]]:
        """
        Rates by service carried by <response>, when the current API provides them.
        """
        if not response.ok or not self.client.current_api.service_rates:
            return None
        return response.service_rates
