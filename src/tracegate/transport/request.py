# (c) Copyright IBM Corp. 2024

from typing import Any, List, Optional

from tracegate.span import Span


class Parcel(object):
    """Data carried by a request, before encoding"""

    def __init__(self, data: Any) -> None:
        self.data = data


class TracesParcel(Parcel):
    """A list of traces, each trace being a list of spans"""

    def __init__(self, traces: List[List[Span]]) -> None:
        super(TracesParcel, self).__init__(traces)

    @property
    def count(self) -> int:
        return len(self.data)

    def to_payload(self) -> List[List[dict]]:
        return [[span.to_dict() for span in trace] for trace in self.data]


class Request(object):
    def __init__(self, parcel: Optional[Parcel] = None) -> None:
        self.parcel = parcel
