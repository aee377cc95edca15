# (c) Copyright IBM Corp. 2024

"""
The parts of the span model consumed by the samplers and the trace
transport.  Spans are built by the instrumentation; tracegate only reads
their identity, writes the sampling decision and serializes them.
"""

import threading
import time
from typing import Any, Dict, Optional, Union

from tracegate.util.ids import generate_id, hex_id


class Context(object):
    """
    State shared by all the spans of one trace.

    <sampling_priority> is None until a priority has been decided, either by
    this process or by an upstream service that propagated it.
    """

    def __init__(
        self,
        trace_id: Optional[int] = None,
        sampling_priority: Optional[int] = None,
    ) -> None:
        self.trace_id = trace_id if trace_id is not None else generate_id()
        self._sampling_priority = sampling_priority
        self._lock = threading.Lock()

    @property
    def sampling_priority(self) -> Optional[int]:
        with self._lock:
            return self._sampling_priority

    @sampling_priority.setter
    def sampling_priority(self, value: Optional[int]) -> None:
        with self._lock:
            self._sampling_priority = value

    def __repr__(self) -> str:
        return f"Context(trace_id={hex_id(self.trace_id)}, sampling_priority={self.sampling_priority})"


class Span(object):
    def __init__(
        self,
        name: str,
        service: Optional[str] = None,
        resource: Optional[str] = None,
        trace_id: Optional[int] = None,
        span_id: Optional[int] = None,
        parent_id: Optional[int] = None,
        context: Optional[Context] = None,
    ) -> None:
        self.name = name
        self.service = service
        self.resource = resource or name
        self.context = context

        if trace_id is None:
            trace_id = context.trace_id if context is not None else generate_id()
        self.trace_id = trace_id
        self.span_id = span_id if span_id is not None else generate_id()
        self.parent_id = parent_id

        self.sampled = True
        self.error = 0
        self.meta: Dict[str, str] = {}
        self.metrics: Dict[str, Union[int, float]] = {}

        self.start_ns = time.time_ns()
        self.duration_ns: Optional[int] = None

    def set_tag(self, key: str, value: Any) -> None:
        self.meta[key] = str(value)

    def get_tag(self, key: str) -> Optional[str]:
        return self.meta.get(key)

    def set_metric(self, key: str, value: Union[int, float]) -> None:
        self.metrics[key] = value

    def get_metric(self, key: str) -> Optional[Union[int, float]]:
        return self.metrics.get(key)

    def finish(self) -> None:
        if self.duration_ns is None:
            self.duration_ns = time.time_ns() - self.start_ns

    @property
    def finished(self) -> bool:
        return self.duration_ns is not None

    def to_dict(self) -> Dict[str, Any]:
        """
        Representation sent to the collector agent.
        """
        data = {
            "trace_id": self.trace_id,
            "span_id": self.span_id,
            "parent_id": self.parent_id or 0,
            "name": self.name,
            "service": self.service,
            "resource": self.resource,
            "start": self.start_ns,
            "duration": self.duration_ns or 0,
            "error": self.error,
        }
        if self.meta:
            data["meta"] = dict(self.meta)
        if self.metrics:
            data["metrics"] = dict(self.metrics)
        return data

    def __repr__(self) -> str:
        return (
            f"Span(name={self.name!r}, service={self.service!r}, "
            f"trace_id={hex_id(self.trace_id)}, span_id={hex_id(self.span_id)})"
        )
