# (c) Copyright IBM Corp. 2024

import logging
import time
from typing import Generator
from unittest.mock import MagicMock, Mock

import pytest

from tracegate.constants import AUTO_KEEP, AUTO_REJECT, SAMPLING_PRIORITY_KEY
from tracegate.log import logger
from tracegate.options import StandardOptions
from tracegate.sampling import PrioritySampler, RateByServiceSampler, RateSampler
from tracegate.span import Span
from tracegate.transport.api import default_apis
from tracegate.transport.response import HTTPResponse, InternalErrorResponse, Response
from tracegate.transport.traces import TraceTransport
from tracegate.writer import AgentWriter


class OkResponse(Response):
    def __init__(self, rates=None) -> None:
        self.rates = rates

    @property
    def ok(self) -> bool:
        return True

    @property
    def service_rates(self):
        return self.rates


def make_trace(trace_id: int, service: str = "checkout") -> list:
    root = Span("web.request", service=service, trace_id=trace_id)
    child = Span("db.query", service=service, trace_id=trace_id, parent_id=root.span_id)
    return [root, child]


class TestAgentWriter:
    @pytest.fixture(autouse=True)
    def _resource(self) -> Generator[None, None, None]:
        self.invoker = Mock(return_value=OkResponse())
        self.transport = TraceTransport(default_apis(), "v0.4", self.invoker)
        self.options = StandardOptions(env="prod", flush_interval=0.01)
        self.writer = AgentWriter(options=self.options, transport=self.transport)
        yield
        self.writer.shutdown(report_final=False)
        self.writer = None

    def test_default_sampler_is_priority_sampler(self) -> None:
        assert isinstance(self.writer.sampler, PrioritySampler)
        assert self.writer.sampler.priority_sampler.env == "prod"

    def test_log_level_from_options(self) -> None:
        AgentWriter(options=StandardOptions(log_level=logging.INFO), transport=self.transport)
        assert logger.level == logging.INFO

        AgentWriter(options=StandardOptions(log_level=logging.WARN), transport=self.transport)
        assert logger.level == logging.WARN

    def test_write_samples_and_queues(self) -> None:
        trace = make_trace(1)

        assert self.writer.write(trace)

        assert all(span.sampled for span in trace)
        assert trace[0].get_metric(SAMPLING_PRIORITY_KEY) == AUTO_KEEP
        assert self.writer.queued_traces() == [trace]
        assert self.writer.queued_traces() == []

    def test_write_empty_trace(self) -> None:
        assert not self.writer.write([])

    def test_write_sets_default_service(self) -> None:
        self.writer.options.service_name = "fallback"
        trace = [Span("web.request")]

        self.writer.write(trace)

        assert trace[0].service == "fallback"

    def test_rejected_trace_is_dropped(self) -> None:
        class DropAll(RateSampler):
            def should_sample(self, span: Span) -> bool:
                return False

        writer = AgentWriter(options=self.options, sampler=DropAll(0.5), transport=self.transport)
        trace = make_trace(1)

        assert not writer.write(trace)
        assert not any(span.sampled for span in trace)
        assert writer.queued_traces() == []

    def test_flush_sends_queued_traces(self) -> None:
        first, second = make_trace(1), make_trace(2)
        self.writer.write(first)
        self.writer.write(second)

        response = self.writer.flush()

        assert response.ok
        self.invoker.assert_called_once()
        api, env = self.invoker.call_args.args
        assert api.version == "v0.4"
        assert env.parcel.data == [first, second]
        assert self.writer.flush() is None

    def test_flush_updates_service_rates(self) -> None:
        self.invoker.return_value = OkResponse({"service:checkout,env:prod": 0.0001})
        self.writer.write(make_trace(1))

        self.writer.flush()

        sampler = self.writer.sampler.priority_sampler
        assert isinstance(sampler, RateByServiceSampler)
        assert sampler.sample_rate(Span("op", service="checkout")) == 0.0001

        priorities = set()
        for trace_id in range(1, 200):
            trace = make_trace(trace_id)
            assert self.writer.write(trace)
            priorities.add(trace[0].get_metric(SAMPLING_PRIORITY_KEY))
        assert AUTO_REJECT in priorities

    def test_flush_with_undecodable_reply(self) -> None:
        raw = MagicMock()
        raw.status_code = 200
        raw.content = b"\xff\xfe{"
        self.invoker.return_value = HTTPResponse(raw)
        self.writer.write(make_trace(1))
        rates_before = self.writer.sampler.priority_sampler.rates()

        response = self.writer.flush()

        assert response.ok
        assert self.writer.sampler.priority_sampler.rates() == rates_before

        self.writer.write(make_trace(2))
        self.writer.shutdown()
        assert self.invoker.call_count == 2

    def test_flush_never_raises(self) -> None:
        self.invoker.side_effect = RuntimeError("agent down")
        self.writer.write(make_trace(1))

        response = self.writer.flush()

        assert isinstance(response, InternalErrorResponse)
        assert self.transport.stats.internal_error == 1

    def test_flush_skipped_while_another_is_running(self) -> None:
        self.writer.write(make_trace(1))
        self.writer.flush_lock.acquire()
        try:
            assert self.writer.flush() is None
        finally:
            self.writer.flush_lock.release()
        self.invoker.assert_not_called()

    def test_background_thread_flushes(self) -> None:
        self.writer.start()
        assert self.writer.is_flushing_thread_running()
        self.writer.write(make_trace(1))

        deadline = time.time() + 5
        while not self.invoker.called and time.time() < deadline:
            time.sleep(0.01)

        assert self.invoker.called

        self.writer.shutdown(report_final=False)
        self.writer.flushing_thread.join(timeout=5)
        assert not self.writer.is_flushing_thread_running()

    def test_shutdown_reports_final_traces(self) -> None:
        self.writer.write(make_trace(1))

        self.writer.shutdown()

        self.invoker.assert_called_once()
