# (c) Copyright IBM Corp. 2024

"""
The AgentWriter samples finished traces, queues the ones it keeps and
reports them to the collector agent from a background thread.  The rates
by service the agent answers with are fed back into the priority sampler.
"""

import queue
import threading
from typing import List, Optional

from tracegate.log import logger, set_log_level
from tracegate.options import StandardOptions
from tracegate.sampling import PrioritySampler, Sampler, sampler_from_options
from tracegate.span import Span
from tracegate.transport.api import default_apis
from tracegate.transport.http import HTTPInvoker
from tracegate.transport.response import Response
from tracegate.transport.traces import TraceTransport
from tracegate.util import every
from tracegate.version import VERSION


class AgentWriter(object):
    def __init__(
        self,
        options: Optional[StandardOptions] = None,
        sampler: Optional[Sampler] = None,
        transport: Optional[TraceTransport] = None,
    ) -> None:
        self.options = options if options is not None else StandardOptions()
        self.update_log_level()

        self.sampler = sampler if sampler is not None else sampler_from_options(self.options)

        if transport is None:
            invoker = HTTPInvoker(
                host=self.options.agent_host,
                port=self.options.agent_port,
                timeout=self.options.timeout,
            )
            transport = TraceTransport(default_apis(), self.options.api_version, invoker)
        self.transport = transport

        # Finished traces waiting to be reported
        self.trace_queue = queue.Queue()

        # Background thread flushing the queue every self.flush_interval seconds
        self.flushing_thread = None
        self.thread_shutdown = threading.Event()

        # Never two flushes in progress at once
        self.flush_lock = threading.Lock()

        self.flush_interval = self.options.flush_interval

        logger.debug(f"AgentWriter: tracegate {VERSION} using {self.sampler!r}")

    def update_log_level(self) -> None:
        """Uses the value in <self.options.log_level> to update the package logger"""
        set_log_level(self.options.log_level)

    def write(self, spans: List[Span]) -> bool:
        """
        Samples a finished trace and queues it when kept.

        The first span is taken as the root of the trace; the other spans
        follow its decision.
        @return: True if the trace was queued
        """
        if not spans:
            return False

        for span in spans:
            if span.service is None and self.options.service_name:
                span.service = self.options.service_name

        root = spans[0]
        sampled = self.sampler.sample(root)
        for span in spans[1:]:
            span.sampled = sampled

        if not sampled:
            logger.debug(f"AgentWriter: dropping trace {root!r}")
            return False

        self.trace_queue.put(spans)
        return True

    def queued_traces(self) -> List[List[Span]]:
        traces = []
        while True:
            try:
                trace = self.trace_queue.get(False)
            except queue.Empty:
                break
            else:
                traces.append(trace)
        return traces

    def flush(self) -> Optional[Response]:
        """
        Reports the queued traces.
        @return: the transport response, or None if there was nothing to do
        """
        if not self.flush_lock.acquire(False):
            logger.debug("AgentWriter.flush: Couldn't acquire lock")
            return None

        try:
            traces = self.queued_traces()
            if not traces:
                return None

            logger.debug(f"Reporting {len(traces)} traces")
            response = self.transport.send_traces(traces)

            rates = self.transport.service_rates(response)
            if rates is not None and isinstance(self.sampler, PrioritySampler):
                self.sampler.update(rates)

            return response
        finally:
            self.flush_lock.release()

    def start(self) -> None:
        """
        Starts the background thread flushing the queue.
        @return: None
        """
        if self.is_flushing_thread_running():
            return

        logger.debug("AgentWriter.start: launching flushing thread")
        self.thread_shutdown.clear()
        self.flushing_thread = threading.Thread(
            target=self.thread_loop, name="tracegate-writer", daemon=True
        )
        self.flushing_thread.start()

    def thread_loop(self) -> None:
        every(self.flush_interval, self.background_flush, "tracegate writer: flush")

    def background_flush(self) -> bool:
        if self.thread_shutdown.is_set():
            logger.debug("Thread shutdown signal is active: Shutting down flushing thread")
            return False
        self.flush()
        return True

    def is_flushing_thread_running(self) -> bool:
        return self.flushing_thread is not None and self.flushing_thread.is_alive()

    def shutdown(self, report_final: bool = True) -> None:
        """
        Stops the background thread and reports what is left in the queue.
        @return: None
        """
        self.thread_shutdown.set()

        if report_final:
            logger.debug("AgentWriter.shutdown: Reporting final traces.")
            self.flush()
