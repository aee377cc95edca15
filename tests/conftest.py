# (c) Copyright IBM Corp. 2024

import os
from typing import Generator

import pytest

from tracegate.span import Context, Span

TRACEGATE_VARIABLES = (
    "TRACEGATE_AGENT_HOST",
    "TRACEGATE_AGENT_PORT",
    "TRACEGATE_API_VERSION",
    "TRACEGATE_CONFIG_PATH",
    "TRACEGATE_DEBUG",
    "TRACEGATE_ENV",
    "TRACEGATE_FLUSH_INTERVAL",
    "TRACEGATE_LOG_LEVEL",
    "TRACEGATE_PRIORITY_SAMPLING",
    "TRACEGATE_SAMPLE_RATE",
    "TRACEGATE_SERVICE_NAME",
)


@pytest.fixture(autouse=True)
def clean_environment() -> Generator[None, None, None]:
    saved = {name: os.environ.pop(name) for name in TRACEGATE_VARIABLES if name in os.environ}
    yield
    for name in TRACEGATE_VARIABLES:
        os.environ.pop(name, None)
    os.environ.update(saved)


@pytest.fixture
def trace_id() -> int:
    return 1812338823475918251


@pytest.fixture
def span(trace_id: int) -> Span:
    return Span("http.request", service="checkout", trace_id=trace_id)


@pytest.fixture
def context(trace_id: int) -> Context:
    return Context(trace_id=trace_id)
