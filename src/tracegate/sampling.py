# (c) Copyright IBM Corp. 2024

"""
Client side trace sampling.

The samplers form a small closed family:
  - AllSampler - keeps every trace.
  - RateSampler - keeps a deterministic subset of the traces based on the trace id.
  - RateByServiceSampler - one RateSampler per service and environment, refreshed by the agent.
  - PrioritySampler - combines a pre-sampler with a post-sampler and stamps the
    sampling priority that every service of a distributed trace agrees on.
"""

import abc
import threading
from typing import TYPE_CHECKING, Dict, Mapping, Optional

from tracegate.constants import (
    AUTO_KEEP,
    AUTO_REJECT,
    SAMPLE_RATE_METRIC_KEY,
    SAMPLING_PRIORITY_KEY,
)
from tracegate.log import logger
from tracegate.util.ids import MAX_ID

if TYPE_CHECKING:
    from tracegate.options import StandardOptions
    from tracegate.span import Span

# Same multiplier as the collector agent, so that sampling can be chained.
KNUTH_FACTOR = 1111111111111111111


class Sampler(abc.ABC):
    """Samplers decide whether a trace is kept or dropped."""

    @abc.abstractmethod
    def should_sample(self, span: "Span") -> bool:
        """
        Returns the decision for <span> without modifying it.
        """
        pass

    @abc.abstractmethod
    def sample(self, span: "Span") -> bool:
        """
        Decides for <span>, records the decision on it and returns it.
        """
        pass

    @abc.abstractmethod
    def effective_rate(self, span: "Span") -> float:
        """
        Returns the rate at which traces like <span> are kept.
        """
        pass


class AllSampler(Sampler):
    """Samples all the traces."""

    def should_sample(self, span: "Span") -> bool:
        return True

    def sample(self, span: "Span") -> bool:
        span.sampled = True
        return True

    def effective_rate(self, span: "Span") -> float:
        return 1.0


class RateSampler(Sampler):
    """
    Keeps (100 * <sample_rate>)% of the traces.

    The decision is a pure function of the trace id and the rate: the trace id
    goes through a multiplicative hash and is compared to a threshold derived
    from the rate.  Every process using the same rate keeps the same traces.
    """

    def __init__(self, sample_rate: float = 1.0) -> None:
        self._sample_rate = 1.0
        self.sampling_id_threshold = float(MAX_ID)
        self.sample_rate = sample_rate

    @property
    def sample_rate(self) -> float:
        return self._sample_rate

    @sample_rate.setter
    def sample_rate(self, sample_rate: float) -> None:
        if not _is_valid_rate(sample_rate):
            logger.warning(
                f"Sample rate {sample_rate!r} is not between 0 (exclusive) and 1, disabling the sampler"
            )
            sample_rate = 1.0

        self._sample_rate = float(sample_rate)
        self.sampling_id_threshold = self._sample_rate * MAX_ID

    def should_sample(self, span: "Span") -> bool:
        return ((span.trace_id * KNUTH_FACTOR) % MAX_ID) <= self.sampling_id_threshold

    def sample(self, span: "Span") -> bool:
        sampled = self.should_sample(span)
        span.sampled = sampled
        if sampled:
            span.set_metric(SAMPLE_RATE_METRIC_KEY, self._sample_rate)
        return sampled

    def effective_rate(self, span: "Span") -> float:
        return self._sample_rate

    def __repr__(self) -> str:
        return f"RateSampler(sample_rate={self._sample_rate})"


class RateByServiceSampler(Sampler):
    """
    Samples each service and environment pair at its own rate.

    Rates are pushed by the collector agent through update().  Spans of
    services without a dedicated rate use the default sampler.
    """

    DEFAULT_KEY = "service:,env:"

    def __init__(self, sample_rate: float = 1.0, env: Optional[str] = None) -> None:
        self.env = env
        self._lock = threading.Lock()
        self._default_sampler = RateSampler(sample_rate)
        self._samplers: Dict[str, RateSampler] = {
            self.DEFAULT_KEY: self._default_sampler
        }

    @staticmethod
    def key(service: Optional[str] = None, env: Optional[str] = None) -> str:
        return f"service:{service or ''},env:{env or ''}"

    def key_for(self, span: "Span") -> str:
        return self.key(span.service, self.env)

    def should_sample(self, span: "Span") -> bool:
        key = self.key_for(span)
        with self._lock:
            return self._samplers.get(key, self._default_sampler).should_sample(span)

    def sample(self, span: "Span") -> bool:
        key = self.key_for(span)
        with self._lock:
            return self._samplers.get(key, self._default_sampler).sample(span)

    def sample_rate(self, span: "Span") -> float:
        key = self.key_for(span)
        with self._lock:
            return self._samplers.get(key, self._default_sampler).sample_rate

    def effective_rate(self, span: "Span") -> float:
        return self.sample_rate(span)

    def update(self, rate_by_service: Mapping[str, float]) -> None:
        """
        Replaces the rate table with <rate_by_service>.

        Keys missing from the new table are dropped, except the default key.
        Samplers already known are updated in place.
        """
        with self._lock:
            for key in list(self._samplers):
                if key != self.DEFAULT_KEY and key not in rate_by_service:
                    del self._samplers[key]

            for key, rate in rate_by_service.items():
                sampler = self._samplers.get(key)
                if sampler is None:
                    self._samplers[key] = RateSampler(rate)
                else:
                    sampler.sample_rate = rate

        logger.debug(f"RateByServiceSampler: updated rates for {len(rate_by_service)} keys")

    def rates(self) -> Dict[str, float]:
        """
        Snapshot of the current rate table.
        """
        with self._lock:
            return {key: sampler.sample_rate for key, sampler in self._samplers.items()}


class PrioritySampler(Sampler):
    """
    Runs an optional pre-sampling pass, then decides the sampling priority of
    the trace.

    Pre-sampling at rates below 100% drops spans before the priority decision
    and may produce partial traces; it is not recommended.
    """

    def __init__(
        self,
        base_sampler: Optional[Sampler] = None,
        post_sampler: Optional[RateByServiceSampler] = None,
    ) -> None:
        self.pre_sampler = base_sampler if base_sampler is not None else AllSampler()
        self.priority_sampler = (
            post_sampler if post_sampler is not None else RateByServiceSampler()
        )

    def should_sample(self, span: "Span") -> bool:
        return self.pre_sampler.should_sample(span)

    def sample(self, span: "Span") -> bool:
        if self.pre_sample_active(span):
            span.sampled = self.pre_sampler.sample(span)
        else:
            span.sampled = True

        if span.sampled:
            upstream_priority = self.priority_assigned_upstream(span)
            if upstream_priority is None:
                # Every span is sent to the agent, whatever its priority, so
                # that trace metrics are computed over the complete set.
                if self.priority_sampler.should_sample(span):
                    priority = AUTO_KEEP
                else:
                    priority = AUTO_REJECT
                self.assign_priority(span, priority)
            else:
                span.set_metric(SAMPLING_PRIORITY_KEY, upstream_priority)
        else:
            # Dropped by pre-sampling: reject, so that the other services of
            # this trace do not sample it again on their own.
            self.assign_priority(span, AUTO_REJECT)

        return span.sampled

    def effective_rate(self, span: "Span") -> float:
        return self.pre_sampler.effective_rate(span)

    def update(self, rate_by_service: Mapping[str, float]) -> None:
        self.priority_sampler.update(rate_by_service)

    def pre_sample_active(self, span: "Span") -> bool:
        return self.pre_sampler.effective_rate(span) < 1.0

    @staticmethod
    def priority_assigned_upstream(span: "Span") -> Optional[int]:
        context = getattr(span, "context", None)
        if context is None:
            return None
        return context.sampling_priority

    @staticmethod
    def assign_priority(span: "Span", priority: int) -> None:
        context = getattr(span, "context", None)
        if context is not None:
            context.sampling_priority = priority

        # The metric is what gets serialized, so it is set even when a context exists.
        span.set_metric(SAMPLING_PRIORITY_KEY, priority)


def sampler_from_options(options: "StandardOptions") -> Sampler:
    """
    Builds the sampler described by <options>.

    @param options: StandardOptions
    @return: a PrioritySampler when priority sampling is enabled, otherwise a
             RateSampler (or AllSampler when the rate is 1.0)
    """
    rate = options.sample_rate
    base_sampler = RateSampler(rate) if rate < 1.0 else AllSampler()

    if not options.priority_sampling:
        return base_sampler

    if rate < 1.0:
        logger.warning(
            f"Pre-sampling at {rate} with priority sampling enabled may result in partial traces"
        )
    return PrioritySampler(
        base_sampler=base_sampler,
        post_sampler=RateByServiceSampler(env=options.env),
    )


def _is_valid_rate(sample_rate: object) -> bool:
    if isinstance(sample_rate, bool) or not isinstance(sample_rate, (int, float)):
        return False
    return 0.0 < sample_rate <= 1.0
