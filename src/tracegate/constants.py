# (c) Copyright IBM Corp. 2024

"""
Values shared between the samplers, the span model and the transport.
"""

# Priority is a hint given to the collector so that it knows which traces to
# reject or keep.  In a distributed trace it must be decided once and then
# propagated along with the trace context.

# Explicitly asks the collector to drop the trace.
USER_REJECT = -1
# Set by the automatic samplers to drop the trace.
AUTO_REJECT = 0
# Set by the automatic samplers to keep the trace.
AUTO_KEEP = 1
# Explicitly asks the collector to keep the trace.
USER_KEEP = 2

SAMPLING_PRIORITY_KEY = "_sampling_priority_v1"
SAMPLE_RATE_METRIC_KEY = "_sample_rate"

DEFAULT_AGENT_HOST = "localhost"
DEFAULT_AGENT_PORT = 8126
DEFAULT_TIMEOUT = 1.0
DEFAULT_FLUSH_INTERVAL = 1.0

V0_3 = "v0.3"
V0_4 = "v0.4"
DEFAULT_API_VERSION = V0_4
