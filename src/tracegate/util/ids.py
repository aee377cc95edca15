# (c) Copyright IBM Corp. 2024

import os
import random
import time

# Trace and span ids are unsigned 64-bit integers.
MAX_ID = 2**64 - 1

_rnd = random.Random()
_current_pid = 0


def generate_id() -> int:
    """Get a new ID.

    Returns:
        A 64-bit int for use as a Span or Trace ID.
    """
    global _current_pid

    pid = os.getpid()
    if _current_pid != pid:
        _current_pid = pid
        _rnd.seed(int(1000000 * time.time()) ^ pid)
    return _rnd.randint(1, MAX_ID)


def hex_id(id: int) -> str:
    """
    Returns the 16 character, zero padded hexadecimal representation of the given ID.
    """
    return format(int(id), "016x")
