# (c) Copyright IBM Corp. 2024

import json
import time
from typing import Any, Callable

from tracegate.log import logger


def to_json(obj: Any) -> bytes:
    """
    Convert the given object to a JSON binary string.

    Objects that are not natively serializable are reduced to their
    `__dict__`, dropping attributes that are None.

    Encoding errors (TypeError, ValueError) are raised to the caller, so that
    a payload that cannot be encoded is never sent.

    :param obj: The object to serialize to JSON.
    :return: The JSON string encoded as bytes.
    """

    def extractor(o: Any) -> dict:
        if not hasattr(o, "__dict__"):
            logger.debug(f"Couldn't serialize non dict type: {type(o)}")
            return {}
        else:
            return {k.lower(): v for k, v in o.__dict__.items() if v is not None}

    return json.dumps(
        obj, default=extractor, sort_keys=False, separators=(",", ":")
    ).encode()


def every(delay: float, task: Callable[[], Any], name: str) -> None:
    """
    Executes a task every `delay` seconds

    :param delay: the delay in seconds
    :param task: the method to run.  The method should return False if you want the loop to stop.
    :param name: name of the task, used in log messages
    :return: None
    """
    next_time = time.time() + delay

    while True:
        time.sleep(max(0, next_time - time.time()))
        try:
            if task() is False:
                break
        except Exception:
            logger.debug(
                f"Problem while executing repetitive task: {name}", exc_info=True
            )

        # skip tasks if we are behind schedule:
        next_time += (time.time() - next_time) // delay * delay + delay
