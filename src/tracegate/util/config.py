# (c) Copyright IBM Corp. 2024

import os
from typing import Any, Optional

from tracegate.log import logger
from tracegate.util.config_reader import ConfigReader


def is_truthy(value: Any) -> bool:
    """
    Check if a value is truthy, accepting various formats.

    @param value: The value to check
    @return: True if the value is considered truthy, False otherwise

    Accepts the following as True:
    - True (Python boolean)
    - "True", "true" (case-insensitive string)
    - "1" (string)
    - 1 (integer)
    """
    if value is None:
        return False

    if isinstance(value, bool):
        return value

    if isinstance(value, int):
        return value == 1

    if isinstance(value, str):
        value_lower = value.lower()
        return value_lower == "true" or value == "1"

    return False


def parse_sample_rate(value: Any, source: str) -> Optional[float]:
    """
    Parses a sampling rate coming from <source>.

    @param value: float, int or numeric string
    @param source: where the value came from, used in the warning
    @return: the rate when it lies in (0.0, 1.0], otherwise None
    """
    try:
        rate = float(value)
    except (TypeError, ValueError):
        logger.warning(f"Invalid sample rate in {source}: {value!r}. Ignoring it.")
        return None

    if not 0.0 < rate <= 1.0:
        logger.warning(
            f"Sample rate in {source} must be between 0 (exclusive) and 1: {rate}. Ignoring it."
        )
        return None
    return rate


def parse_number(value: Any, source: str, cast: type = float) -> Optional[Any]:
    """
    Parses a positive number (port, timeout, interval) coming from <source>.

    @return: the parsed number, or None if <value> is not a positive number
    """
    try:
        number = cast(value)
    except (TypeError, ValueError):
        logger.warning(f"Invalid value in {source}: {value!r}. Ignoring it.")
        return None

    if number <= 0:
        logger.warning(f"Value in {source} must be positive: {number}. Ignoring it.")
        return None
    return number


def get_config_from_yaml() -> Optional[ConfigReader]:
    """
    Reads the configuration file referenced by TRACEGATE_CONFIG_PATH.

    @return: the ConfigReader, or None when the variable is unset
    """
    path = os.environ.get("TRACEGATE_CONFIG_PATH")
    if not path:
        return None
    return ConfigReader(path)
