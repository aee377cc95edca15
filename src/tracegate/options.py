# (c) Copyright IBM Corp. 2024

"""
Options for the sampler and the transport.

Values are resolved in this order, later sources winning:
defaults > configuration file (TRACEGATE_CONFIG_PATH) > environment variables > keyword arguments
"""

import logging
import os
from typing import Any, Dict

from tracegate.constants import (
    DEFAULT_AGENT_HOST,
    DEFAULT_AGENT_PORT,
    DEFAULT_API_VERSION,
    DEFAULT_FLUSH_INTERVAL,
    DEFAULT_TIMEOUT,
)
from tracegate.log import logger
from tracegate.util.config import (
    get_config_from_yaml,
    is_truthy,
    parse_number,
    parse_sample_rate,
)

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARN,
    "warning": logging.WARN,
    "error": logging.ERROR,
}


class StandardOptions(object):
    """The options class used when reporting to a collector agent on the host"""

    def __init__(self, **kwds: Dict[str, Any]) -> None:
        self.debug = False
        self.log_level = logging.WARN
        self.service_name = None
        self.env = None

        self.sample_rate = 1.0
        self.priority_sampling = True

        self.agent_host = DEFAULT_AGENT_HOST
        self.agent_port = DEFAULT_AGENT_PORT
        self.api_version = DEFAULT_API_VERSION
        self.timeout = DEFAULT_TIMEOUT
        self.flush_interval = DEFAULT_FLUSH_INTERVAL

        self.set_from_yaml()
        self.set_from_env()

        self.__dict__.update(kwds)

    def set_from_yaml(self) -> None:
        """
        Applies the configuration file referenced by TRACEGATE_CONFIG_PATH, if any.

        env: production
        service: checkout
        sampling:
          rate: 0.5
          priority: true
        transport:
          host: localhost
          port: 8126
          api_version: v0.4
          timeout: 1.0
        """
        reader = get_config_from_yaml()
        if reader is None or not reader.data:
            return
        data = reader.data

        if data.get("env"):
            self.env = str(data["env"])
        if data.get("service"):
            self.service_name = str(data["service"])

        sampling = reader.section("sampling")
        if "rate" in sampling:
            rate = parse_sample_rate(sampling["rate"], "configuration file")
            if rate is not None:
                self.sample_rate = rate
        if "priority" in sampling:
            self.priority_sampling = is_truthy(sampling["priority"])

        transport = reader.section("transport")
        if transport.get("host"):
            self.agent_host = str(transport["host"])
        if "port" in transport:
            port = parse_number(transport["port"], "configuration file", int)
            if port is not None:
                self.agent_port = port
        if transport.get("api_version"):
            self.api_version = str(transport["api_version"])
        if "timeout" in transport:
            timeout = parse_number(transport["timeout"], "configuration file")
            if timeout is not None:
                self.timeout = timeout

    def set_from_env(self) -> None:
        if "TRACEGATE_DEBUG" in os.environ:
            self.log_level = logging.DEBUG
            self.debug = True
        elif "TRACEGATE_LOG_LEVEL" in os.environ:
            level = os.environ["TRACEGATE_LOG_LEVEL"].lower()
            if level in LOG_LEVELS:
                self.log_level = LOG_LEVELS[level]
            else:
                logger.warning(f"Invalid TRACEGATE_LOG_LEVEL value: {level}. Ignoring it.")

        if "TRACEGATE_SERVICE_NAME" in os.environ:
            self.service_name = os.environ["TRACEGATE_SERVICE_NAME"]

        if "TRACEGATE_ENV" in os.environ:
            self.env = os.environ["TRACEGATE_ENV"]

        if "TRACEGATE_SAMPLE_RATE" in os.environ:
            rate = parse_sample_rate(
                os.environ["TRACEGATE_SAMPLE_RATE"], "TRACEGATE_SAMPLE_RATE"
            )
            if rate is not None:
                self.sample_rate = rate

        if "TRACEGATE_PRIORITY_SAMPLING" in os.environ:
            self.priority_sampling = is_truthy(os.environ["TRACEGATE_PRIORITY_SAMPLING"])

        if "TRACEGATE_AGENT_HOST" in os.environ:
            self.agent_host = os.environ["TRACEGATE_AGENT_HOST"]

        if "TRACEGATE_AGENT_PORT" in os.environ:
            port = parse_number(
                os.environ["TRACEGATE_AGENT_PORT"], "TRACEGATE_AGENT_PORT", int
            )
            if port is not None:
                self.agent_port = port

        if "TRACEGATE_API_VERSION" in os.environ:
            self.api_version = os.environ["TRACEGATE_API_VERSION"]

        if "TRACEGATE_FLUSH_INTERVAL" in os.environ:
            interval = parse_number(
                os.environ["TRACEGATE_FLUSH_INTERVAL"], "TRACEGATE_FLUSH_INTERVAL"
            )
            if interval is not None:
                self.flush_interval = interval
