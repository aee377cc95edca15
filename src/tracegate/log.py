# (c) Copyright IBM Corp. 2024

import logging
import os
import sys

logger = None


def get_standard_logger() -> logging.Logger:
    """
    Retrieves and configures a standard logger for the tracegate package

    @return: Logger
    """
    standard_logger = logging.getLogger("tracegate")

    ch = logging.StreamHandler()
    f = logging.Formatter(
        "%(asctime)s: %(process)d %(levelname)s %(name)s: %(message)s"
    )
    ch.setFormatter(f)
    standard_logger.addHandler(ch)
    standard_logger.setLevel(logging.DEBUG)
    return standard_logger


def glogging_available() -> bool:
    """
    Determines if the gunicorn.glogging package is available

    @return:  Boolean
    """
    package_check = False

    try:
        from gunicorn import glogging  # noqa: F401
    except ImportError:
        pass
    else:
        package_check = True

    return package_check


def running_in_gunicorn() -> bool:
    """
    Determines if we are running inside of a gunicorn process.

    @return:  Boolean
    """
    process_check = False

    try:
        if hasattr(sys, "argv"):
            for arg in sys.argv:
                if arg.find("gunicorn") >= 0:
                    process_check = True
        elif os.path.isfile("/proc/self/cmdline"):
            with open("/proc/self/cmdline") as cmd:
                contents = cmd.read()

            parts = contents.split("\0")
            parts.pop()
            cmdline = " ".join(parts)

            if cmdline.find("gunicorn") >= 0:
                process_check = True

        return process_check
    except Exception:
        logging.getLogger("tracegate").debug(
            "tracegate.log.running_in_gunicorn: ", exc_info=True
        )
        return False


if running_in_gunicorn() and glogging_available():
    logger = logging.getLogger("gunicorn.error")
else:
    logger = get_standard_logger()


def set_log_level(level: int) -> bool:
    """
    Applies <level> to the package logger.

    @return: False if <level> is not one of DEBUG, INFO, WARN or ERROR
    """
    if level not in [logging.DEBUG, logging.INFO, logging.WARN, logging.ERROR]:
        logger.warning(f"set_log_level: Unknown log level {level!r}")
        return False

    logger.setLevel(level)
    return True
