"""
Logging setup for begone. All modules log via the ``logger`` defined here.
"""

import sys
import time
import logging


class Formatter(logging.Formatter):
    """ Formatter that adds the level and a timestamp before the message.
    """

    def format(self, record):
        return "[{} {}] {}".format(
            record.levelname,
            time.strftime("%Y-%m-%d %H:%M:%S"),
            super().format(record),
        )


def set_log_level(level):
    """ Set the level of the begone logger. Accepts an int or a name
    like "info" or "WARNING".
    """
    if isinstance(level, str):
        name = level.upper()
        level = logging.getLevelName(name)
        if not isinstance(level, int):
            raise ValueError(f"Invalid log level: {name!r}")
    logger.setLevel(level)


# Get our logger
logger = logging.getLogger("begone")
logger.propagate = False
logger.setLevel(logging.INFO)

# Initialize the logger to write to stderr (but can be overriden)
_handler = logging.StreamHandler(sys.stderr)
_handler.setFormatter(Formatter())
logger.addHandler(_handler)
