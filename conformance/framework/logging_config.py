"""Console logging configuration for the harness."""

import logging
import logging.config
import os
from typing import Optional

from .context import HARNESS_LOGGER, LOG_FORMAT

HOST_LOGGER = f"{HARNESS_LOGGER}.host"


def setup_logging(verbose: int = 0, log_level: Optional[str] = None) -> None:
    """
    Setup console logging.

    Args:
        verbose: 0 keeps the console quiet; records are only captured by the
                 per-run log buffer and shown when a trace fails. 1 streams
                 extension output to stderr, 2 or more streams everything.
        log_level: Level for the streamed loggers. Defaults to the LOG_LEVEL
                   env var or DEBUG.
    """
    if log_level is None:
        log_level = os.getenv("LOG_LEVEL", "DEBUG")
    level = log_level.upper()

    console_loggers = []
    if verbose == 1:
        console_loggers = [HOST_LOGGER]
    elif verbose >= 2:
        console_loggers = [HARNESS_LOGGER]

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "plain": {"format": LOG_FORMAT},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "plain",
                "stream": "ext://sys.stderr",
            },
        },
        "loggers": {
            HARNESS_LOGGER: {"level": "DEBUG", "handlers": [], "propagate": False},
            HOST_LOGGER: {"level": "DEBUG", "handlers": [], "propagate": True},
        },
    }
    for name in console_loggers:
        logging_config["loggers"][name] = {
            "level": level,
            "handlers": ["console"],
            "propagate": name != HARNESS_LOGGER,
        }

    logging.config.dictConfig(logging_config)
