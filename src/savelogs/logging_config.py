"""Progress logging for a capture run.

Every module logs under the ``savelogs`` namespace. The CLI attaches a single
stderr handler to that namespace so progress lines stay out of the summary
echoed on stdout.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO


NAMESPACE = "savelogs"
PROGRESS_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
CLOCK_FORMAT = "%H:%M:%S"


def configure_logging(verbose: bool = False, stream: Optional[TextIO] = None) -> logging.Logger:
    """Route ``savelogs.*`` records to *stream* (stderr by default).

    INFO shows one line per collection task; ``verbose`` adds the command lines
    and tool lookups logged at DEBUG. Calling it again replaces the handler.
    """
    level = logging.DEBUG if verbose else logging.INFO
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(PROGRESS_FORMAT, CLOCK_FORMAT))

    logger = logging.getLogger(NAMESPACE)
    for previous in list(logger.handlers):
        logger.removeHandler(previous)
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.debug("Verbose progress logging enabled")
    return logger
