"""Console logging for the timemaster entry points."""

import logging
import sys

LOGGER_NAME = "timemaster"


def setup_logging(level: str | int = logging.WARNING) -> logging.Logger:
    """Attach a single stderr handler to the ``timemaster`` logger.

    Safe to call more than once: an existing handler is replaced, not
    duplicated. Unknown level names fall back to WARNING.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.strip().upper())
        if not isinstance(level, int):
            level = logging.WARNING

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    for h in list(logger.handlers):
        if getattr(h, "_timemaster", False):
            logger.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(level)
    ch.setFormatter(fmt)
    ch._timemaster = True
    logger.addHandler(ch)

    # Route warnings.warn(...) into logging as 'py.warnings'
    logging.captureWarnings(True)
    return logger
