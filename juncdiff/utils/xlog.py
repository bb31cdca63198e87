# xlog.py - logging.


import logging
import sys


LOG_FORMAT = "[%(levelname)s] %(asctime)s - %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def init_logging(stream = None, level = logging.INFO):
    """Initialize the root logger.

    Parameters
    ----------
    stream : file object or None, default None
        The logging stream. If None, set to `sys.stderr`.
    level : int, default logging.INFO
        The logging level.

    Returns
    -------
    Void.
    """
    if stream is None:
        stream = sys.stderr
    logging.basicConfig(
        format = LOG_FORMAT,
        datefmt = LOG_DATEFMT,
        level = level,
        stream = stream,
        force = True
    )
