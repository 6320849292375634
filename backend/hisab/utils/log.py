import logging
import sys

from hisab.config import settings


def get_logger(name: str) -> logging.Logger:
    """
    Return the ``hisab.<name>`` logger, attaching a tagged stdout handler the
    first time it is requested. Output looks like ``[SALES] message``.
    """
    log = logging.getLogger(f"hisab.{name}")
    log.setLevel(settings.LOG_LEVEL.upper())
    if not log.handlers:
        h = logging.StreamHandler(sys.stdout)
        h.setFormatter(logging.Formatter(f"[{name.upper()}] %(message)s"))
        log.addHandler(h)
        log.propagate = False
    return log
