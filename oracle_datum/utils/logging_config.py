"""Logging configuration shared by the oracle datum modules"""

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_handler = None


def setup_logging(level="INFO"):
    """Attach a single stream handler to the root logger.

    Calling it again only updates the level.
    """
    global _handler
    root = logging.getLogger()
    if _handler is None:
        _handler = logging.StreamHandler()
        _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    if _handler not in root.handlers:
        root.addHandler(_handler)
    root.setLevel(level.upper() if isinstance(level, str) else level)
    return _handler


__all__ = ["logging", "setup_logging", "LOG_FORMAT"]
