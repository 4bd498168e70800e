"""
Logging setup.

One stream handler on the root `caselab` logger, level taken from settings.
Modules call `get_logger(__name__)`.
"""

import logging
import sys

from caselab.config.settings import settings

_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_ROOT = "caselab"


def _configure() -> logging.Logger:
    root = logging.getLogger(_ROOT)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)
    root.setLevel(settings.LOG_LEVEL.upper())
    root.propagate = False
    return root


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the `caselab` hierarchy."""
    _configure()
    if name == _ROOT or name.startswith(f"{_ROOT}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_ROOT}.{name}")


logger = get_logger(_ROOT)
