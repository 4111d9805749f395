from __future__ import annotations

import logging

from .config import settings

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Apply the configured log level to the ``walletflow`` logger tree.

    Safe to call more than once; a handler is only attached the first time.
    """
    resolved = (level or settings.LOG_LEVEL or "INFO").upper()
    root = logging.getLogger("walletflow")
    root.setLevel(resolved)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        root.addHandler(handler)
