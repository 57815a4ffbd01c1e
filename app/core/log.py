from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Attach a single stream handler to the ``app`` logger.

    Safe to call more than once (tests build several apps per process).
    """
    root = logging.getLogger("app")
    root.setLevel(getattr(logging, (level or "INFO").upper(), logging.INFO))

    if not any(getattr(h, "_app_handler", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._app_handler = True  # type: ignore[attr-defined]
        root.addHandler(handler)
