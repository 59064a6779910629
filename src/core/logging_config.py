"""Logging setup for the API process."""

import logging

from config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured = False


def setup_logging() -> None:
    """Configure the root logger once per process."""
    global _configured
    if _configured:
        return
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
    # uvicorn installs its own handlers; keep its access log at warning so the
    # request middleware is the single source of per-request lines.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    _configured = True
