# sculpture_guide/utils/logging.py
# -*- coding: utf-8 -*-
"""
Sculpture Guide Relay — logging utilities
-----------------------------------------
Central logging configuration for the relay.

We try to:
- Use a consistent format across all modules.
- Honour settings.debug (more verbose in dev).
- Play nice with Uvicorn/FastAPI logs.
- Tag every record of one WebSocket session with its session id.
"""

from __future__ import annotations

import logging
import os
from typing import Any, MutableMapping, Optional, Tuple


def setup_logging(
    *,
    debug: bool = False,
    level: Optional[int] = None,
) -> None:
    """
    Configure root logging for the process.

    Parameters
    ----------
    debug:
        If True, default log level becomes DEBUG, otherwise INFO.
        This is typically wired from settings.debug.
    level:
        Optional explicit logging level (overrides debug flag).

    This function is idempotent: calling it multiple times is safe.
    """
    if level is not None:
        base_level = level
    else:
        base_level = logging.DEBUG if debug else logging.INFO

    fmt = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"

    # If logging is already configured (handlers exist), just adjust levels.
    root = logging.getLogger()
    if root.handlers:
        root.setLevel(base_level)
        for h in root.handlers:
            h.setLevel(base_level)
        return

    logging.basicConfig(
        level=base_level,
        format=fmt,
        datefmt=datefmt,
    )

    # The websockets client logs every frame at DEBUG; audio makes that unreadable.
    for noisy in ("uvicorn.access", "websockets", "httpx"):
        logging.getLogger(noisy).setLevel(os.getenv("RELAY_NOISY_LOG_LEVEL", "WARNING"))


def get_logger(name: str) -> logging.Logger:
    """
    Small convenience wrapper around logging.getLogger.

    Usage:
        from sculpture_guide.utils import get_logger
        logger = get_logger(__name__)
    """
    return logging.getLogger(name)


class SessionLoggerAdapter(logging.LoggerAdapter):
    """
    Prefix every message with the owning session id.

        log = SessionLoggerAdapter(logger, session_id)
        log.info("Session closing")   # -> "[session=3f2a...] Session closing"
    """

    def __init__(self, logger: logging.Logger, session_id: str) -> None:
        super().__init__(logger, {"session_id": session_id})

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        return f"[session={self.extra['session_id']}] {msg}", kwargs
