# sculpture_guide/utils/timers.py
# -*- coding: utf-8 -*-
"""
Sculpture Guide Relay — timing utilities
----------------------------------------
Stopwatch used around the dataset load and the remote session configure,
so slow disks or a slow realtime endpoint show up in the logs.
"""

from __future__ import annotations

import logging
import time
from contextlib import ContextDecorator
from typing import Optional


class Stopwatch(ContextDecorator):
    """
    Time a block and log the duration under `label`.

        with Stopwatch("Realtime session configure", session_log, logging.DEBUG):
            await client.configure(options)

    A block that raises is logged as "<label> failed after N s" and the
    exception propagates. The duration stays available as `.elapsed`.
    """

    def __init__(
        self,
        label: str,
        logger: Optional[logging.Logger | logging.LoggerAdapter] = None,
        level: int = logging.INFO,
    ) -> None:
        self.label = label
        self.logger = logger or logging.getLogger(__name__)
        self.level = level
        self._start: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Stopwatch":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, exc_tb) -> None:  # type: ignore[override]
        self.elapsed = time.perf_counter() - self._start
        if exc_type is None:
            self.logger.log(self.level, "%s took %.3f s", self.label, self.elapsed)
        else:
            self.logger.log(self.level, "%s failed after %.3f s", self.label, self.elapsed)
