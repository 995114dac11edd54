# -*- coding: utf-8 -*-
"""
Sculpture Guide Relay — Utility toolbox
---------------------------------------
Shared helper functions that are used across the relay:

- file_io   : tolerant JSON reading
- logging   : central logging configuration + session-scoped loggers
- timers    : small timing helpers

Import from here for a clean public API, e.g.:

    from sculpture_guide.utils import setup_logging, read_json_safely
"""

from __future__ import annotations

from .file_io import (  # noqa: F401
    read_json_safely,
)

from .logging import (  # noqa: F401
    setup_logging,
    get_logger,
    SessionLoggerAdapter,
)

from .timers import (  # noqa: F401
    Stopwatch,
)
