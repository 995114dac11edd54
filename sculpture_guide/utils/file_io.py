# sculpture_guide/utils/file_io.py
# -*- coding: utf-8 -*-
"""
Sculpture Guide Relay — file_io utilities
-----------------------------------------
Tolerant JSON reading: on errors, log and return a default instead of
crashing. The dataset loader treats the default as "load failed".
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def read_json_safely(
    path: Path,
    default: Optional[T] = None,
    *,
    log_missing: bool = False,
) -> Optional[T]:
    """
    Parsed JSON from `path`, or `default` when the file is missing, unreadable
    or not valid JSON.

    Read and parse problems are logged at WARNING. A missing file is only
    logged when `log_missing` is set, since some callers expect it.
    """
    if not path.is_file():
        if log_missing:
            logger.warning("JSON file not found: %s", path)
        return default

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Could not read %s: %s", path, exc)
        return default

    try:
        return json.loads(text)  # type: ignore[return-value]
    except json.JSONDecodeError as exc:
        logger.warning("Invalid JSON in %s: %s", path, exc)
        return default
