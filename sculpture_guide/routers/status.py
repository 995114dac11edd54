# sculpture_guide/routers/status.py
# -*- coding: utf-8 -*-
"""
Sculpture Guide — /status router
--------------------------------
Read-only view of the sculpture dataset the relay uses for enrichment:

    GET /status/data          -> loaded flag, path, per-collection counts
    GET /status/data?reload=1 -> same, after re-reading the file
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter

from sculpture_guide.core.entity_store import get_entity_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/status", tags=["status"])


@router.get("/data")
async def data_status(reload: bool = False) -> Dict[str, Any]:
    """
    Status of the process-wide Entity Store.

    A dataset that failed to load is reported with loaded=false; it is
    never an HTTP error.
    """
    store = get_entity_store(force_reload=reload)
    if reload:
        logger.info("Dataset reload requested via /status/data (loaded=%s)", store.loaded)
    return {
        "loaded": store.loaded,
        "path": str(store.path),
        "counts": store.counts(),
    }
