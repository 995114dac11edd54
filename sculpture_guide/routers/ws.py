# sculpture_guide/routers/ws.py
# -*- coding: utf-8 -*-
"""
Sculpture Guide — WebSocket router
----------------------------------
WebSocket endpoint for the browser client:

- /realtime
    Full-duplex relay to the remote realtime conversation.
    Binary frames are microphone audio (forwarded as-is); text frames are
    JSON (see models/messages.py). Each connection gets its own
    RealtimeRelaySession, remote client and EntityStore handle.

Design goals
------------
- Keep the router thin: all protocol logic lives in core/session.py.
- Never crash the server on one bad connection.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket

from sculpture_guide.core.config import settings
from sculpture_guide.core.entity_store import EntityStore
from sculpture_guide.core.session import RealtimeRelaySession
from sculpture_guide.providers import realtime_client
from sculpture_guide.providers.realtime_client import RealtimeConnectionError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["websocket"])


@router.websocket("/realtime")
async def websocket_realtime(websocket: WebSocket) -> None:
    """
    Relay one browser connection to the remote realtime endpoint.

    If the remote client cannot even be built (missing credentials), the
    socket is closed right away with code 1011.
    """
    await websocket.accept()
    logger.info("WebSocket /realtime connected")

    try:
        client = realtime_client.create_realtime_client(settings)
    except RealtimeConnectionError as exc:
        logger.error("Cannot create realtime client: %s", exc)
        await websocket.close(code=1011)
        return

    session = RealtimeRelaySession(
        websocket,
        client,
        EntityStore(settings.resolved_data_path()),
        config=settings,
    )
    try:
        await session.run()
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unexpected error in WS /realtime: %s", exc)
    logger.info("WebSocket /realtime finished (session=%s)", session.session_id)
