# -*- coding: utf-8 -*-
"""
Sculpture Guide Relay
---------------------
WebSocket relay between a browser and a realtime conversational model,
enriched with lookups against a small sculpture dataset.

    uvicorn sculpture_guide.main:app
"""

__version__ = "0.1.0"
