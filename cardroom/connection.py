"""Outbound side of a websocket as seen by the room core."""
from __future__ import annotations

import logging
import uuid
from typing import Optional

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class Connection:
    """Fire-and-forget sender wrapping one accepted websocket.

    A failed send marks the handle closed; later sends are skipped silently and
    nothing is ever retried.
    """

    def __init__(self, websocket: Optional[WebSocket] = None, connection_id: Optional[str] = None):
        self.websocket = websocket
        self.connection_id = connection_id or uuid.uuid4().hex[:8]
        self.closed = False

    async def send(self, payload: dict) -> None:
        if self.closed or self.websocket is None:
            return
        try:
            await self.websocket.send_json(payload)
        except Exception as exc:
            # Client went away between the close frame and our send
            self.closed = True
            logger.debug("send to %s failed (%s); handle marked closed", self.connection_id, exc)

    def __repr__(self) -> str:
        return f"<Connection {self.connection_id}{' closed' if self.closed else ''}>"


__all__ = ["Connection"]
