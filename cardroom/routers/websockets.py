from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from ..connection import Connection
from ..dispatcher import EventDispatcher

logger = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["ws"])


@router.websocket("/ws")
async def websocket_endpoint(ws: WebSocket):
    await ws.accept()
    dispatcher: EventDispatcher = ws.app.state.dispatcher
    connection = Connection(ws)
    logger.debug("connection %s opened", connection.connection_id)
    try:
        while True:
            dispatcher.submit(connection, await ws.receive_text())
    except WebSocketDisconnect:
        pass
    finally:
        connection.closed = True
        dispatcher.submit_disconnect(connection)
        logger.debug("connection %s closed", connection.connection_id)
