"""Sequential inbound event loop.

Websocket endpoints never call into rooms directly. They push raw frames (and
a final "connection lost" marker) onto one queue, and a single consumer task
decodes and routes them in arrival order.
"""
from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Awaitable, Callable, Dict, NamedTuple, Optional, Tuple, Type

from pydantic import ValidationError

from .connection import Connection
from .errors import RoomError
from .registry import RoomRegistry
from .schemas import (
    CreateRoomEvent,
    DieEvent,
    EndEvent,
    ErrorMessage,
    JoinRoomEvent,
    LeaveRoomEvent,
    StartEvent,
    WireModel,
    inbound_event_adapter,
)

logger = logging.getLogger(__name__)


class Envelope(NamedTuple):
    connection: Connection
    # ``None`` marks the loss of the connection
    raw: Optional[str]


Binding = Tuple[str, str]  # (room_code, player_id)


class EventDispatcher:
    def __init__(self, registry: RoomRegistry):
        self.registry = registry
        self.queue: "asyncio.Queue[Envelope]" = asyncio.Queue()
        # Which room seat each live connection currently occupies
        self.bindings: Dict[Connection, Binding] = {}
        self._task: Optional[asyncio.Task] = None
        self._handlers: Dict[Type[WireModel], Callable[[Connection, WireModel], Awaitable[None]]] = {
            CreateRoomEvent: self._on_create_room,
            JoinRoomEvent: self._on_join_room,
            StartEvent: self._on_start,
            EndEvent: self._on_end,
            DieEvent: self._on_die,
            LeaveRoomEvent: self._on_leave_room,
        }

    # -------------------- Queue plumbing -------------------- #

    def submit(self, connection: Connection, raw: str) -> None:
        self.queue.put_nowait(Envelope(connection, raw))

    def submit_disconnect(self, connection: Connection) -> None:
        self.queue.put_nowait(Envelope(connection, None))

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    async def run(self) -> None:
        while True:
            envelope = await self.queue.get()
            try:
                await self.process(envelope)
            except Exception:
                logger.exception("unhandled error while processing frame from %s", envelope.connection)
            finally:
                self.queue.task_done()

    async def process(self, envelope: Envelope) -> None:
        connection = envelope.connection
        if envelope.raw is None:
            await self._on_connection_lost(connection)
            return

        try:
            event = inbound_event_adapter.validate_json(envelope.raw)
        except ValidationError as exc:
            logger.debug("dropping malformed frame from %s: %s", connection, exc.errors(include_url=False))
            return

        handler = self._handlers[type(event)]
        try:
            await handler(connection, event)
        except RoomError as exc:
            logger.info("%s rejected for %s: %s", event.type, connection, exc.code.value)
            await connection.send(ErrorMessage(code=exc.code, message=exc.message).wire())

    # -------------------- Bindings -------------------- #

    async def _rebind(self, connection: Connection, binding: Binding) -> None:
        previous = self.bindings.get(connection)
        self.bindings[connection] = binding
        if previous is None or previous == binding:
            return
        # The socket moved to another seat; the old one counts as a lost connection.
        room_code, player_id = previous
        room = self.registry.rooms.get(room_code)
        if room is not None:
            await room.disconnect(player_id, connection)

    # -------------------- Handlers -------------------- #

    async def _on_create_room(self, connection: Connection, event: CreateRoomEvent) -> None:
        room = await self.registry.create_room(event.player_id, event.player_name, connection)
        await self._rebind(connection, (room.room_code, event.player_id))

    async def _on_join_room(self, connection: Connection, event: JoinRoomEvent) -> None:
        room = self.registry.get(event.room_code)
        await room.join(event.player_id, event.player_name, connection)
        await self._rebind(connection, (room.room_code, event.player_id))

    async def _on_start(self, connection: Connection, event: StartEvent) -> None:
        await self.registry.get(event.room_code).start(event.player_id)

    async def _on_end(self, connection: Connection, event: EndEvent) -> None:
        await self.registry.get(event.room_code).end(event.player_id)

    async def _on_die(self, connection: Connection, event: DieEvent) -> None:
        await self.registry.get(event.room_code).forfeit(event.player_id)

    async def _on_leave_room(self, connection: Connection, event: LeaveRoomEvent) -> None:
        await self.registry.get(event.room_code).leave(event.player_id)
        if self.bindings.get(connection) == (event.room_code, event.player_id):
            del self.bindings[connection]

    async def _on_connection_lost(self, connection: Connection) -> None:
        binding = self.bindings.pop(connection, None)
        if binding is None:
            return
        room_code, player_id = binding
        room = self.registry.rooms.get(room_code)
        if room is not None:
            await room.disconnect(player_id, connection)


__all__ = ["Envelope", "EventDispatcher"]
