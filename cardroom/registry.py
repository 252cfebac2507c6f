"""Process-wide room registry.

One ``RoomRegistry`` is created by the application factory and handed to the
dispatcher and routers through ``app.state``; nothing imports it as a global.
"""
from __future__ import annotations

import logging
import random
from typing import Dict, Iterator, List, Optional

from .connection import Connection
from .constants import (
    CARDS_PER_PLAYER,
    DECK,
    GRACE_PERIOD_SEC,
    MAX_PLAYERS,
    ROOM_CODE_ALPHABET,
    ROOM_CODE_LENGTH,
)
from .errors import RoomNotFound
from .room import Room
from .schemas import RoomSummary

logger = logging.getLogger(__name__)


class RoomRegistry:
    def __init__(
        self,
        *,
        max_players: int = MAX_PLAYERS,
        grace_period: float = GRACE_PERIOD_SEC,
        rng: Optional[random.Random] = None,
    ):
        if max_players * CARDS_PER_PLAYER > len(DECK):
            raise ValueError(
                "max_players=%d needs %d cards but the deck has %d"
                % (max_players, max_players * CARDS_PER_PLAYER, len(DECK))
            )
        self.max_players = max_players
        self.grace_period = grace_period
        self.rooms: Dict[str, Room] = {}
        self._rng = rng or random.Random()

    def __len__(self) -> int:
        return len(self.rooms)

    def __contains__(self, room_code: str) -> bool:
        return room_code in self.rooms

    def __iter__(self) -> Iterator[Room]:
        return iter(list(self.rooms.values()))

    def _generate_code(self) -> str:
        while True:
            code = "".join(self._rng.choice(ROOM_CODE_ALPHABET) for _ in range(ROOM_CODE_LENGTH))
            if code not in self.rooms:
                return code

    def _discard(self, room: Room) -> None:
        # Only drop the entry if it still points at this exact room
        if self.rooms.get(room.room_code) is room:
            del self.rooms[room.room_code]
            logger.info("room %s removed, %d rooms remain", room.room_code, len(self.rooms))

    async def create_room(self, player_id: str, name: str, connection: Connection) -> Room:
        """Allocate a room with a fresh code and seat *player_id* as its host."""
        room = Room(
            self._generate_code(),
            max_players=self.max_players,
            grace_period=self.grace_period,
            rng=random.Random(self._rng.getrandbits(64)),
            on_empty=self._discard,
        )
        self.rooms[room.room_code] = room
        await room.open(player_id, name, connection)
        return room

    def get(self, room_code: str) -> Room:
        room = self.rooms.get(room_code)
        if room is None:
            raise RoomNotFound()
        return room

    def summaries(self) -> List[RoomSummary]:
        return [room.summary() for room in self]

    def shutdown(self) -> None:
        for room in self:
            room.shutdown()
        self.rooms.clear()


__all__ = ["RoomRegistry"]
