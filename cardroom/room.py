from __future__ import annotations

import asyncio
import itertools
import logging
import random
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Set

from .connection import Connection
from .constants import GRACE_PERIOD_SEC, MAX_PLAYERS, MIN_PLAYERS
from .deck import deal_hands
from .errors import (
    AlreadyStarted,
    GameInProgress,
    InsufficientPlayers,
    NameTaken,
    NotHost,
    PlayerNotFound,
    RoomFull,
)
from .schemas import (
    CardsMessage,
    DisconnectedPlayer,
    GameState,
    JoinResponse,
    Kicked,
    LeftRoom,
    Player,
    PlayerView,
    RoomCreated,
    RoomSummary,
)

logger = logging.getLogger(__name__)

LOBBY = "lobby"
ACTIVE = "active"


class Room:
    """Runtime state and connections for one room.

    Every public mutation runs under ``self._lock`` and ends with a fresh
    snapshot broadcast, so no recipient ever sees a half-applied change. A
    player id is always in exactly one of ``players`` or ``disconnected``.
    """

    def __init__(
        self,
        room_code: str,
        *,
        max_players: int = MAX_PLAYERS,
        grace_period: float = GRACE_PERIOD_SEC,
        rng: Optional[random.Random] = None,
        on_empty: Optional[Callable[["Room"], None]] = None,
    ):
        self.room_code = room_code
        self.max_players = max_players
        self.grace_period = grace_period
        self.phase = LOBBY
        self.host_id: Optional[str] = None
        # Ordered by join_seq, so the first key is always the earliest joiner.
        self.players: Dict[str, Player] = {}
        # active connections: player_id -> connection
        self.connections: Dict[str, Connection] = {}
        self.disconnected: Dict[str, DisconnectedPlayer] = {}
        # Players who have been present at the end of a round
        self.seen_before: Set[str] = set()
        self.died_this_round: Set[str] = set()
        self.closed = False

        self._rng = rng or random.Random()
        self._on_empty = on_empty
        self._join_counter = itertools.count()
        self._grace_tasks: Dict[str, asyncio.Task] = {}
        self._lock = asyncio.Lock()

    # ---------------------------------------------------------------------
    # Helper utilities
    # ---------------------------------------------------------------------

    @property
    def game_started(self) -> bool:
        return self.phase == ACTIVE

    def is_empty(self) -> bool:
        return not self.players and not self.disconnected

    def _insert_player(self, player: Player, connection: Connection) -> None:
        self.players[player.player_id] = player
        self.players = dict(sorted(self.players.items(), key=lambda item: item[1].join_seq))
        self.connections[player.player_id] = connection
        # A room whose players all dropped has no host; the next arrival takes it.
        if self.host_id is None:
            self.host_id = player.player_id

    def _reassign_host(self, departed_id: str) -> None:
        if departed_id != self.host_id:
            return
        self.host_id = next(iter(self.players), None)
        if self.host_id is not None:
            logger.info("room %s: host passed from %s to %s", self.room_code, departed_id, self.host_id)

    def _park(self, player: Player) -> None:
        """Move *player* (already removed from ``players``) into ``disconnected``."""
        entry = DisconnectedPlayer(player=player, disconnected_at=datetime.now(timezone.utc))
        self.disconnected[player.player_id] = entry
        self._grace_tasks[player.player_id] = asyncio.create_task(self._expire_after_grace(player.player_id, entry))

    def _cancel_grace_timer(self, player_id: str) -> None:
        task = self._grace_tasks.pop(player_id, None)
        if task is not None and not task.done():
            task.cancel()

    def _close_if_empty(self) -> bool:
        if not self.is_empty():
            return False
        self.closed = True
        for task in self._grace_tasks.values():
            task.cancel()
        self._grace_tasks.clear()
        logger.info("room %s is empty, closing", self.room_code)
        if self._on_empty is not None:
            self._on_empty(self)
        return True

    async def _send_to(self, player_id: str, payload: dict) -> None:
        connection = self.connections.get(player_id)
        if connection is not None:
            await connection.send(payload)

    async def _expire_after_grace(self, player_id: str, entry: DisconnectedPlayer) -> None:
        try:
            await asyncio.sleep(self.grace_period)
        except asyncio.CancelledError:
            return
        async with self._lock:
            # Only the exact record this timer was armed for may be evicted.
            if self.disconnected.get(player_id) is not entry:
                return
            del self.disconnected[player_id]
            self._grace_tasks.pop(player_id, None)
            self.died_this_round.discard(player_id)
            logger.info("room %s: grace period expired for %s", self.room_code, player_id)
            if self._close_if_empty():
                return
            await self.broadcast_state()

    # -------------------- Player management -------------------- #

    async def open(self, player_id: str, name: str, connection: Connection) -> None:
        """Seat the creator of the room as its first player and host."""
        async with self._lock:
            player = Player(player_id=player_id, name=name, join_seq=next(self._join_counter))
            self._insert_player(player, connection)
            logger.info("room %s created by %s (%s)", self.room_code, name, player_id)
            await connection.send(RoomCreated(room_code=self.room_code, player_id=player_id).wire())
            await self.broadcast_state()

    async def join(self, player_id: str, name: str, connection: Connection) -> JoinResponse:
        async with self._lock:
            if player_id in self.disconnected:
                response = self._reconnect(player_id, connection)
            elif player_id in self.players:
                response = await self._replace_connection(player_id, connection)
            else:
                response = self._admit(player_id, name, connection)

            await connection.send(response.wire())
            hand = self.players[player_id].hand
            if response.rejoined and self.phase == ACTIVE and hand:
                await connection.send(CardsMessage(cards=list(hand)).wire())
            await self.broadcast_state()
            return response

    def _admit(self, player_id: str, name: str, connection: Connection) -> JoinResponse:
        if any(p.name == name for p in self.players.values()):
            raise NameTaken()
        if self.phase == ACTIVE:
            raise GameInProgress()
        if len(self.players) >= self.max_players:
            raise RoomFull()

        player = Player(player_id=player_id, name=name, join_seq=next(self._join_counter))
        self._insert_player(player, connection)
        logger.info("room %s: %s (%s) joined, %d players", self.room_code, name, player_id, len(self.players))
        return JoinResponse(
            room_code=self.room_code,
            player_id=player_id,
            is_host=player_id == self.host_id,
            rejoined=False,
        )

    def _reconnect(self, player_id: str, connection: Connection) -> JoinResponse:
        if len(self.players) >= self.max_players:
            raise RoomFull()

        self._cancel_grace_timer(player_id)
        player = self.disconnected.pop(player_id).player
        if player_id in self.died_this_round:
            # Forfeited players do not get their cards back
            player.hand = []
        self._insert_player(player, connection)
        logger.info("room %s: %s (%s) reconnected", self.room_code, player.name, player_id)
        return JoinResponse(
            room_code=self.room_code,
            player_id=player_id,
            is_host=player_id == self.host_id,
            rejoined=True,
        )

    async def _replace_connection(self, player_id: str, connection: Connection) -> JoinResponse:
        previous = self.connections.get(player_id)
        self.connections[player_id] = connection
        if previous is not None and previous is not connection:
            await previous.send(Kicked(reason="Connected from another session").wire())
            logger.info("room %s: %s moved to connection %s", self.room_code, player_id, connection.connection_id)
        return JoinResponse(
            room_code=self.room_code,
            player_id=player_id,
            is_host=player_id == self.host_id,
            rejoined=True,
        )

    async def leave(self, player_id: str) -> None:
        async with self._lock:
            player = self.players.get(player_id)
            if player is None:
                raise PlayerNotFound()

            del self.players[player_id]
            connection = self.connections.pop(player_id, None)
            if player.hand or self.phase == ACTIVE:
                # Keep the seat warm in case the same id comes back
                self._park(player)
            else:
                self.died_this_round.discard(player_id)
            self._reassign_host(player_id)
            logger.info("room %s: %s (%s) left", self.room_code, player.name, player_id)

            if connection is not None:
                await connection.send(LeftRoom().wire())
            if self._close_if_empty():
                return
            await self.broadcast_state()

    async def disconnect(self, player_id: str, connection: Optional[Connection] = None) -> None:
        """Handle connection loss for *player_id*.

        When *connection* is given and is no longer the player's current
        handle (it was replaced by a newer one), the call is ignored.
        """
        async with self._lock:
            if player_id not in self.players:
                return
            if connection is not None and self.connections.get(player_id) is not connection:
                return

            player = self.players.pop(player_id)
            self.connections.pop(player_id, None)
            self._park(player)
            self._reassign_host(player_id)
            logger.info(
                "room %s: %s (%s) disconnected, holding state for %ss",
                self.room_code,
                player.name,
                player_id,
                self.grace_period,
            )
            await self.broadcast_state()

    # -------------------- Round lifecycle -------------------- #

    async def start(self, player_id: str) -> None:
        async with self._lock:
            if player_id != self.host_id:
                raise NotHost()
            if len(self.players) < MIN_PLAYERS:
                raise InsufficientPlayers()
            if self.phase == ACTIVE:
                raise AlreadyStarted()

            self.phase = ACTIVE
            logger.info("room %s: round started with %d players", self.room_code, len(self.players))
            await self._deal_cards()

    async def _deal_cards(self) -> None:
        # Last round's reveal is discarded, including for players who are away.
        for player in self.players.values():
            player.hand = []
        for entry in self.disconnected.values():
            entry.player.hand = []

        # A lobby forfeit is only a marker; every present player is dealt in.
        self.died_this_round.clear()
        for pid, hand in deal_hands(list(self.players), self._rng).items():
            self.players[pid].hand = hand
            await self._send_to(pid, CardsMessage(cards=list(hand)).wire())
        await self.broadcast_state()

    async def end(self, player_id: str) -> None:
        async with self._lock:
            if player_id != self.host_id:
                raise NotHost()

            self.phase = LOBBY
            self.seen_before.update(self.players)
            for pid in self.died_this_round:
                if pid in self.players:
                    self.players[pid].hand = []
                elif pid in self.disconnected:
                    self.disconnected[pid].player.hand = []
            logger.info("room %s: round ended", self.room_code)
            await self.broadcast_state()
            self.died_this_round.clear()

    async def forfeit(self, player_id: str) -> None:
        async with self._lock:
            player = self.players.get(player_id)
            if player is None:
                raise PlayerNotFound()

            self.died_this_round.add(player_id)
            player.hand = []
            logger.info("room %s: %s died this round", self.room_code, player_id)
            await self.broadcast_state()

    # -------------------- Broadcasting helpers -------------------- #

    def snapshot_for(self, recipient_id: str) -> GameState:
        """Room state as seen by *recipient_id*; only their own hand is revealed."""
        players_view: List[PlayerView] = []
        for pid, p in self.players.items():
            players_view.append(
                PlayerView(
                    id=pid,
                    name=p.name,
                    has_cards=bool(p.hand),
                    is_died=pid in self.died_this_round,
                    is_first_game=pid not in self.seen_before,
                    is_host=pid == self.host_id,
                    cards=list(p.hand) if pid == recipient_id else None,
                )
            )
        return GameState(
            room_code=self.room_code,
            total_players=len(self.players),
            game_started=self.game_started,
            players=players_view,
            is_host=recipient_id == self.host_id,
            is_first_game=recipient_id not in self.seen_before,
            is_died=recipient_id in self.died_this_round,
        )

    async def broadcast_state(self) -> None:
        """Send a personalised snapshot to every connected player."""
        for pid, connection in list(self.connections.items()):
            await connection.send(self.snapshot_for(pid).wire())

    def summary(self) -> RoomSummary:
        host = self.players.get(self.host_id) if self.host_id else None
        return RoomSummary(
            room_code=self.room_code,
            host_name=host.name if host else None,
            player_count=len(self.players),
            disconnected_count=len(self.disconnected),
            phase=self.phase,
        )

    def shutdown(self) -> None:
        """Cancel pending grace timers; used when the process stops."""
        for task in self._grace_tasks.values():
            task.cancel()
        self._grace_tasks.clear()


__all__ = ["Room", "LOBBY", "ACTIVE"]
