"""Pydantic data schemas used across the card room service.

Runtime state (``Player``) is kept in snake_case. Everything that goes over
the websocket is a ``WireModel`` and is serialised with camelCase aliases.
"""
from __future__ import annotations

from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel

from .errors import ErrorCode

# -----------------------------
# Runtime
# -----------------------------


class Player(BaseModel):
    """A member of a room. The connection handle lives on the room, not here."""

    player_id: str
    name: str
    hand: List[int] = Field(default_factory=list)
    # Monotonic per-room counter; the lowest remaining value is promoted to host.
    join_seq: int = 0


class DisconnectedPlayer(BaseModel):
    player: Player
    disconnected_at: datetime


# -----------------------------
# Wire format
# -----------------------------


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


# ---- Inbound ---- #


class _RoomEvent(WireModel):
    room_code: str
    player_id: str = Field(min_length=1)

    @field_validator("room_code")
    @classmethod
    def normalise_code(cls, value: str) -> str:
        return value.strip().upper()


class CreateRoomEvent(WireModel):
    type: Literal["createRoom"]
    player_id: str = Field(min_length=1)
    player_name: str = Field(min_length=1, max_length=32)


class JoinRoomEvent(_RoomEvent):
    type: Literal["joinRoom"]
    player_name: str = Field(min_length=1, max_length=32)


class StartEvent(_RoomEvent):
    type: Literal["start"]


class EndEvent(_RoomEvent):
    type: Literal["end"]


class DieEvent(_RoomEvent):
    type: Literal["die"]


class LeaveRoomEvent(_RoomEvent):
    type: Literal["leaveRoom"]


InboundEvent = Annotated[
    Union[CreateRoomEvent, JoinRoomEvent, StartEvent, EndEvent, DieEvent, LeaveRoomEvent],
    Field(discriminator="type"),
]

inbound_event_adapter: TypeAdapter = TypeAdapter(InboundEvent)


# ---- Outbound ---- #


class PlayerView(WireModel):
    id: str
    name: str
    has_cards: bool
    is_died: bool
    is_first_game: bool
    is_host: bool
    # Only filled on the recipient's own entry
    cards: Optional[List[int]] = None


class GameState(WireModel):
    type: Literal["gameState"] = "gameState"
    room_code: str
    total_players: int
    game_started: bool
    players: List[PlayerView]
    # Personalised for the recipient
    is_host: bool
    is_first_game: bool
    is_died: bool


class RoomCreated(WireModel):
    type: Literal["roomCreated"] = "roomCreated"
    room_code: str
    player_id: str
    is_host: bool = True


class JoinResponse(WireModel):
    type: Literal["joinResponse"] = "joinResponse"
    room_code: str
    player_id: str
    is_host: bool
    rejoined: bool


class CardsMessage(WireModel):
    type: Literal["cards"] = "cards"
    cards: List[int]


class ErrorMessage(WireModel):
    type: Literal["error"] = "error"
    code: ErrorCode
    message: str


class LeftRoom(WireModel):
    type: Literal["leftRoom"] = "leftRoom"


class Kicked(WireModel):
    type: Literal["kicked"] = "kicked"
    reason: str


# -----------------------------
# REST response models
# -----------------------------


class RoomSummary(BaseModel):
    room_code: str
    host_name: Optional[str] = None
    player_count: int
    disconnected_count: int
    phase: str


class HealthResponse(BaseModel):
    status: str = "ok"
    rooms: int


__all__ = [
    # runtime
    "Player",
    "DisconnectedPlayer",
    # inbound
    "WireModel",
    "CreateRoomEvent",
    "JoinRoomEvent",
    "StartEvent",
    "EndEvent",
    "DieEvent",
    "LeaveRoomEvent",
    "InboundEvent",
    "inbound_event_adapter",
    # outbound
    "PlayerView",
    "GameState",
    "RoomCreated",
    "JoinResponse",
    "CardsMessage",
    "ErrorMessage",
    "LeftRoom",
    "Kicked",
    # rest
    "RoomSummary",
    "HealthResponse",
]
