"""Recoverable room errors.

Every error is raised before any state is touched, so the room is left
exactly as it was. The dispatcher turns them into an ``error`` message for the
originating connection only.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    NOT_HOST = "not_host"
    ALREADY_STARTED = "already_started"
    INSUFFICIENT_PLAYERS = "insufficient_players"
    ROOM_NOT_FOUND = "room_not_found"
    GAME_IN_PROGRESS = "game_in_progress"
    ROOM_FULL = "room_full"
    NAME_TAKEN = "name_taken"
    PLAYER_NOT_FOUND = "player_not_found"


class RoomError(Exception):
    """Base class for caller-supplied violations of the room rules."""

    code: ErrorCode
    message: str = "Request rejected"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class NotHost(RoomError):
    code = ErrorCode.NOT_HOST
    message = "Only the host can do that."


class AlreadyStarted(RoomError):
    code = ErrorCode.ALREADY_STARTED
    message = "The game has already started."


class InsufficientPlayers(RoomError):
    code = ErrorCode.INSUFFICIENT_PLAYERS
    message = "At least 2 players are needed to start the game."


class RoomNotFound(RoomError):
    code = ErrorCode.ROOM_NOT_FOUND
    message = "Room not found."


class GameInProgress(RoomError):
    code = ErrorCode.GAME_IN_PROGRESS
    message = "A game is in progress in this room."


class RoomFull(RoomError):
    code = ErrorCode.ROOM_FULL
    message = "The room is full."


class NameTaken(RoomError):
    code = ErrorCode.NAME_TAKEN
    message = "That name is already in use in this room."


class PlayerNotFound(RoomError):
    code = ErrorCode.PLAYER_NOT_FOUND
    message = "Player is not in this room."


__all__ = [
    "ErrorCode",
    "RoomError",
    "NotHost",
    "AlreadyStarted",
    "InsufficientPlayers",
    "RoomNotFound",
    "GameInProgress",
    "RoomFull",
    "NameTaken",
    "PlayerNotFound",
]
