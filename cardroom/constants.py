# Fixed deck: ten low cards and ten high cards.
DECK: tuple[int, ...] = tuple(range(1, 11)) + tuple(range(100, 1001, 100))

MAX_PLAYERS = 10
MIN_PLAYERS = 2
CARDS_PER_PLAYER = 2

# Seconds a disconnected player's state is kept for reconnection.
GRACE_PERIOD_SEC = 300

ROOM_CODE_LENGTH = 4
ROOM_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"

__all__ = [
    "DECK",
    "MAX_PLAYERS",
    "MIN_PLAYERS",
    "CARDS_PER_PLAYER",
    "GRACE_PERIOD_SEC",
    "ROOM_CODE_LENGTH",
    "ROOM_CODE_ALPHABET",
]
