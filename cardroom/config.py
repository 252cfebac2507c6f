import os

from .constants import GRACE_PERIOD_SEC, MAX_PLAYERS


class Config:
    # Grace period before a disconnected player is evicted (seconds)
    GRACE_PERIOD_SEC = float(os.environ.get('CARDROOM_GRACE_PERIOD_SEC', str(GRACE_PERIOD_SEC)))
    # At most 10: two cards each from the 20-card deck
    MAX_PLAYERS = int(os.environ.get('CARDROOM_MAX_PLAYERS', str(MAX_PLAYERS)))
    LOG_LEVEL = os.environ.get('CARDROOM_LOG_LEVEL', 'INFO')
    # Optional: also write logs to this file. Empty disables.
    LOG_FILE = os.environ.get('CARDROOM_LOG_FILE', '')
