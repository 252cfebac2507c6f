"""Deck shuffling and dealing."""
from __future__ import annotations

import random
from typing import Dict, List, Optional, Sequence

from .constants import CARDS_PER_PLAYER, DECK


def shuffled_deck(rng: Optional[random.Random] = None) -> List[int]:
    """Return a uniformly shuffled copy of the deck (``random.shuffle`` is Fisher-Yates)."""
    cards = list(DECK)
    (rng or random).shuffle(cards)
    return cards


def deal_hands(
    player_ids: Sequence[str],
    rng: Optional[random.Random] = None,
    cards_per_player: int = CARDS_PER_PLAYER,
) -> Dict[str, List[int]]:
    """Deal ``cards_per_player`` cards to each id in order, without replacement.

    Players past the end of the deck get nothing; with the default capacity and
    deck that never happens.
    """
    cards = shuffled_deck(rng)
    hands: Dict[str, List[int]] = {}
    for idx, pid in enumerate(player_ids):
        hand = cards[idx * cards_per_player:(idx + 1) * cards_per_player]
        if len(hand) < cards_per_player:
            break
        hands[pid] = hand
    return hands


__all__ = ["shuffled_deck", "deal_hands"]
