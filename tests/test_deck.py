import random
from collections import Counter

from cardroom.constants import DECK
from cardroom.deck import deal_hands, shuffled_deck


def test_deck_values():
    assert len(DECK) == 20
    assert len(set(DECK)) == 20
    assert DECK[:10] == tuple(range(1, 11))
    assert DECK[10:] == (100, 200, 300, 400, 500, 600, 700, 800, 900, 1000)


def test_shuffle_is_a_permutation_and_leaves_deck_alone():
    cards = shuffled_deck(random.Random(1))
    assert sorted(cards) == sorted(DECK)
    assert DECK == tuple(range(1, 11)) + tuple(range(100, 1001, 100))


def test_deal_in_order_without_replacement():
    rng = random.Random(5)
    expected = shuffled_deck(random.Random(5))
    hands = deal_hands(['a', 'b', 'c'], rng)

    assert list(hands) == ['a', 'b', 'c']
    assert hands['a'] == expected[0:2]
    assert hands['b'] == expected[2:4]
    assert hands['c'] == expected[4:6]


def test_deal_stops_when_deck_runs_out():
    ids = ['p%d' % i for i in range(11)]
    hands = deal_hands(ids, random.Random(2))
    assert len(hands) == 10
    assert 'p10' not in hands


def test_first_card_spreads_over_whole_deck():
    rng = random.Random(42)
    counts = Counter(shuffled_deck(rng)[0] for _ in range(4000))
    assert set(counts) == set(DECK)
    # 200 expected per value; a biased comparator sort would skew far past this
    assert max(counts.values()) < 300
    assert min(counts.values()) > 120
