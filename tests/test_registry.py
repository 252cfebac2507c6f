import random

import pytest

from cardroom.errors import RoomNotFound
from cardroom.registry import RoomRegistry

pytestmark = pytest.mark.anyio


async def test_codes_are_unique(registry, make_conn):
    codes = set()
    for i in range(30):
        room = await registry.create_room('host%d' % i, 'Host %d' % i, make_conn('c%d' % i))
        codes.add(room.room_code)
    assert len(codes) == 30
    assert len(registry) == 30


async def test_get_unknown_room(registry):
    with pytest.raises(RoomNotFound):
        registry.get('ZZZZ')


async def test_code_collision_is_retried(make_conn, anyio_backend):
    registry = RoomRegistry(rng=random.Random(9))
    first = await registry.create_room('a', 'A', make_conn('a'))
    # Replay the same random stream so the first candidate collides
    registry._rng = random.Random(9)
    second = await registry.create_room('b', 'B', make_conn('b'))
    assert first.room_code != second.room_code
    registry.shutdown()


async def test_summaries(registry, open_room):
    room, _ = await open_room('Alice', 'Bob')
    await room.disconnect('bob')

    [summary] = registry.summaries()
    assert summary.room_code == room.room_code
    assert summary.host_name == 'Alice'
    assert summary.player_count == 1
    assert summary.disconnected_count == 1
    assert summary.phase == 'lobby'


async def test_empty_room_is_removed(registry, open_room):
    room, _ = await open_room('Alice')
    await room.leave('alice')
    assert len(registry) == 0
    with pytest.raises(RoomNotFound):
        registry.get(room.room_code)


async def test_capacity_the_deck_cannot_serve_is_rejected():
    with pytest.raises(ValueError):
        RoomRegistry(max_players=11)
    assert RoomRegistry(max_players=10).max_players == 10
