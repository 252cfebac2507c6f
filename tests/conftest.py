import random

import pytest
from fastapi.testclient import TestClient

from cardroom.app import create_app
from cardroom.config import Config
from cardroom.connection import Connection
from cardroom.registry import RoomRegistry


class FakeConnection(Connection):
    """Records everything the room sends instead of writing to a socket."""

    def __init__(self, name: str = 'conn'):
        super().__init__(connection_id=name)
        self.sent = []

    async def send(self, payload: dict) -> None:
        if self.closed:
            return
        self.sent.append(payload)

    def of_type(self, kind):
        return [m for m in self.sent if m['type'] == kind]

    def last(self, kind):
        return self.of_type(kind)[-1]

    def clear(self):
        self.sent.clear()


class TestConfig(Config):
    GRACE_PERIOD_SEC = 60
    LOG_LEVEL = 'WARNING'
    LOG_FILE = ''


@pytest.fixture()
def anyio_backend():
    return 'asyncio'


@pytest.fixture()
def make_conn():
    return FakeConnection


@pytest.fixture()
async def registry(anyio_backend):
    reg = RoomRegistry(grace_period=60, rng=random.Random(7))
    yield reg
    reg.shutdown()


@pytest.fixture()
async def short_registry(anyio_backend):
    reg = RoomRegistry(grace_period=0.05, rng=random.Random(11))
    yield reg
    reg.shutdown()


def _opener(reg):
    async def _open(*names):
        """Create a room hosted by names[0] and join the rest; ids are lower-cased names."""
        conns = {name: FakeConnection(name) for name in names}
        host = names[0]
        room = await reg.create_room(host.lower(), host, conns[host])
        for name in names[1:]:
            await room.join(name.lower(), name, conns[name])
        return room, conns
    return _open


@pytest.fixture()
def open_room(registry):
    return _opener(registry)


@pytest.fixture()
def open_short_room(short_registry):
    return _opener(short_registry)


@pytest.fixture()
def client():
    application = create_app(TestConfig)
    with TestClient(application) as test_client:
        yield test_client
