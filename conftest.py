import socket

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from db import Base
from validator import HostnameValidator

RESOLVABLE_HOSTS = {
    "www.example.com": ["93.184.216.34"],
    "example.com": ["93.184.216.34"],
    "github.com": ["140.82.112.3"],
    "localhost": ["127.0.0.1"],
}


class FakeResolver:
    """Stands in for getaddrinfo so tests never touch the network."""

    def __init__(self, hosts=None):
        self.hosts = dict(RESOLVABLE_HOSTS if hosts is None else hosts)
        self.calls = []

    async def __call__(self, hostname):
        self.calls.append(hostname)
        if hostname not in self.hosts:
            raise socket.gaierror(socket.EAI_NONAME, "Name or service not known")
        return self.hosts[hostname]


def make_engine(path):
    # NullPool: every session opens its connection on the loop that uses it
    return create_async_engine(f"sqlite+aiosqlite:///{path}", poolclass=NullPool)


async def create_tables(engine):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture
def resolver():
    return FakeResolver()


@pytest.fixture
def validator(resolver):
    return HostnameValidator(resolver=resolver)
