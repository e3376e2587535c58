"""
Pytest Configuration and Fixtures

This module provides shared fixtures and configuration for all tests.
"""

import asyncio
import io
import socket
from collections import deque
from contextlib import closing
from typing import AsyncGenerator, Dict, List, Optional

import pytest
import pytest_asyncio

from respcli.config.options import ClientOptions
from respcli.network.session import RedisSession
from respcli.protocol.formatter import ReplyFormatter
from respcli.protocol.parser import RespParser


def find_free_port() -> int:
    """Find an available port for testing."""
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(('', 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


# ============================================================================
# Protocol Fixtures
# ============================================================================

@pytest.fixture
def parser() -> RespParser:
    """Create a RespParser instance."""
    return RespParser()


@pytest.fixture
def formatter() -> ReplyFormatter:
    """Create a structured-mode ReplyFormatter."""
    return ReplyFormatter(raw=False)


@pytest.fixture
def raw_formatter() -> ReplyFormatter:
    """Create a raw-mode ReplyFormatter."""
    return ReplyFormatter(raw=True)


@pytest.fixture
def unused_port() -> int:
    """A port nothing is listening on."""
    return find_free_port()


# ============================================================================
# Server Fixtures
# ============================================================================

class FakeRedisServer:
    """
    Scripted RESP server for session tests.

    Each command line received is recorded in ``received`` and answered
    with the next payload scripted for it. A script is looked up first by
    the exact command line, then by the upper-cased command name. The last
    payload of a script repeats once the others are used up. A payload of
    None makes the server close the connection without answering.

    Usage:
        redis_server.script("PING", b"+PONG\\r\\n")
        redis_server.script("SCAN 0 MATCH * COUNT 10", b"*2\\r\\n...")
    """

    def __init__(self, host: str = '127.0.0.1'):
        self.host = host
        self.port = None
        self.received: List[str] = []
        self._scripts: Dict[str, deque] = {}
        self._server: Optional[asyncio.Server] = None

    def script(self, command: str, *payloads: Optional[bytes]) -> None:
        """Register the replies for a command line or command name."""
        self._scripts[command] = deque(payloads)

    def _next_payload(self, line: str) -> Optional[bytes]:
        parts = line.split()
        name = parts[0].upper() if parts else ""
        script = self._scripts.get(line) or self._scripts.get(name)
        if not script:
            return f"-ERR unknown command '{name}'\r\n".encode()
        if len(script) > 1:
            return script.popleft()
        return script[0]

    async def handle_client(self, reader, writer) -> None:
        try:
            while True:
                data = await reader.readline()
                if not data:
                    break
                line = data.decode().rstrip('\r\n')
                self.received.append(line)

                payload = self._next_payload(line)
                if payload is None:
                    break
                writer.write(payload)
                await writer.drain()
        finally:
            writer.close()

    async def start(self) -> None:
        self._server = await asyncio.start_server(self.handle_client, self.host, 0)
        self.port = self._server.sockets[0].getsockname()[1]

    async def stop(self) -> None:
        if self._server is None:
            return
        self._server.close()
        await self._server.wait_closed()
        self._server = None


@pytest_asyncio.fixture
async def redis_server() -> AsyncGenerator[FakeRedisServer, None]:
    """
    Create and start a scripted server on a random free port.

    Answers PING with +PONG unless a test scripts something else.
    """
    server = FakeRedisServer()
    server.script("PING", b"+PONG\r\n")
    await server.start()

    yield server

    await server.stop()


# ============================================================================
# Session Fixtures
# ============================================================================

@pytest.fixture
def output() -> io.StringIO:
    """Output stream sessions write to (not a tty, so raw by default)."""
    return io.StringIO()


@pytest.fixture
def session_factory(redis_server: FakeRedisServer, output: io.StringIO):
    """
    Factory fixture to create sessions pointed at the scripted server.

    Usage:
        async def test_something(session_factory):
            session = session_factory(no_raw=True)
            await asyncio.to_thread(session.connect)
    """
    sessions = []

    def factory(**overrides) -> RedisSession:
        options = ClientOptions(host='127.0.0.1', port=redis_server.port, **overrides)
        session = RedisSession(options, output=output)
        sessions.append(session)
        return session

    yield factory

    for session in sessions:
        session.close()


@pytest.fixture
def sleeps(monkeypatch) -> List[float]:
    """Record the pauses a session takes instead of sleeping."""
    calls = []
    monkeypatch.setattr("respcli.network.session.sleep", calls.append)
    return calls


@pytest.fixture(autouse=True)
def no_auth_env(monkeypatch) -> None:
    """Make sure REDISCLI_AUTH from the environment does not leak in."""
    monkeypatch.delenv("REDISCLI_AUTH", raising=False)


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as end-to-end CLI tests"
    )
