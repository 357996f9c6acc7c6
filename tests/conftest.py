"""Pytest configuration and shared fixtures for ptr2obs tests

This module provides common fixtures and test doubles used across the unit
tests: a scripted in-memory connection handle and a connector that hands
those handles (or connect errors) to the session manager in order.
"""

import logging
from pathlib import Path
from typing import Optional, Union

import pytest

from ptr2obs.common.config import Config, ConfigLoader
from ptr2obs.common.errors import ConnectError, ReceiveError, SendError

HELLO_FRAME = '{"op": 0, "d": {"obsWebSocketVersion": "5.4.2", "rpcVersion": 1}}'
IDENTIFIED_FRAME = '{"op": 2, "d": {"negotiatedRpcVersion": 1}}'


class FakeConnectionHandle:
    """In-memory connection handle replaying scripted inbound frames"""

    def __init__(self, inbound: Optional[list] = None) -> None:
        self.inbound: list = list(inbound or [])
        self.sent: list = []
        self.close_calls: int = 0
        self.closed: bool = False
        self.alive: bool = True
        self.fail_sends: bool = False

    def message_receive(self, timeout: Optional[float] = None) -> Union[str, bytes]:
        if self.closed:
            raise ReceiveError("Connection handle is closed", closed=True)
        if not self.inbound:
            raise ReceiveError("Connection closed by peer", closed=True)
        return self.inbound.pop(0)

    def message_send(self, data: Union[str, bytes]) -> None:
        if self.closed:
            raise SendError("Connection handle is closed")
        if self.fail_sends:
            raise SendError("Broken pipe")
        self.sent.append(data)

    def messagesPending_drain(self, limit: int = 64) -> list:
        if self.closed or not self.alive:
            raise ReceiveError("Connection closed by peer", closed=True)
        frames = self.inbound[:limit]
        del self.inbound[:limit]
        return frames

    def isOpen_check(self) -> bool:
        return self.alive and not self.closed

    def connection_close(self) -> None:
        self.close_calls += 1
        self.closed = True


class ScriptedConnector:
    """Connector returning scripted handles or raising scripted ConnectErrors"""

    def __init__(self, outcomes: list) -> None:
        self.outcomes: list = list(outcomes)
        self.calls: list[tuple[str, float]] = []

    def __call__(self, endpoint: str, timeout: float) -> FakeConnectionHandle:
        self.calls.append((endpoint, timeout))
        if not self.outcomes:
            raise ConnectError(f"Failed to connect to {endpoint}: refused")
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def hello_frame() -> str:
    """Well-formed Hello offering rpcVersion 1"""
    return HELLO_FRAME


@pytest.fixture
def identified_frame() -> str:
    """Identified acknowledging rpcVersion 1"""
    return IDENTIFIED_FRAME


@pytest.fixture
def accepting_handle() -> FakeConnectionHandle:
    """Handle for a peer that completes the handshake"""
    return FakeConnectionHandle([HELLO_FRAME, IDENTIFIED_FRAME])


@pytest.fixture
def handle_factory():
    """Factory for scripted connection handles"""
    return FakeConnectionHandle


@pytest.fixture
def connector_factory():
    """Factory for scripted connectors"""
    return ScriptedConnector


@pytest.fixture
def sample_config() -> Config:
    """Load the shipped sample configuration

    Returns:
        Config object parsed from config.yml at the repository root
    """
    config_path = Path(__file__).parent.parent / "config.yml"
    if not config_path.exists():
        pytest.skip("config.yml not found - required for this test")
    return ConfigLoader.config_load(config_path)


@pytest.fixture(autouse=True)
def setup_logging(caplog):
    """Setup logging for tests"""
    caplog.set_level(logging.DEBUG)


# Markers for test organization
def pytest_configure(config) -> None:
    """Register custom pytest markers used by this test suite."""
    config.addinivalue_line("markers", "requires_x11: mark test as requiring X11 display")
