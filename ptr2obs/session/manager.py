"""
obs-websocket session lifecycle.

This module owns the single session slot shared between the reconnect
supervisor (sole writer) and the zone monitor (reader through
`command_trySend`). Slot replacement happens under one lock, so readers
never observe a half-replaced session. Handles are closed after the slot lock
is released, and each handle serializes its own sends against its close.

State machine per session instance:

    ABSENT -> CONNECTING -> HANDSHAKING -> READY
    CONNECTING | HANDSHAKING -> FAILED

READY and FAILED are terminal for an instance. Recovery publishes a new
instance; published instances are never mutated.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from ptr2obs.common.errors import ConnectError, DecodeError, ReceiveError, SendError
from ptr2obs.protocol.message import (
    IdentifyMessage,
    OpCode,
    commandMessage_create,
    commandMessage_encode,
    helloMessage_decode,
    identifiedMessage_decode,
    identifyMessage_encode,
    inboundOpCode_peek,
)
from ptr2obs.session.connection import ConnectionHandle

__all__ = [
    "EVENT_SUBSCRIPTIONS",
    "Session",
    "SessionManager",
    "SessionState",
    "handshake_perform",
]

logger = logging.getLogger(__name__)

# Opaque subscription bitmask sent with Identify.
EVENT_SUBSCRIPTIONS: int = 33

Connector = Callable[[str, float], ConnectionHandle]


class SessionState(Enum):
    """Lifecycle states of one session instance"""

    ABSENT = "absent"
    CONNECTING = "connecting"
    HANDSHAKING = "handshaking"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class Session:
    """Immutable snapshot of the session slot"""

    state: SessionState
    generation: int = 0
    negotiated_rpc_version: Optional[int] = None
    handle: Optional[ConnectionHandle] = None

    def __post_init__(self) -> None:
        if self.state is SessionState.READY:
            if self.negotiated_rpc_version is None or self.handle is None:
                raise ValueError("READY session requires a negotiated version and a handle")

    def isReady(self) -> bool:
        """Check if commands may be sent on this session"""
        return self.state is SessionState.READY


def handshake_perform(
    handle: ConnectionHandle,
    event_subscriptions: int = EVENT_SUBSCRIPTIONS,
    timeout: float | None = None,
) -> int:
    """
    Run Hello -> Identify -> Identified on a freshly opened handle.

    Args:
        handle:
            Open connection handle.
        event_subscriptions:
            Subscription bitmask sent with Identify.
        timeout:
            Per-receive timeout in seconds, or None to wait forever.

    Returns:
        Negotiated RPC version.

    Raises:
        DecodeError:
            Raised when Hello or Identified is malformed.
        HandshakeError:
            Raised when the peer answers Identify with anything but Identified.
        SendError, ReceiveError:
            Raised on transport failures.
    """
    hello = helloMessage_decode(handle.message_receive(timeout=timeout))
    logger.debug(
        "Hello from peer: obsWebSocketVersion=%s rpcVersion=%s",
        hello.obs_websocket_version,
        hello.rpc_version,
    )
    if hello.authentication_required:
        logger.warning("Peer requires authentication, which is not supported; expect rejection")

    identify = IdentifyMessage(rpc_version=hello.rpc_version, event_subscriptions=event_subscriptions)
    handle.message_send(identifyMessage_encode(identify))

    identified = identifiedMessage_decode(handle.message_receive(timeout=timeout))
    return identified.negotiated_rpc_version


class SessionManager:
    """
    Owner of the single session slot.

    `session_establish`, `session_check`, and `session_discard` are driven by
    the reconnect supervisor. `command_trySend` may be called from any thread.
    """

    def __init__(
        self,
        endpoint: str,
        connect_timeout: float = 10.0,
        handshake_timeout: float | None = 10.0,
        event_subscriptions: int = EVENT_SUBSCRIPTIONS,
        connector: Connector = ConnectionHandle.open,
    ) -> None:
        """
        Initialize session manager.

        Args:
            endpoint:
                WebSocket URI of the peer.
            connect_timeout:
                Transport open timeout in seconds.
            handshake_timeout:
                Per-message receive timeout during the handshake.
            event_subscriptions:
                Subscription bitmask sent with Identify.
            connector:
                Factory opening a `ConnectionHandle` for `(endpoint, timeout)`.
        """
        self.endpoint: str = endpoint
        self._connect_timeout: float = connect_timeout
        self._handshake_timeout: float | None = handshake_timeout
        self._event_subscriptions: int = event_subscriptions
        self._connector: Connector = connector

        self._lock: threading.Lock = threading.Lock()
        self._establish_lock: threading.Lock = threading.Lock()
        self._session: Session = Session(state=SessionState.ABSENT)
        self._generation: int = 0

    def session_get(self) -> Session:
        """
        Get a consistent snapshot of the current session.

        Returns:
            Current session instance.
        """
        with self._lock:
            return self._session

    def _session_publish(self, session: Session) -> None:
        """Swap a new session into the slot."""
        with self._lock:
            self._session = session
        logger.debug("Session %s -> %s", session.generation, session.state.value)

    def session_establish(self) -> bool:
        """
        Discard the current session and run connect + handshake for a new one.

        Never raises; connection, protocol, and unexpected failures are logged
        and leave a FAILED session in the slot with its handle closed.

        Returns:
            `True` when the new session reached READY, else `False`.
        """
        with self._establish_lock:
            self.session_discard()
            with self._lock:
                self._generation += 1
                generation: int = self._generation
            self._session_publish(Session(state=SessionState.CONNECTING, generation=generation))

            try:
                handle: ConnectionHandle = self._connector(self.endpoint, self._connect_timeout)
            except ConnectError as exc:
                logger.warning("Connect failed: %s", exc)
                self._session_publish(Session(state=SessionState.FAILED, generation=generation))
                return False
            except Exception:
                logger.exception("Unexpected error connecting to %s", self.endpoint)
                self._session_publish(Session(state=SessionState.FAILED, generation=generation))
                return False

            self._session_publish(
                Session(state=SessionState.HANDSHAKING, generation=generation, handle=handle)
            )
            try:
                negotiated: int = handshake_perform(
                    handle, self._event_subscriptions, timeout=self._handshake_timeout
                )
            except (DecodeError, SendError, ReceiveError) as exc:
                logger.warning("Handshake with %s failed: %s", self.endpoint, exc)
                self._handshakeFailed_publish(handle, generation)
                return False
            except Exception:
                logger.exception("Unexpected error during handshake with %s", self.endpoint)
                self._handshakeFailed_publish(handle, generation)
                return False

            self._session_publish(
                Session(
                    state=SessionState.READY,
                    generation=generation,
                    negotiated_rpc_version=negotiated,
                    handle=handle,
                )
            )
            logger.info(
                "Session %s ready with %s (rpcVersion=%s)", generation, self.endpoint, negotiated
            )
            return True

    def _handshakeFailed_publish(self, handle: ConnectionHandle, generation: int) -> None:
        """Publish FAILED for `generation`, then close its handle."""
        self._session_publish(Session(state=SessionState.FAILED, generation=generation))
        handle.connection_close()

    def session_discard(self) -> None:
        """
        Publish ABSENT and close the previous session's handle, if any.

        The handle is closed after the slot lock is released. Safe to call in
        any state, including repeatedly.
        """
        with self._lock:
            session: Session = self._session
            if session.state is not SessionState.ABSENT:
                self._session = Session(state=SessionState.ABSENT, generation=session.generation)
        if session.handle is not None:
            session.handle.connection_close()

    def session_check(self) -> bool:
        """
        Verify the READY session is still alive.

        Drains queued inbound traffic (request responses and events are not
        consumed, only logged) and checks the handle. A dead session is
        discarded so the supervisor reconnects.

        Returns:
            `True` when a READY session is alive, else `False`.
        """
        session: Session = self.session_get()
        if not session.isReady() or session.handle is None:
            return False

        try:
            frames = session.handle.messagesPending_drain()
        except ReceiveError as exc:
            logger.warning("Session %s lost: %s", session.generation, exc)
            self._sessionIfCurrent_discard(session)
            return False

        for frame in frames:
            op: int | None = inboundOpCode_peek(frame)
            if op == OpCode.REQUEST_RESPONSE:
                logger.debug("Request response received")
            elif op == OpCode.EVENT:
                logger.debug("Event received")
            else:
                logger.debug("Unhandled inbound message op=%s", op)

        if not session.handle.isOpen_check():
            logger.warning("Session %s lost: connection no longer open", session.generation)
            self._sessionIfCurrent_discard(session)
            return False
        return True

    def _sessionIfCurrent_discard(self, session: Session) -> None:
        """Discard `session` only if it still occupies the slot."""
        with self._lock:
            if self._session is not session:
                return
            self._session = Session(state=SessionState.ABSENT, generation=session.generation)
        if session.handle is not None:
            session.handle.connection_close()

    def command_trySend(self, command: str) -> bool:
        """
        Send a hotkey command if a READY session exists.

        Best effort: when no session is ready this is a silent no-op. A send
        failure is logged and does not tear the session down; the supervisor
        discovers dead sessions on its next check. A send racing a discard
        either completes before the close or fails with SendError.

        Args:
            command:
                Hotkey name to trigger on the peer.

        Returns:
            `True` when the command was written, else `False`.
        """
        session: Session = self.session_get()
        if not session.isReady() or session.handle is None:
            logger.debug("No ready session; dropping command %r", command)
            return False
        message = commandMessage_create(command)
        try:
            session.handle.message_send(commandMessage_encode(message))
        except SendError as exc:
            logger.error("Failed to send command %r: %s", command, exc)
            return False
        logger.info("Sent command %r (requestId=%s)", command, message.request_id)
        return True
