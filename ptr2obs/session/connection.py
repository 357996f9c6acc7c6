"""
WebSocket transport for the obs-websocket session.

This module owns one client connection: open, framed send/receive, liveness,
and idempotent close. It converts `websockets` and socket exceptions into the
ptr2obs error taxonomy so callers above it deal only with ConnectError,
SendError, and ReceiveError.
"""

from __future__ import annotations

import logging
import threading
from typing import Union

from websockets.exceptions import ConnectionClosed, WebSocketException
from websockets.protocol import State
from websockets.sync.client import ClientConnection, connect

from ptr2obs.common.errors import ConnectError, ReceiveError, SendError

logger = logging.getLogger(__name__)

Frame = Union[str, bytes]


class ConnectionHandle:
    """
    Message-oriented connection to one WebSocket endpoint.

    Sends and close are serialized on a per-handle write lock, so a close
    never interleaves with an in-flight send; a send after close raises
    SendError.
    """

    def __init__(self, websocket: ClientConnection, endpoint: str) -> None:
        """
        Wrap an already-open client connection.

        Args:
            websocket:
                Open `websockets` client connection.
            endpoint:
                Endpoint URI, kept for log context.
        """
        self._websocket: ClientConnection = websocket
        self.endpoint: str = endpoint
        self._closed: bool = False
        self._write_lock: threading.Lock = threading.Lock()

    @classmethod
    def open(cls, endpoint: str, timeout: float = 10.0) -> ConnectionHandle:
        """
        Open a connection, blocking until it completes or fails.

        Args:
            endpoint:
                WebSocket URI, e.g. `ws://localhost:4455`.
            timeout:
                Opening handshake timeout in seconds.

        Returns:
            Open connection handle.

        Raises:
            ConnectError:
                Raised on refusal, DNS failure, invalid URI or port,
                upgrade rejection, or timeout.
        """
        try:
            websocket: ClientConnection = connect(endpoint, open_timeout=timeout)
        except (OSError, ValueError, WebSocketException) as exc:
            raise ConnectError(f"Failed to connect to {endpoint}: {exc}") from exc
        logger.info("Connected to %s", endpoint)
        return cls(websocket, endpoint)

    @property
    def closed(self) -> bool:
        """Whether `connection_close` has been called."""
        return self._closed

    def isOpen_check(self) -> bool:
        """
        Check whether the underlying connection is still open.

        Returns:
            `True` when open for both directions, else `False`.
        """
        if self._closed:
            return False
        return self._websocket.protocol.state is State.OPEN

    def message_send(self, data: Frame) -> None:
        """
        Send one message frame.

        Args:
            data:
                Text (sent as a text frame) or bytes (binary frame).

        Raises:
            SendError:
                Raised when the handle is closed or the write fails.
        """
        with self._write_lock:
            if self._closed:
                raise SendError("Connection handle is closed")
            try:
                self._websocket.send(data)
            except (ConnectionClosed, OSError, WebSocketException) as exc:
                raise SendError(f"Failed to send message: {exc}") from exc

    def message_receive(self, timeout: float | None = None) -> Frame:
        """
        Block until one full message arrives.

        Args:
            timeout:
                Seconds to wait, or None to wait forever.

        Returns:
            Received frame.

        Raises:
            ReceiveError:
                `closed=True` when the peer closed the connection (or the
                handle was closed locally), `closed=False` on transport faults
                and timeouts.
        """
        if self._closed:
            raise ReceiveError("Connection handle is closed", closed=True)
        try:
            return self._websocket.recv(timeout=timeout)
        except TimeoutError as exc:
            raise ReceiveError(f"Timed out after {timeout}s waiting for message") from exc
        except ConnectionClosed as exc:
            raise ReceiveError(f"Connection closed by peer: {exc}", closed=True) from exc
        except (OSError, WebSocketException) as exc:
            raise ReceiveError(f"Transport error: {exc}") from exc

    def messagesPending_drain(self, limit: int = 64) -> list[Frame]:
        """
        Read inbound messages that are already queued, without blocking.

        Args:
            limit:
                Maximum number of messages to read in one call.

        Returns:
            Queued messages in arrival order (possibly empty).

        Raises:
            ReceiveError:
                Raised when the connection is closed or faulted.
        """
        frames: list[Frame] = []
        while len(frames) < limit:
            if self._closed:
                raise ReceiveError("Connection handle is closed", closed=True)
            try:
                frames.append(self._websocket.recv(timeout=0))
            except TimeoutError:
                break
            except ConnectionClosed as exc:
                raise ReceiveError(f"Connection closed by peer: {exc}", closed=True) from exc
            except (OSError, WebSocketException) as exc:
                raise ReceiveError(f"Transport error: {exc}") from exc
        return frames

    def connection_close(self) -> None:
        """
        Close the connection and release the socket.

        Waits for an in-flight send to finish. This method is idempotent.
        """
        with self._write_lock:
            if self._closed:
                return
            self._closed = True
            try:
                self._websocket.close()
            except (OSError, WebSocketException) as exc:
                logger.debug("Error closing connection to %s: %s", self.endpoint, exc)
        logger.info("Connection to %s closed", self.endpoint)
