"""obs-websocket protocol messages and their JSON wire encoding"""

import json
import uuid
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Optional, Union

from ptr2obs.common.errors import DecodeError, HandshakeError

WireData = Union[str, bytes]

TRIGGER_HOTKEY_REQUEST: str = "TriggerHotkeyByName"


class OpCode(IntEnum):
    """obs-websocket v5 message op codes"""

    HELLO = 0
    IDENTIFY = 1
    IDENTIFIED = 2
    EVENT = 5
    REQUEST = 6
    REQUEST_RESPONSE = 7


@dataclass(frozen=True)
class HelloMessage:
    """Peer announcement received first on a new connection"""

    rpc_version: int
    obs_websocket_version: Optional[str] = None
    authentication_required: bool = False


@dataclass(frozen=True)
class IdentifyMessage:
    """Client identification sent in reply to Hello"""

    rpc_version: int
    event_subscriptions: int


@dataclass(frozen=True)
class IdentifiedMessage:
    """Peer acknowledgement that identification succeeded"""

    negotiated_rpc_version: int


@dataclass(frozen=True)
class CommandMessage:
    """Outbound request asking the peer to trigger a named hotkey"""

    request_id: str
    hotkey_name: str
    request_type: str = TRIGGER_HOTKEY_REQUEST


def _envelope_parse(data: WireData) -> Dict[str, Any]:
    """
    Parse one wire message into its {"op", "d"} envelope

    Args:
        data: Raw text or bytes frame

    Returns:
        Envelope dictionary

    Raises:
        DecodeError: If the frame is not a JSON object with an integer op
    """
    try:
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        parsed = json.loads(data)
    except (UnicodeDecodeError, ValueError, RecursionError) as exc:
        raise DecodeError(f"Malformed message: {exc}") from exc

    if not isinstance(parsed, dict):
        raise DecodeError("Message must be a JSON object")
    op = parsed.get("op")
    if not isinstance(op, int) or isinstance(op, bool):
        raise DecodeError("Message has no integer op code")
    body = parsed.get("d")
    if not isinstance(body, dict):
        raise DecodeError(f"Message op={op} has no data object")
    return parsed


def _envelope_serialize(op: OpCode, body: Dict[str, Any]) -> str:
    """Serialize an envelope to compact JSON text"""
    return json.dumps({"op": int(op), "d": body})


def helloMessage_decode(data: WireData) -> HelloMessage:
    """
    Decode the peer's Hello message

    Args:
        data: Raw wire frame

    Returns:
        Decoded HelloMessage

    Raises:
        DecodeError: If the frame is malformed, is not a Hello, or lacks an
            integer rpcVersion
    """
    envelope = _envelope_parse(data)
    if envelope["op"] != OpCode.HELLO:
        raise DecodeError(f"Expected Hello (op={int(OpCode.HELLO)}), got op={envelope['op']}")

    body: Dict[str, Any] = envelope["d"]
    rpc_version = body.get("rpcVersion")
    if not isinstance(rpc_version, int) or isinstance(rpc_version, bool):
        raise DecodeError("Hello message has no integer rpcVersion")

    obs_version = body.get("obsWebSocketVersion")
    return HelloMessage(
        rpc_version=rpc_version,
        obs_websocket_version=str(obs_version) if obs_version is not None else None,
        authentication_required="authentication" in body,
    )


def identifyMessage_encode(message: IdentifyMessage) -> str:
    """
    Encode an Identify message

    Args:
        message: Identify message

    Returns:
        JSON text frame
    """
    return _envelope_serialize(
        OpCode.IDENTIFY,
        {
            "rpcVersion": message.rpc_version,
            "eventSubscriptions": message.event_subscriptions,
        },
    )


def identifiedMessage_decode(data: WireData) -> IdentifiedMessage:
    """
    Decode the peer's Identified message

    Args:
        data: Raw wire frame

    Returns:
        Decoded IdentifiedMessage

    Raises:
        DecodeError: If the frame is malformed
        HandshakeError: If the op code is not Identified
    """
    envelope = _envelope_parse(data)
    if envelope["op"] != OpCode.IDENTIFIED:
        raise HandshakeError(
            f"Identification rejected: expected op={int(OpCode.IDENTIFIED)}, got op={envelope['op']}"
        )

    negotiated = envelope["d"].get("negotiatedRpcVersion")
    if not isinstance(negotiated, int) or isinstance(negotiated, bool):
        raise DecodeError("Identified message has no integer negotiatedRpcVersion")
    return IdentifiedMessage(negotiated_rpc_version=negotiated)


def commandMessage_create(hotkey_name: str) -> CommandMessage:
    """Build a hotkey command with a fresh request id"""
    return CommandMessage(request_id=str(uuid.uuid4()), hotkey_name=hotkey_name)


def commandMessage_encode(message: CommandMessage) -> str:
    """
    Encode a hotkey request

    Args:
        message: Command message

    Returns:
        JSON text frame
    """
    return _envelope_serialize(
        OpCode.REQUEST,
        {
            "requestType": message.request_type,
            "requestId": message.request_id,
            "requestData": {"hotkeyName": message.hotkey_name},
        },
    )


def inboundOpCode_peek(data: WireData) -> Optional[int]:
    """
    Read the op code of an inbound frame without interpreting its payload

    Args:
        data: Raw wire frame

    Returns:
        Op code, or None when the frame cannot be decoded
    """
    try:
        return int(_envelope_parse(data)["op"])
    except DecodeError:
        return None
