"""Error taxonomy for connection, protocol, and send failures"""


class Ptr2ObsError(Exception):
    """Base class for all ptr2obs errors"""


class ConnectError(Ptr2ObsError):
    """Transport-level failure to establish a connection"""


class DecodeError(Ptr2ObsError):
    """Malformed or unexpected protocol message"""


class HandshakeError(DecodeError):
    """Protocol-level rejection during identification (e.g. wrong op code)"""


class SendError(Ptr2ObsError):
    """Write failure on a handle that may or may not still be valid"""


class ReceiveError(Ptr2ObsError):
    """
    Read failure on a connection handle.

    `closed` is True when the peer closed the connection and False for a
    transport fault.
    """

    def __init__(self, message: str, closed: bool = False) -> None:
        super().__init__(message)
        self.closed: bool = closed
