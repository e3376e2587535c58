"""
respcli Exceptions Module

Defines the exception hierarchy for client-side failures. Error replies
sent by the server are not exceptions: they decode into an ERROR reply
and are rendered like any other value.
"""


class RespError(Exception):
    """Base exception for all respcli errors."""


class DecodeError(RespError):
    """
    Raised when the server sends malformed or unrecognized RESP data.

    The stream is not resynchronized after this error, so later replies
    on the same connection may be misframed.
    """


class ConnectError(RespError):
    """
    Raised when the client cannot reach the server.

    Attributes:
        address: str - The address that was dialed
        reason: The underlying OSError or message explaining the failure
    """

    def __init__(self, address, reason):
        self.address = address
        self.reason = reason
        super().__init__(f"Could not connect to Redis at {address}: {reason}")
