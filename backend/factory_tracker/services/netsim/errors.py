# backend/factory_tracker/services/netsim/errors.py
"""NetSim bridge failure kinds.

The exceptions below never leave ``NetSimClient``: they are raised by the
transport helper and turned into failed ``BridgeResponse`` values, tagged
with their ``ErrorKind``.
"""

from enum import Enum


class ErrorKind(str, Enum):
    CONNECTION = "connection"  # request not sent or no response
    PROTOCOL = "protocol"  # empty, non-JSON or malformed body
    REMOTE = "remote"  # bridge answered success=false
    CONFLICT = "conflict"  # local store conflict (order already imported)


class NetSimError(Exception):
    kind = ErrorKind.REMOTE

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NetSimConnectionError(NetSimError):
    kind = ErrorKind.CONNECTION


class NetSimProtocolError(NetSimError):
    kind = ErrorKind.PROTOCOL
