from __future__ import annotations

from enum import Enum

__all__ = ["ConnectionMode", "ConnectionState"]


class ConnectionMode(str, Enum):
    NOT_CONNECTED = "NotConnected"
    DEMO_FEED = "DemoFeed"
    WALLET_LINK = "WalletLink"


class ConnectionState:
    """Tri-state link status. Starts disconnected."""

    def __init__(self) -> None:
        self._mode = ConnectionMode.NOT_CONNECTED

    @property
    def mode(self) -> ConnectionMode:
        return self._mode

    @property
    def is_connected(self) -> bool:
        return self._mode is not ConnectionMode.NOT_CONNECTED

    def connect(self, mode: ConnectionMode | str) -> ConnectionMode:
        target = ConnectionMode(mode)
        if target is ConnectionMode.NOT_CONNECTED:
            raise ValueError("connect() needs DemoFeed or WalletLink; use disconnect()")
        self._mode = target
        return target

    def disconnect(self) -> None:
        self._mode = ConnectionMode.NOT_CONNECTED
