"""Shared types for lansend.

This module defines enums used by both discovery and transfer.
"""

from __future__ import annotations

from enum import Enum, auto


class DeviceType(str, Enum):
    """Kind of device announced by a LocalSend peer."""

    MOBILE = "mobile"
    DESKTOP = "desktop"
    WEB = "web"
    HEADLESS = "headless"
    SERVER = "server"


class TransferProtocol(str, Enum):
    """Transport a peer listens on."""

    HTTP = "http"
    HTTPS = "https"


class TransferState(Enum):
    """Lifecycle of one transfer attempt.

    IDLE -> NEGOTIATING -> NO_TRANSFER_NEEDED | UPLOADING
    UPLOADING -> COMPLETED | FAILED | CANCELLED
    """

    IDLE = auto()
    NEGOTIATING = auto()
    NO_TRANSFER_NEEDED = auto()
    UPLOADING = auto()
    COMPLETED = auto()
    FAILED = auto()
    CANCELLED = auto()

    @property
    def is_terminal(self) -> bool:
        """Check if no further transition is possible."""
        return self in (
            TransferState.NO_TRANSFER_NEEDED,
            TransferState.COMPLETED,
            TransferState.FAILED,
            TransferState.CANCELLED,
        )
