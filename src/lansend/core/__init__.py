"""Core module - Protocol constants, configuration, and shared types."""

from lansend.core.config import (
    CANCEL_PATH,
    DEFAULT_PORT,
    PREPARE_UPLOAD_PATH,
    PROTOCOL_VERSION,
    REGISTER_PATH,
    UPLOAD_PATH,
    SenderConfig,
)
from lansend.core.hashing import compute_file_hash
from lansend.core.types import DeviceType, TransferProtocol, TransferState

__all__ = [
    # Config
    "CANCEL_PATH",
    "DEFAULT_PORT",
    "PREPARE_UPLOAD_PATH",
    "PROTOCOL_VERSION",
    "REGISTER_PATH",
    "UPLOAD_PATH",
    "SenderConfig",
    # Hashing
    "compute_file_hash",
    # Types
    "DeviceType",
    "TransferProtocol",
    "TransferState",
]
