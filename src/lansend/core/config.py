"""Shared configuration and protocol constants for lansend.

This module defines the LocalSend v2 wire constants and the runtime
configuration used by both discovery and transfer components.
"""

from __future__ import annotations

import platform
import socket
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

# LocalSend v2 protocol
PROTOCOL_VERSION = "2.0"
DEFAULT_PORT = 53317
API_PREFIX = "/api/localsend/v2"
REGISTER_PATH = f"{API_PREFIX}/register"
PREPARE_UPLOAD_PATH = f"{API_PREFIX}/prepare-upload"
UPLOAD_PATH = f"{API_PREFIX}/upload"
CANCEL_PATH = f"{API_PREFIX}/cancel"

# Timeouts (seconds)
PROBE_TIMEOUT = 1.0
SCAN_TIMEOUT = 3.0
NEGOTIATE_TIMEOUT = 30.0
CONNECT_TIMEOUT = 10.0

DEFAULT_MAX_WORKERS = 256
DEFAULT_ALIAS = "lansend"


def default_alias() -> str:
    """Get the alias announced to peers when none is configured.

    Returns:
        The host name, or a fixed fallback if it is empty.
    """
    return socket.gethostname() or DEFAULT_ALIAS


def default_device_model() -> str:
    """Get the platform-derived device model (e.g. "linux", "darwin")."""
    return platform.system().lower() or "unknown"


@dataclass
class SenderConfig:
    """Runtime configuration for discovery and transfers.

    Attributes:
        alias: Name announced to peers.
        device_model: Platform-derived model announced to peers.
        port: Port announced to peers and used for probe targets.
        probe_timeout: Per-probe timeout during discovery.
        scan_timeout: Overall discovery deadline.
        negotiate_timeout: prepare-upload timeout (receiver may wait for a human).
        connect_timeout: Connect timeout for uploads (no read/write limit).
        max_workers: Maximum concurrent discovery probes.
    """

    alias: str = field(default_factory=default_alias)
    device_model: str = field(default_factory=default_device_model)
    port: int = DEFAULT_PORT
    probe_timeout: float = PROBE_TIMEOUT
    scan_timeout: float = SCAN_TIMEOUT
    negotiate_timeout: float = NEGOTIATE_TIMEOUT
    connect_timeout: float = CONNECT_TIMEOUT
    max_workers: int = DEFAULT_MAX_WORKERS

    def __post_init__(self) -> None:
        """Validate numeric settings."""
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if self.scan_timeout <= 0:
            raise ValueError("scan_timeout must be positive")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> SenderConfig:
        """Build a config from a persisted config dictionary.

        Unknown keys are ignored so the config file can carry CLI-only settings.

        Args:
            data: Mapping loaded from the config file.

        Returns:
            SenderConfig with defaults for missing keys.
        """
        kwargs: dict[str, Any] = {}
        if data.get("alias"):
            kwargs["alias"] = str(data["alias"])
        if data.get("scan_timeout") is not None:
            kwargs["scan_timeout"] = float(data["scan_timeout"])
        if data.get("max_workers") is not None:
            kwargs["max_workers"] = int(data["max_workers"])
        return cls(**kwargs)
