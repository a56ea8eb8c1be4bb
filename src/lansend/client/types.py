"""Shared types and dataclasses for discovery and transfers.

This module provides:
- TransferError and its subclasses: Exception classes for the transfer engine
- Device: A discovered LocalSend peer
- DeviceInfo: The local self-announcement (also used as SenderInfo)
- FileDescriptor: Metadata for one file offered to a peer
- TransferSession: Session id and per-file upload tokens
- UploadProgress: Progress tracking dataclass
- Type aliases for callbacks
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from lansend.core.config import DEFAULT_PORT, PROTOCOL_VERSION, SenderConfig
from lansend.core.types import DeviceType, TransferProtocol

# Peers speaking protocol v1 omit the version field
LEGACY_PROTOCOL_VERSION = "1.0"


class TransferError(Exception):
    """Base exception for transfer errors."""


class LocalIOError(TransferError):
    """A local file could not be read or is not a regular file."""


class TransferRejectedError(TransferError):
    """The receiver refused the prepare-upload request."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DeviceUnreachableError(TransferError):
    """The receiver could not be reached or did not answer in time."""


class MissingTokenError(TransferError):
    """The session holds no upload token for a file."""

    def __init__(self, file_name: str) -> None:
        super().__init__(f"No token for file: {file_name}")
        self.file_name = file_name


class UploadFailedError(TransferError):
    """The receiver answered an upload request with a non-success status."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"Upload failed with status {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class TransferCancelledError(TransferError):
    """The transfer was cancelled by the caller."""


@dataclass(frozen=True)
class Device:
    """A LocalSend peer found on the network.

    The snapshot may be stale by the time it is used for a transfer.
    """

    alias: str
    version: str
    fingerprint: str
    ip: str
    port: int = DEFAULT_PORT
    protocol: TransferProtocol = TransferProtocol.HTTPS
    device_model: str | None = None
    device_type: DeviceType | None = None
    download: bool = False

    @property
    def base_url(self) -> str:
        """Get the base URL of the peer's API server."""
        return f"{self.protocol.value}://{self.ip}:{self.port}"

    @classmethod
    def from_dict(
        cls, data: Any, ip: str, default_port: int = DEFAULT_PORT
    ) -> Device:
        """Decode a peer announcement.

        Args:
            data: Parsed JSON body returned by the peer.
            ip: Address the peer was reached on (never taken from the body).
            default_port: Port used when the peer omits it.

        Returns:
            Decoded device.

        Raises:
            ValueError: If the body does not describe a peer.
        """
        if not isinstance(data, dict):
            raise ValueError("Announcement is not a JSON object")

        alias = data.get("alias")
        fingerprint = data.get("fingerprint")
        if not isinstance(alias, str) or not isinstance(fingerprint, str):
            raise ValueError("Announcement lacks alias or fingerprint")

        version = data.get("version") or LEGACY_PROTOCOL_VERSION
        if not isinstance(version, str):
            raise ValueError(f"Invalid version: {version!r}")

        port = data.get("port") or default_port
        if not isinstance(port, int) or isinstance(port, bool):
            raise ValueError(f"Invalid port: {port!r}")

        raw_protocol = data.get("protocol") or TransferProtocol.HTTPS.value
        if not isinstance(raw_protocol, str):
            raise ValueError(f"Invalid protocol: {raw_protocol!r}")
        # TransferProtocol() raises ValueError for anything but http/https
        protocol = TransferProtocol(raw_protocol)

        device_type: DeviceType | None = None
        raw_type = data.get("deviceType")
        if isinstance(raw_type, str) and raw_type in {t.value for t in DeviceType}:
            device_type = DeviceType(raw_type)

        model = data.get("deviceModel")

        return cls(
            alias=alias,
            version=version,
            fingerprint=fingerprint,
            ip=ip,
            port=port,
            protocol=protocol,
            device_model=model if isinstance(model, str) else None,
            device_type=device_type,
            download=bool(data.get("download", False)),
        )


@dataclass
class DeviceInfo:
    """Announcement describing this machine to peers."""

    alias: str
    device_model: str | None
    fingerprint: str
    version: str = PROTOCOL_VERSION
    device_type: DeviceType = DeviceType.DESKTOP
    port: int = DEFAULT_PORT
    protocol: TransferProtocol = TransferProtocol.HTTPS
    download: bool = False
    announce: bool = False

    @classmethod
    def local(
        cls, config: SenderConfig | None = None, announce: bool = False
    ) -> DeviceInfo:
        """Build the local announcement with a freshly generated fingerprint.

        Args:
            config: Sender configuration (defaults used if None).
            announce: Value of the announce flag.

        Returns:
            New DeviceInfo.
        """
        config = config or SenderConfig()
        return cls(
            alias=config.alias,
            device_model=config.device_model,
            fingerprint=str(uuid.uuid4()),
            port=config.port,
            announce=announce,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize as a register request body."""
        data = self.to_sender_dict()
        data["announce"] = self.announce
        return data

    def to_sender_dict(self) -> dict[str, Any]:
        """Serialize as the SenderInfo of a prepare-upload request."""
        return {
            "alias": self.alias,
            "version": self.version,
            "deviceModel": self.device_model,
            "deviceType": self.device_type.value,
            "fingerprint": self.fingerprint,
            "port": self.port,
            "protocol": self.protocol.value,
            "download": self.download,
        }


@dataclass
class FileDescriptor:
    """Metadata of one local file offered to a receiver.

    Created per transfer attempt; the id is unique within one negotiation.
    """

    id: str
    file_name: str
    size: int
    file_type: str
    sha256: str
    path: Path
    modified: str | None = None
    accessed: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the prepare-upload request (local path excluded)."""
        data: dict[str, Any] = {
            "id": self.id,
            "fileName": self.file_name,
            "size": self.size,
            "fileType": self.file_type,
            "sha256": self.sha256,
        }
        metadata = {}
        if self.modified:
            metadata["modified"] = self.modified
        if self.accessed:
            metadata["accessed"] = self.accessed
        if metadata:
            data["metadata"] = metadata
        return data


@dataclass
class TransferSession:
    """Receiver-issued session binding files to single-use upload tokens.

    An empty session id means the receiver needs no upload.
    """

    session_id: str
    files: dict[str, str] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> TransferSession:
        """Create the "no transfer required" sentinel."""
        return cls(session_id="", files={})

    @property
    def requires_upload(self) -> bool:
        """Check if the upload phase must run."""
        return bool(self.session_id)

    def token_for(self, file_id: str) -> str | None:
        """Get the upload token of a file, if any."""
        return self.files.get(file_id) or None

    @classmethod
    def from_dict(cls, data: Any) -> TransferSession:
        """Decode a prepare-upload response body.

        Raises:
            TransferRejectedError: If the body is not a valid session.
        """
        if not isinstance(data, dict):
            raise TransferRejectedError("Invalid response from receiver")
        session_id = data.get("sessionId")
        files = data.get("files", {})
        if not isinstance(session_id, str) or not isinstance(files, dict):
            raise TransferRejectedError("Invalid response from receiver")
        if not all(isinstance(k, str) and isinstance(v, str) for k, v in files.items()):
            raise TransferRejectedError("Invalid response from receiver")
        return cls(session_id=session_id, files=dict(files))


@dataclass
class UploadProgress:
    """Progress of a transfer across files."""

    current_index: int
    total_count: int
    file_name: str

    @property
    def is_complete(self) -> bool:
        """Check if this is the final progress report."""
        return self.current_index >= self.total_count

    @property
    def percent(self) -> float:
        """Get progress percentage."""
        if self.total_count == 0:
            return 100.0
        return (self.current_index / self.total_count) * 100


# Type alias for progress callback
ProgressCallback = Callable[[UploadProgress], None]
