"""Shared pytest fixtures for lansend tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from lansend.client.types import Device
from lansend.core.config import SenderConfig
from lansend.core.types import DeviceType, TransferProtocol


@pytest.fixture
def device() -> Device:
    """A receiving device reachable over HTTPS."""
    return Device(
        alias="Pixel 8",
        version="2.0",
        fingerprint="f1e2d3c4",
        ip="192.168.1.50",
        port=53317,
        protocol=TransferProtocol.HTTPS,
        device_model="Google",
        device_type=DeviceType.MOBILE,
    )


@pytest.fixture
def config() -> SenderConfig:
    """A deterministic sender configuration."""
    return SenderConfig(alias="test-laptop", device_model="linux", max_workers=16)


@pytest.fixture
def sample_files(tmp_path: Path) -> list[Path]:
    """Three small files with distinct content."""
    paths = []
    for name, content in [
        ("notes.txt", b"hello world\n"),
        ("photo.JPG", b"\xff\xd8\xff" + b"\x00" * 100),
        ("archive.tar", b"x" * 5000),
    ]:
        path = tmp_path / name
        path.write_bytes(content)
        paths.append(path)
    return paths
