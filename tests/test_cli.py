"""Tests for CLI commands - discover, send, config."""

from __future__ import annotations

import json
import re
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock, patch

import httpx
import pytest
from click.testing import CliRunner

from lansend.client.cli import cli
from lansend.client.types import Device
from lansend.core.types import DeviceType, TransferProtocol

PREPARE_URL = "https://192.168.1.50:53317/api/localsend/v2/prepare-upload"
UPLOAD_URL = re.compile(r"https://192\.168\.1\.50:53317/api/localsend/v2/upload\?.*")


def make_device(alias: str, ip: str, fingerprint: str, protocol: TransferProtocol = TransferProtocol.HTTPS) -> Device:
    """Create a Device for testing."""
    return Device(
        alias=alias,
        version="2.0",
        fingerprint=fingerprint,
        ip=ip,
        protocol=protocol,
        device_model="Samsung",
        device_type=DeviceType.MOBILE,
    )


def accept_all(request: httpx.Request) -> httpx.Response:
    """Receiver callback granting a token to every offered file."""
    body = json.loads(request.content)
    tokens = {file_id: "tok" for file_id in body["files"]}
    return httpx.Response(200, json={"sessionId": "s1", "files": tokens})


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def config_dir(tmp_path: Path) -> Iterator[Path]:
    """Point the config directory at a temporary folder."""
    config = tmp_path / ".lansend"
    with patch("lansend.client.cli.config.get_config_dir", return_value=config):
        yield config


@pytest.fixture
def registrar() -> Iterator[MagicMock]:
    """Replace the network scan with a mock."""
    with patch("lansend.client.discovery.DeviceRegistrar") as registrar_cls:
        yield registrar_cls.return_value


class TestDiscoverCommand:
    """Tests for 'lansend discover' command."""

    def test_lists_devices(self, runner: CliRunner, registrar: MagicMock, device: Device) -> None:
        """Should print one line per device."""
        registrar.discover.return_value = [device]

        result = runner.invoke(cli, ["discover"])

        assert result.exit_code == 0
        assert "Found 1 device(s):" in result.output
        assert "Pixel 8  (Google • 192.168.1.50 • mobile, HTTPS)" in result.output

    def test_collapses_protocol_duplicates(self, runner: CliRunner, registrar: MagicMock) -> None:
        """Should show one entry per device unless --all is given."""
        registrar.discover.return_value = [
            make_device("Desk", "192.168.1.20", "fp", TransferProtocol.HTTP),
            make_device("Desk", "192.168.1.20", "fp", TransferProtocol.HTTPS),
        ]

        result = runner.invoke(cli, ["discover"])
        assert "Found 1 device(s):" in result.output
        assert "HTTPS" in result.output

        result = runner.invoke(cli, ["discover", "--all"])
        assert "Found 2 device(s):" in result.output

    def test_no_devices(self, runner: CliRunner, registrar: MagicMock) -> None:
        """Should explain how to make a device visible."""
        registrar.discover.return_value = []

        result = runner.invoke(cli, ["discover"])

        assert result.exit_code == 0
        assert "No devices found" in result.output

    def test_timeout_option(self, runner: CliRunner, registrar: MagicMock) -> None:
        """Should pass --timeout to the scan."""
        registrar.discover.return_value = []

        runner.invoke(cli, ["discover", "--timeout", "1.5"])

        registrar.discover.assert_called_once_with(1.5)


class TestSendCommand:
    """Tests for 'lansend send' command."""

    def test_sends_to_only_device(self, runner: CliRunner, registrar: MagicMock, httpx_mock, device: Device, sample_files: list[Path]) -> None:  # type: ignore[no-untyped-def]
        """Should send every file to the single device found."""
        registrar.discover.return_value = [device]
        httpx_mock.add_callback(accept_all, url=PREPARE_URL, method="POST")
        for _ in sample_files:
            httpx_mock.add_response(url=UPLOAD_URL, method="POST")

        result = runner.invoke(cli, ["send", *map(str, sample_files)])

        assert result.exit_code == 0, result.output
        assert "[1/3] notes.txt" in result.output
        assert "[3/3] archive.tar" in result.output
        assert "Sent 3 file(s) to Pixel 8." in result.output

    def test_picks_device_by_alias(self, runner: CliRunner, registrar: MagicMock, httpx_mock, device: Device, sample_files: list[Path]) -> None:  # type: ignore[no-untyped-def]
        """--to should match aliases case-insensitively."""
        registrar.discover.return_value = [
            make_device("Desk", "192.168.1.20", "desk"),
            device,
        ]
        httpx_mock.add_response(url=PREPARE_URL, method="POST", status_code=204)

        result = runner.invoke(cli, ["send", str(sample_files[0]), "--to", "pixel 8"])

        assert result.exit_code == 0, result.output
        assert "Pixel 8 needs no upload." in result.output

    def test_prompts_between_devices(self, runner: CliRunner, registrar: MagicMock, httpx_mock, device: Device, sample_files: list[Path]) -> None:  # type: ignore[no-untyped-def]
        """Should ask which device to use when several are found."""
        registrar.discover.return_value = [
            make_device("Desk", "192.168.1.20", "desk"),
            device,
        ]
        httpx_mock.add_response(url=PREPARE_URL, method="POST", status_code=204)

        result = runner.invoke(cli, ["send", str(sample_files[0])], input="2\n")

        assert result.exit_code == 0, result.output
        assert "1. Desk" in result.output
        assert "2. Pixel 8" in result.output

    def test_unknown_target(self, runner: CliRunner, registrar: MagicMock, device: Device, sample_files: list[Path]) -> None:
        """Should fail when --to matches nothing."""
        registrar.discover.return_value = [device]

        result = runner.invoke(cli, ["send", str(sample_files[0]), "--to", "10.9.9.9"])

        assert result.exit_code == 1
        assert "No device matching '10.9.9.9'" in result.output

    def test_rejected(self, runner: CliRunner, registrar: MagicMock, httpx_mock, device: Device, sample_files: list[Path]) -> None:  # type: ignore[no-untyped-def]
        """Should report the rejection reason and exit with status 1."""
        registrar.discover.return_value = [device]
        httpx_mock.add_response(url=PREPARE_URL, method="POST", status_code=403)

        result = runner.invoke(cli, ["send", str(sample_files[0])])

        assert result.exit_code == 1
        assert "Failed to send files: Request rejected by receiver" in result.output

    def test_no_devices_rescan_declined(self, runner: CliRunner, registrar: MagicMock, sample_files: list[Path]) -> None:
        """Should offer a rescan and exit when declined."""
        registrar.discover.return_value = []

        result = runner.invoke(cli, ["send", str(sample_files[0])], input="n\n")

        assert result.exit_code == 1
        assert "Scan again?" in result.output
        assert registrar.discover.call_count == 1

    def test_no_devices_rescan(self, runner: CliRunner, registrar: MagicMock, httpx_mock, device: Device, sample_files: list[Path]) -> None:  # type: ignore[no-untyped-def]
        """A confirmed rescan should force a new scan."""
        registrar.discover.side_effect = [[], [device]]
        httpx_mock.add_response(url=PREPARE_URL, method="POST", status_code=204)

        result = runner.invoke(cli, ["send", str(sample_files[0])], input="y\n")

        assert result.exit_code == 0, result.output
        assert registrar.discover.call_count == 2

    def test_rejects_directories(self, runner: CliRunner, tmp_path: Path) -> None:
        """Folders should be refused before scanning."""
        result = runner.invoke(cli, ["send", str(tmp_path)])

        assert result.exit_code == 2

    def test_notifies_on_success(self, runner: CliRunner, registrar: MagicMock, httpx_mock, device: Device, sample_files: list[Path]) -> None:  # type: ignore[no-untyped-def]
        """--notify should show a completion notification."""
        registrar.discover.return_value = [device]
        httpx_mock.add_callback(accept_all, url=PREPARE_URL, method="POST")
        httpx_mock.add_response(url=UPLOAD_URL, method="POST")

        with patch("lansend.client.notifications.send_notification") as mock_send:
            result = runner.invoke(cli, ["send", str(sample_files[0]), "--notify"])

        assert result.exit_code == 0, result.output
        assert mock_send.call_args[0][0].message == "Sent 1 file to Pixel 8"


class TestConfigCommand:
    """Tests for 'lansend config' command."""

    def test_shows_defaults(self, runner: CliRunner, config_dir: Path) -> None:
        """Should show effective settings without writing a file."""
        result = runner.invoke(cli, ["config"])

        assert result.exit_code == 0
        assert "scan_timeout: 3.0" in result.output
        assert not (config_dir / "config.json").exists()

    def test_saves_settings(self, runner: CliRunner, config_dir: Path) -> None:
        """Should persist alias and scan timeout."""
        result = runner.invoke(cli, ["config", "--alias", "desk", "--scan-timeout", "5"])

        assert result.exit_code == 0
        saved = json.loads((config_dir / "config.json").read_text())
        assert saved == {"alias": "desk", "scan_timeout": 5.0}
        assert "alias: desk" in result.output

    def test_saved_timeout_used_by_discover(self, runner: CliRunner) -> None:
        """Discover should build its registrar from the saved config."""
        runner.invoke(cli, ["config", "--scan-timeout", "7"])

        with patch("lansend.client.discovery.DeviceRegistrar") as registrar_cls:
            registrar_cls.return_value.discover.return_value = []
            runner.invoke(cli, ["discover"])

        config = registrar_cls.call_args[0][0]
        assert config.scan_timeout == 7.0

    def test_corrupt_settings_file(self, runner: CliRunner, config_dir: Path) -> None:
        """A broken settings file should be reported, not crash."""
        config_dir.mkdir()
        (config_dir / "config.json").write_text("{not json")

        result = runner.invoke(cli, ["discover"])

        assert result.exit_code == 1
        assert "Invalid settings file" in result.output

    def test_rejects_tiny_timeout(self, runner: CliRunner) -> None:
        """Should refuse a scan timeout below 0.1s."""
        result = runner.invoke(cli, ["config", "--scan-timeout", "0"])
        assert result.exit_code == 2


class TestHelp:
    """Tests for the top-level group."""

    def test_help(self, runner: CliRunner) -> None:
        """Should list every command."""
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for command in ("discover", "send", "config"):
            assert command in result.output
