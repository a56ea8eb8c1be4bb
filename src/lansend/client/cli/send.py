"""Send command for the lansend CLI.

Commands:
- send: Send files to a LocalSend device
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from lansend.client.cli.config import get_sender_config
from lansend.client.cli.discover import format_device
from lansend.client.types import Device, UploadProgress


def select_device(devices: list[Device], target: str | None) -> Device:
    """Pick the receiving device.

    Matches --to against IP or alias (case-insensitive). Without --to, the
    only device found is used, otherwise the user is prompted.

    Exits with status 1 if --to matches nothing.
    """
    if target:
        for device in devices:
            if device.ip == target or device.alias.lower() == target.lower():
                return device
        click.echo(f"Error: No device matching '{target}'.", err=True)
        sys.exit(1)

    if len(devices) == 1:
        return devices[0]

    for i, device in enumerate(devices, start=1):
        click.echo(f"  {i}. {format_device(device)}")
    choice = click.prompt(
        "Send to device",
        type=click.IntRange(1, len(devices)),
        default=1,
        show_default=True,
    )
    return devices[choice - 1]


def print_progress(progress: UploadProgress) -> None:
    """Print one line per file."""
    if progress.is_complete:
        return
    click.echo(
        f"  [{progress.current_index + 1}/{progress.total_count}] {progress.file_name}"
    )


@click.command()
@click.argument(
    "paths",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option("--to", "target", default=None, help="Alias or IP of the receiving device.")
@click.option(
    "--timeout",
    "-t",
    type=float,
    default=None,
    help="Scan deadline in seconds (default: from config, 3s).",
)
@click.option(
    "--notify/--no-notify",
    default=False,
    help="Show a desktop notification when the transfer ends.",
)
def send(paths: tuple[Path, ...], target: str | None, timeout: float | None, notify: bool) -> None:
    """Send files to a LocalSend device.

    Scans the network, picks the device (see --to) and sends PATHS in order.
    Folders are not accepted; pass the files they contain.
    """
    from lansend.client.discovery import DeviceRegistrar, dedupe_devices
    from lansend.client.notifications import (
        notify_transfer_complete,
        notify_transfer_failed,
    )
    from lansend.client.state import DiscoveryCache
    from lansend.client.transfer import Transfer
    from lansend.client.types import TransferError
    from lansend.core.types import TransferState

    config = get_sender_config()
    cache = DiscoveryCache(DeviceRegistrar(config))

    click.echo("Scanning network for devices...")
    devices = dedupe_devices(cache.get_devices(timeout=timeout))
    while not devices:
        click.echo("No devices found. Make sure LocalSend is open on the receiving device.")
        if not click.confirm("Scan again?", default=True):
            sys.exit(1)
        devices = dedupe_devices(cache.get_devices(force=True, timeout=timeout))

    device = select_device(devices, target)
    click.echo(f"Sending {len(paths)} file(s) to {device.alias} ({device.ip})...")

    transfer = Transfer(device, list(paths), config=config)
    try:
        state = transfer.run(on_progress=print_progress)
    except KeyboardInterrupt:
        transfer.cancel()
        click.echo("\nTransfer cancelled.", err=True)
        sys.exit(130)
    except TransferError as e:
        click.echo(f"Error: Failed to send files: {e}", err=True)
        if notify:
            notify_transfer_failed(device.alias, str(e))
        sys.exit(1)

    if state == TransferState.NO_TRANSFER_NEEDED:
        click.echo(f"{device.alias} needs no upload.")
    else:
        click.echo(f"Sent {len(paths)} file(s) to {device.alias}.")
        if notify:
            notify_transfer_complete(len(paths), device.alias)
