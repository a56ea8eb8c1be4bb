"""Discovery command for the lansend CLI.

Commands:
- discover: List LocalSend devices on the local network
"""

from __future__ import annotations

import click

from lansend.client.cli.config import get_sender_config
from lansend.client.types import Device


def format_device(device: Device) -> str:
    """Format a device as one line: alias, then model, IP, type and protocol."""
    parts: list[str] = []
    if device.device_model:
        parts.append(device.device_model)
    parts.append(device.ip)
    if device.device_type:
        parts.append(device.device_type.value)
    return f"{device.alias}  ({' • '.join(parts)}, {device.protocol.value.upper()})"


@click.command()
@click.option(
    "--timeout",
    "-t",
    type=float,
    default=None,
    help="Scan deadline in seconds (default: from config, 3s).",
)
@click.option(
    "--all",
    "show_all",
    is_flag=True,
    help="Show one entry per protocol instead of one per device.",
)
def discover(timeout: float | None, show_all: bool) -> None:
    """List LocalSend devices on the local network."""
    from lansend.client.discovery import DeviceRegistrar, dedupe_devices

    config = get_sender_config()

    click.echo("Scanning network for devices...")
    devices = DeviceRegistrar(config).discover(timeout)
    if not show_all:
        devices = dedupe_devices(devices)

    if not devices:
        click.echo("No devices found. Make sure LocalSend is open on the receiving device.")
        return

    click.echo(f"Found {len(devices)} device(s):")
    for device in sorted(devices, key=lambda d: (d.alias.lower(), d.ip)):
        click.echo(f"  {format_device(device)}")
