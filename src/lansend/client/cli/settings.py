"""Settings command for the lansend CLI.

Commands:
- config: Show or update the saved configuration
"""

from __future__ import annotations

import click

from lansend.client.cli.config import get_config_file, load_config, save_config
from lansend.core.config import SenderConfig


@click.command("config")
@click.option("--alias", default=None, help="Name shown to receiving devices.")
@click.option(
    "--scan-timeout",
    type=click.FloatRange(min=0.1),
    default=None,
    help="Default scan deadline in seconds.",
)
def config_cmd(alias: str | None, scan_timeout: float | None) -> None:
    """Show or update the saved configuration."""
    config = load_config()

    if alias is not None:
        config["alias"] = alias
    if scan_timeout is not None:
        config["scan_timeout"] = scan_timeout
    if alias is not None or scan_timeout is not None:
        save_config(config)
        click.echo(f"Saved {get_config_file()}")

    effective = SenderConfig.from_mapping(config)
    click.echo(f"alias: {effective.alias}")
    click.echo(f"scan_timeout: {effective.scan_timeout}")
