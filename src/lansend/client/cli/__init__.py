"""Command-line interface for lansend.

This module provides the main CLI entry point and assembles all commands.

Commands:
- discover: List LocalSend devices on the local network
- send: Send files to a LocalSend device
- config: Show or update the saved configuration
"""

from __future__ import annotations

import logging

import click

from lansend.client.cli.config import (
    get_config_dir,
    get_config_file,
    get_sender_config,
    load_config,
    save_config,
)
from lansend.client.cli.discover import discover
from lansend.client.cli.send import send
from lansend.client.cli.settings import config_cmd


def setup_logging(verbose: bool) -> None:
    """Route lansend logs to stderr (DEBUG when verbose, WARNING otherwise)."""
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))

    lansend_logger = logging.getLogger("lansend")
    for existing in lansend_logger.handlers[:]:
        lansend_logger.removeHandler(existing)
    lansend_logger.addHandler(handler)
    lansend_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    lansend_logger.propagate = False


@click.group()
@click.version_option(package_name="lansend")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logs.")
def cli(verbose: bool) -> None:
    """lansend - Send files to LocalSend devices on your network."""
    setup_logging(verbose)


cli.add_command(discover)
cli.add_command(send)
cli.add_command(config_cmd)


def main() -> None:
    """Entry point for the CLI."""
    cli()


__all__ = [
    # Main entry points
    "cli",
    "main",
    # Config utilities
    "get_config_dir",
    "get_config_file",
    "get_sender_config",
    "load_config",
    "save_config",
]
