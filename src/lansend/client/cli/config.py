"""Persisted settings for the lansend CLI.

Settings live in ~/.lansend/config.json. Recognized keys are `alias`,
`scan_timeout` and `max_workers`; anything else is kept but ignored.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import click

from lansend.core.config import SenderConfig

CONFIG_FILE_NAME = "config.json"


def get_config_dir() -> Path:
    """Get the lansend settings directory (~/.lansend)."""
    return Path.home() / ".lansend"


def get_config_file() -> Path:
    """Get the path to the settings file."""
    return get_config_dir() / CONFIG_FILE_NAME


def load_config() -> dict[str, Any]:
    """Read saved settings, or an empty dict if none were saved.

    Raises:
        click.ClickException: If the file is not a JSON object.
    """
    config_file = get_config_file()
    if not config_file.exists():
        return {}
    try:
        data = json.loads(config_file.read_text())
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Invalid settings file {config_file}: {e}") from e
    if not isinstance(data, dict):
        raise click.ClickException(f"Invalid settings file {config_file}: not an object")
    return data


def save_config(config: dict[str, Any]) -> None:
    """Write settings, creating the directory if needed."""
    config_file = get_config_file()
    config_file.parent.mkdir(parents=True, exist_ok=True)
    config_file.write_text(json.dumps(config, indent=2))


def get_sender_config() -> SenderConfig:
    """Build the runtime configuration from saved settings.

    Raises:
        click.ClickException: If a saved value is invalid.
    """
    try:
        return SenderConfig.from_mapping(load_config())
    except (TypeError, ValueError) as e:
        raise click.ClickException(f"Invalid setting in {get_config_file()}: {e}") from e
