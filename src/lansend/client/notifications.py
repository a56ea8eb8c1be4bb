"""Desktop notifications for transfer outcomes.

Each platform gets a command line built from the notification, run with
subprocess:
- Windows: PowerShell toast
- macOS: osascript
- Linux: notify-send
"""

from __future__ import annotations

import logging
import platform
import subprocess
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto

logger = logging.getLogger(__name__)

APP_NAME = "lansend"

_TOAST_SCRIPT = """
[Windows.UI.Notifications.ToastNotificationManager, Windows.UI.Notifications, ContentType = WindowsRuntime] | Out-Null
$xml = [Windows.UI.Notifications.ToastNotificationManager]::GetTemplateContent([Windows.UI.Notifications.ToastTemplateType]::ToastText02)
$lines = $xml.GetElementsByTagName("text")
$lines.Item(0).AppendChild($xml.CreateTextNode('{title}')) | Out-Null
$lines.Item(1).AppendChild($xml.CreateTextNode('{message}')) | Out-Null
[Windows.UI.Notifications.ToastNotificationManager]::CreateToastNotifier('{app}').Show([Windows.UI.Notifications.ToastNotification]::new($xml))
"""


class NotificationType(Enum):
    """Type of notification."""

    INFO = auto()
    ERROR = auto()


@dataclass
class Notification:
    """A notification to display."""

    title: str
    message: str
    type: NotificationType = NotificationType.INFO


def _windows_command(notification: Notification) -> list[str]:
    # Single quotes are doubled inside PowerShell literals
    script = _TOAST_SCRIPT.format(
        title=notification.title.replace("'", "''"),
        message=notification.message.replace("'", "''"),
        app=APP_NAME,
    )
    return ["powershell", "-ExecutionPolicy", "Bypass", "-Command", script]


def _macos_command(notification: Notification) -> list[str]:
    title = notification.title.replace('"', '\\"')
    message = notification.message.replace('"', '\\"')
    return ["osascript", "-e", f'display notification "{message}" with title "{title}"']


def _linux_command(notification: Notification) -> list[str]:
    urgency = "critical" if notification.type == NotificationType.ERROR else "normal"
    return [
        "notify-send",
        "--urgency", urgency,
        "--app-name", APP_NAME,
        notification.title,
        notification.message,
    ]


COMMAND_BUILDERS: dict[str, Callable[[Notification], list[str]]] = {
    "Windows": _windows_command,
    "Darwin": _macos_command,
    "Linux": _linux_command,
}


def send_notification(notification: Notification) -> bool:
    """Send a system notification.

    Notifications are a convenience: a missing or failing notifier is
    logged and reported as False, never raised.

    Args:
        notification: The notification to send.

    Returns:
        True if the notifier ran successfully.
    """
    system = platform.system()
    builder = COMMAND_BUILDERS.get(system)
    if builder is None:
        logger.warning(f"Notifications not supported on {system}")
        return False

    command = builder(notification)
    kwargs: dict[str, int] = {}
    if system == "Windows":
        kwargs["creationflags"] = getattr(subprocess, "CREATE_NO_WINDOW", 0)

    try:
        subprocess.run(command, capture_output=True, check=True, **kwargs)
    except FileNotFoundError:
        logger.debug(f"{command[0]} not found")
        return False
    except (OSError, subprocess.CalledProcessError) as e:
        logger.debug(f"{system} notification failed: {e}")
        return False
    return True


def notify_transfer_complete(file_count: int, device_alias: str) -> bool:
    """Notify that files were delivered.

    Args:
        file_count: Number of files sent.
        device_alias: Receiving device.
    """
    unit = "file" if file_count == 1 else "files"
    return send_notification(Notification(
        title=f"{APP_NAME} - Transfer Complete",
        message=f"Sent {file_count} {unit} to {device_alias}",
    ))


def notify_transfer_failed(device_alias: str, reason: str) -> bool:
    """Notify that a transfer failed.

    Args:
        device_alias: Receiving device.
        reason: Human-readable failure reason.
    """
    return send_notification(Notification(
        title=f"{APP_NAME} - Transfer Failed",
        message=f"Failed to send files to {device_alias}: {reason}",
        type=NotificationType.ERROR,
    ))
