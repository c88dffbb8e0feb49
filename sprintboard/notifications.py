"""
User-visible notifications for sprintboard.

Every failure or success the board and chat report ends up here instead of
as an exception crossing component boundaries. Notifications are logged,
kept in memory for the caller, forwarded to an optional sink (the CLI prints
them), and optionally sent to the desktop through notify-send.
"""

import logging
import shutil
import subprocess
from dataclasses import dataclass
from typing import Callable

from rich.markup import escape

logger = logging.getLogger(__name__)


INFO = "info"
SUCCESS = "success"
ERROR = "error"
VALID_LEVELS = (INFO, SUCCESS, ERROR)

# notify-send urgency per level
_URGENCY = {INFO: "low", SUCCESS: "normal", ERROR: "critical"}

MAX_NOTIFICATION_LENGTH = 200


@dataclass
class Notification:
    title: str
    message: str
    level: str = INFO


class Notifier:
    """Collects notifications and forwards them to a sink."""

    def __init__(self, sink: Callable[[Notification], None] | None = None, desktop: bool = False):
        self.sink = sink
        self.desktop = desktop
        self.history: list[Notification] = []

    def notify(self, title: str, message: str, level: str = INFO) -> Notification:
        if level not in VALID_LEVELS:
            logger.warning(f"Invalid notification level '{level}', using '{INFO}'")
            level = INFO

        notification = Notification(title=title, message=message, level=level)
        self.history.append(notification)

        log = logger.warning if level == ERROR else logger.info
        log(f"[NOTIFY] {title}: {message}")

        if self.sink:
            self.sink(notification)
        if self.desktop:
            send_desktop(notification)
        return notification

    def success(self, title: str, message: str) -> Notification:
        return self.notify(title, message, SUCCESS)

    def error(self, title: str, message: str) -> Notification:
        return self.notify(title, message, ERROR)

    def info(self, title: str, message: str) -> Notification:
        return self.notify(title, message, INFO)


def send_desktop(notification: Notification) -> None:
    """Send a notification through notify-send if it is installed."""
    if not shutil.which("notify-send"):
        logger.debug("notify-send not found, skipping desktop notification")
        return

    message = notification.message
    if len(message) > MAX_NOTIFICATION_LENGTH:
        message = message[:MAX_NOTIFICATION_LENGTH] + "..."

    try:
        result = subprocess.run([
            "notify-send",
            "--urgency", _URGENCY[notification.level],
            "--app-name", "sprintboard",
            notification.title,
            message,
        ], capture_output=True, text=True, timeout=5)

        if result.returncode != 0:
            logger.warning(f"notify-send failed (exit {result.returncode}): {result.stderr}")
    except subprocess.TimeoutExpired:
        logger.warning("notify-send timed out")
    except OSError as e:
        logger.warning(f"Failed to run notify-send: {e}")


_CONSOLE_STYLES = {INFO: "cyan", SUCCESS: "green", ERROR: "red"}


def console_sink(console) -> Callable[[Notification], None]:
    """Return a sink that prints notifications to a rich console."""
    def _print(notification: Notification) -> None:
        style = _CONSOLE_STYLES[notification.level]
        console.print(
            f"[{style}]{escape(notification.title)}:[/{style}] {escape(notification.message)}"
        )
    return _print
