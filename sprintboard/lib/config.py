"""
Configuration loader for sprintboard.

Settings come from an optional sprintboard.env file, overridden by
SPRINTBOARD_* environment variables.
"""

from dataclasses import dataclass
from pathlib import Path

from . import envparse

ENV_PREFIX = "SPRINTBOARD_"
DEFAULT_CONFIG_FILE = "sprintboard.env"

DEFAULT_API_URL = "http://localhost:3001"
DEFAULT_API_TIMEOUT = 15
DEFAULT_CHAT_COMMAND = "claude --print"
DEFAULT_CHAT_TIMEOUT = 300


class ConfigError(Exception):
    """Configuration could not be loaded."""


@dataclass
class DashboardConfig:
    """Runtime settings for the backend client and chat."""
    api_url: str
    api_token: str | None
    api_timeout: float
    user_id: str | None
    chat_dir: Path
    chat_command: str
    chat_timeout: int
    desktop_notify: bool


def _as_number(env: dict, key: str, default, cast):
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        value = cast(raw)
    except ValueError:
        raise ConfigError(f"{key} must be a number, got '{raw}'") from None
    if value <= 0:
        raise ConfigError(f"{key} must be positive, got '{raw}'")
    return value


def load_config(config_path: Path | None = None, environ=None) -> DashboardConfig:
    """Load DashboardConfig from file plus environment.

    Args:
        config_path: Explicit env file. When omitted, ./sprintboard.env is
            used if it exists.
        environ: Environment mapping (defaults to os.environ)
    """
    env = {}
    if config_path is not None:
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")
        env.update(_load_file(config_path))
    elif Path(DEFAULT_CONFIG_FILE).exists():
        env.update(_load_file(Path(DEFAULT_CONFIG_FILE)))

    try:
        env.update(envparse.load_prefixed_environ(ENV_PREFIX, environ))
    except ValueError as e:
        raise ConfigError(str(e)) from None

    chat_dir = env.get("CHAT_DIR") or str(Path.home() / ".sprintboard" / "chats")

    return DashboardConfig(
        api_url=(env.get("API_URL") or DEFAULT_API_URL).rstrip("/"),
        api_token=env.get("API_TOKEN") or None,
        api_timeout=_as_number(env, "API_TIMEOUT", DEFAULT_API_TIMEOUT, float),
        user_id=env.get("USER_ID") or None,
        chat_dir=Path(chat_dir).expanduser(),
        chat_command=env.get("CHAT_COMMAND") or DEFAULT_CHAT_COMMAND,
        chat_timeout=_as_number(env, "CHAT_TIMEOUT", DEFAULT_CHAT_TIMEOUT, int),
        desktop_notify=env.get("DESKTOP_NOTIFY", "false").lower() == "true",
    )


def _load_file(path: Path) -> dict:
    try:
        return envparse.load_env(str(path))
    except ValueError as e:
        raise ConfigError(f"{path}: {e}") from None
