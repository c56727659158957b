"""Settings management for twch."""

import json
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from appdirs import user_config_dir
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

APP_NAME = "twch"
APP_AUTHOR = "twch"

DEFAULT_HEARTBEAT_INTERVAL = 10  # seconds
DEFAULT_HTTP_ADDR = "0.0.0.0:8080"


class ConfigError(Exception):
    """Settings are missing or invalid."""


def get_config_dir() -> Path:
    """Get the configuration directory."""
    return Path(user_config_dir(APP_NAME, APP_AUTHOR))


def strip_oauth_prefix(token: str) -> str:
    """Tokens copied from chat tools often carry an ``oauth:`` prefix."""
    return token.removeprefix("oauth:")


@dataclass
class Settings:
    """Application settings."""

    client_id: str = ""
    oauth_token: str = ""
    heartbeat_interval: int = DEFAULT_HEARTBEAT_INTERVAL  # seconds
    http_addr: str = DEFAULT_HTTP_ADDR

    @classmethod
    def load(
        cls,
        path: Path | None = None,
        env: Mapping[str, str] | None = None,
        use_dotenv: bool = True,
        use_keyring: bool = True,
    ) -> "Settings":
        """Load settings.

        Values come from ``settings.json`` in the config dir, then a ``.env``
        file, then the environment. A token missing from all of those is
        looked up in the system keyring.

        Raises:
            ConfigError: If a value is present but invalid.
        """
        if path is None:
            path = get_config_dir() / "settings.json"

        settings = cls._from_file(path)

        if env is None:
            if use_dotenv:
                load_dotenv()
            env = os.environ

        if env.get("CLIENT_ID"):
            settings.client_id = env["CLIENT_ID"]
        if env.get("OAUTH_TOKEN"):
            settings.oauth_token = env["OAUTH_TOKEN"]
        if env.get("HEARTBEAT_INTERVAL"):
            settings.heartbeat_interval = cls._parse_interval(env["HEARTBEAT_INTERVAL"])
        if env.get("HTTP_ADDR"):
            settings.http_addr = env["HTTP_ADDR"]

        if not settings.oauth_token and use_keyring:
            from .credential_store import KEY_OAUTH_TOKEN, get_secret

            settings.oauth_token = get_secret(KEY_OAUTH_TOKEN) or ""

        settings.oauth_token = strip_oauth_prefix(settings.oauth_token)
        # Validate early so a bad address fails at startup
        settings.http_host_port()
        return settings

    @classmethod
    def _from_file(cls, path: Path) -> "Settings":
        if not path.exists():
            return cls()

        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable settings file {path}: {e}")
            return cls()

        if not isinstance(data, dict):
            logger.warning(f"Ignoring settings file {path}: not a JSON object")
            return cls()
        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict) -> "Settings":
        """Create Settings from a dictionary with validation."""
        settings = cls()
        settings.client_id = str(data.get("client_id", settings.client_id))
        settings.oauth_token = str(data.get("oauth_token", settings.oauth_token))
        settings.http_addr = str(data.get("http_addr", settings.http_addr))

        interval = data.get("heartbeat_interval")
        if isinstance(interval, int) and not isinstance(interval, bool) and interval > 0:
            settings.heartbeat_interval = interval
        elif interval is not None:
            logger.warning(f"Ignoring invalid heartbeat_interval in settings: {interval!r}")
        return settings

    @staticmethod
    def _parse_interval(value: str) -> int:
        try:
            interval = int(value)
        except ValueError:
            raise ConfigError(f"HEARTBEAT_INTERVAL must be an integer, got {value!r}") from None
        if interval <= 0:
            raise ConfigError(f"HEARTBEAT_INTERVAL must be positive, got {interval}")
        return interval

    def http_host_port(self) -> tuple[str, int]:
        """Split ``http_addr`` into host and port."""
        host, sep, port = self.http_addr.rpartition(":")
        if not sep or not port.isdigit():
            raise ConfigError(f"HTTP_ADDR must be host:port, got {self.http_addr!r}")
        return host or "0.0.0.0", int(port)

    def require_auth(self) -> None:
        """Raise unless API credentials are configured."""
        missing = [
            name
            for name, value in (("CLIENT_ID", self.client_id), ("OAUTH_TOKEN", self.oauth_token))
            if not value
        ]
        if missing:
            raise ConfigError(f"Missing required setting(s): {', '.join(missing)}")
