"""Connection settings for the download client."""

import logging
import os
import tomllib
from dataclasses import dataclass
from getpass import getpass, getuser
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "~/.config/dcli/config.toml"
TRUTHY = ("1", "true", "yes", "on")


@dataclass
class Settings:
    server: str
    username: str
    password: str
    insecure: bool = False


def load_config(path: str | Path | None = None) -> dict[str, Any]:
    """Load the TOML config file, returning {} if it doesn't exist."""
    if path is None:
        path = os.environ.get("DCLI_CONFIG", DEFAULT_CONFIG_FILE)
    config_path = Path(os.path.expanduser(path))
    if not config_path.exists():
        logger.debug(f"Config file {config_path} not found")
        return {}
    with open(config_path, "rb") as f:
        config = tomllib.load(f)
    logger.debug(f"Loaded config from {config_path}")
    return config


def as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in TRUTHY


def resolve_settings(args, config: dict[str, Any] | None = None) -> Settings:
    """Resolve connection settings from args.

    Resolution order for each setting:
    1. command-line option
    2. $DCLI_SERVER, $DCLI_USERNAME, $DCLI_PASSWORD, $DCLI_INSECURE
    3. config file (~/.config/dcli/config.toml, or $DCLI_CONFIG)
    4. fallback: current user name, password prompt, secure TLS
    """
    if config is None:
        config = load_config()

    def lookup(name: str) -> Any:
        value = getattr(args, name, None)
        if value:
            return value
        value = os.environ.get(f"DCLI_{name.upper()}")
        if value:
            return value
        return config.get(name)

    server = lookup("server") or ""
    username = lookup("username") or getuser()
    password = lookup("password")
    if not password:
        password = getpass(f"Password for {username}: ")
    insecure = lookup("insecure")
    return Settings(
        server=server,
        username=username,
        password=password,
        insecure=as_bool(insecure) if insecure is not None else False,
    )
