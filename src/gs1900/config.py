"""Load switch connection settings from gs1900.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from gs1900.errors import PreconditionError


@dataclass
class DeviceConfig:
    """Address and credentials of one switch."""

    address: str
    username: str
    password: str = ""
    ssh_port: int = 22


@dataclass
class SessionConfig:
    """SSH session timing.

    read_timeout is the silence (in seconds) after which the response
    collector inspects the last line of output.
    """

    read_timeout: float = 1.0
    connect_timeout: float = 10.0


@dataclass
class WebConfig:
    """HTTP control plane settings."""

    enabled: bool = True
    timeout: float = 10.0
    login_delay: float = 0.5


@dataclass
class Config:
    """Full configuration loaded from gs1900.toml."""

    device: DeviceConfig
    session: SessionConfig = field(default_factory=SessionConfig)
    web: WebConfig = field(default_factory=WebConfig)


def _build_device(data: dict) -> DeviceConfig:
    """Build device config from parsed TOML data."""
    section = data.get("device", {})
    for key in ("address", "username"):
        if not section.get(key):
            raise PreconditionError(f"[device] {key} is required")
    return DeviceConfig(
        address=section["address"],
        username=section["username"],
        password=section.get("password", ""),
        ssh_port=section.get("ssh_port", 22),
    )


def _build_session(data: dict) -> SessionConfig:
    section = data.get("session", {})
    return SessionConfig(
        read_timeout=float(section.get("read_timeout", 1.0)),
        connect_timeout=float(section.get("connect_timeout", 10.0)),
    )


def _build_web(data: dict) -> WebConfig:
    section = data.get("web", {})
    return WebConfig(
        enabled=section.get("enabled", True),
        timeout=float(section.get("timeout", 10.0)),
        login_delay=float(section.get("login_delay", 0.5)),
    )


def load_config(config_path: Path | str | None = None) -> Config:
    """Load configuration from a TOML file.

    If config_path is None, looks for gs1900.toml in the current
    directory.

    Raises:
        PreconditionError: If the device address or username is missing.
    """
    if config_path is None:
        config_path = Path("gs1900.toml")
    else:
        config_path = Path(config_path)

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    return Config(
        device=_build_device(data),
        session=_build_session(data),
        web=_build_web(data),
    )
