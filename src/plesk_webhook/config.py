"""Configuration loading and validation from environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

_DEFAULT_SOLVER_VERSION = "v1"
_DEFAULT_BIND_ADDRESS = "0.0.0.0"
_DEFAULT_HTTP_PORT = 8080
_DEFAULT_HTTPS_PORT = 8443
_DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class AppConfig:
    """Application configuration loaded from environment variables."""

    plesk_url: str
    plesk_site_id: str
    plesk_username: str
    plesk_password: str
    group_name: str
    solver_name: str
    solver_version: str = _DEFAULT_SOLVER_VERSION
    bind_address: str = _DEFAULT_BIND_ADDRESS
    http_port: int = _DEFAULT_HTTP_PORT
    https_port: int = _DEFAULT_HTTPS_PORT
    extra_tls_names: tuple[str, ...] = ()
    log_level: str = _DEFAULT_LOG_LEVEL


def _require_env(name: str) -> str:
    value = os.environ.get(name)
    if not value:
        raise ValueError(f"Required environment variable {name} is not set")
    return value


def _port_env(name: str, default: int) -> int:
    raw = os.environ.get(name, str(default))
    try:
        port = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got: {raw!r}")
    if not 1 <= port <= 65535:
        raise ValueError(f"{name} must be between 1 and 65535, got: {port}")
    return port


def load_config() -> AppConfig:
    """Load and validate application configuration from environment variables."""
    plesk_url = _require_env("PLESK_URL")
    plesk_site_id = _require_env("PLESK_SITE_ID")
    plesk_username = _require_env("PLESK_USERNAME")
    plesk_password = _require_env("PLESK_PASSWORD")
    group_name = _require_env("GROUP_NAME")
    solver_name = _require_env("SOLVER_NAME")
    solver_version = os.environ.get("SOLVER_VERSION") or _DEFAULT_SOLVER_VERSION
    bind_address = os.environ.get("BIND_ADDRESS") or _DEFAULT_BIND_ADDRESS

    http_port = _port_env("HTTP_PORT", _DEFAULT_HTTP_PORT)
    https_port = _port_env("HTTPS_PORT", _DEFAULT_HTTPS_PORT)
    if http_port == https_port:
        raise ValueError(f"HTTP_PORT and HTTPS_PORT must differ, both are {http_port}")

    raw_sans = os.environ.get("TLS_EXTRA_SANS", "")
    extra_tls_names = tuple(name.strip() for name in raw_sans.split(",") if name.strip())

    log_level = os.environ.get("LOG_LEVEL", _DEFAULT_LOG_LEVEL).upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ValueError(f"LOG_LEVEL must be a standard logging level, got: {log_level!r}")

    return AppConfig(
        plesk_url=plesk_url,
        plesk_site_id=plesk_site_id,
        plesk_username=plesk_username,
        plesk_password=plesk_password,
        group_name=group_name,
        solver_name=solver_name,
        solver_version=solver_version,
        bind_address=bind_address,
        http_port=http_port,
        https_port=https_port,
        extra_tls_names=extra_tls_names,
        log_level=log_level,
    )
