"""Shared test fixtures for the Plesk webhook solver."""

import pytest

from plesk_webhook.config import AppConfig

_REQUIRED_ENV = {
    "PLESK_URL": "https://plesk.example.com:8443",
    "PLESK_SITE_ID": "42",
    "PLESK_USERNAME": "admin",
    "PLESK_PASSWORD": "s3cret",
    "GROUP_NAME": "acme.example.com",
    "SOLVER_NAME": "plesk",
}

_OPTIONAL_ENV = (
    "SOLVER_VERSION",
    "BIND_ADDRESS",
    "HTTP_PORT",
    "HTTPS_PORT",
    "TLS_EXTRA_SANS",
    "LOG_LEVEL",
)


@pytest.fixture
def required_env(monkeypatch):
    """Set every required variable and clear the optional ones."""
    for name, value in _REQUIRED_ENV.items():
        monkeypatch.setenv(name, value)
    for name in _OPTIONAL_ENV:
        monkeypatch.delenv(name, raising=False)
    return dict(_REQUIRED_ENV)


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig(
        plesk_url="https://plesk.example.com:8443",
        plesk_site_id="42",
        plesk_username="admin",
        plesk_password="s3cret",
        group_name="acme.example.com",
        solver_name="plesk",
    )
