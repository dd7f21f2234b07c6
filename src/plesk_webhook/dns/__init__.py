"""DNS provider factory — build the configured provider implementation."""

from __future__ import annotations

from plesk_webhook.config import AppConfig
from plesk_webhook.dns.base import DnsProvider, DnsProviderError
from plesk_webhook.dns.plesk import PleskDnsProvider

__all__ = ["DnsProvider", "DnsProviderError", "PleskDnsProvider", "get_dns_provider"]


def get_dns_provider(config: AppConfig) -> DnsProvider:
    """Instantiate the Plesk DNS provider from configuration.

    Args:
        config: Application configuration.

    Returns:
        A configured DnsProvider instance.
    """
    for name, value in (
        ("PLESK_URL", config.plesk_url),
        ("PLESK_SITE_ID", config.plesk_site_id),
        ("PLESK_USERNAME", config.plesk_username),
        ("PLESK_PASSWORD", config.plesk_password),
    ):
        if not value:
            raise ValueError(f"{name} is required for the Plesk DNS provider")

    return PleskDnsProvider(
        url=config.plesk_url,
        site_id=config.plesk_site_id,
        username=config.plesk_username,
        password=config.plesk_password,
    )
