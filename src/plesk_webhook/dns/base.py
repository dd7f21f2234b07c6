"""Abstract base class for DNS providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Self


class DnsProviderError(Exception):
    """A provider call failed.

    ``str(error)`` is the human-readable message forwarded to cert-manager.
    ``code`` is the provider's own error code, if it reported one.
    """

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code


class DnsProvider(ABC):
    """Interface for DNS providers that manage ACME DNS-01 challenge TXT records."""

    def close(self) -> None:
        """Release resources. Override in subclasses that hold open connections."""

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    @abstractmethod
    def add_challenge(self, token: str) -> str:
        """Create the challenge TXT record.

        Args:
            token: TXT record value (the ACME challenge key).

        Returns:
            The provider-assigned record id, needed to remove the record later.

        Raises:
            DnsProviderError: If the provider rejects or cannot be reached.
        """

    @abstractmethod
    def remove_challenge(self, record_id: str) -> None:
        """Delete a challenge TXT record created by :meth:`add_challenge`.

        Raises:
            DnsProviderError: If the provider rejects or cannot be reached.
        """
