"""Challenge dispatch — tie one Present/CleanUp lifecycle to one provider record."""

from __future__ import annotations

import logging

from plesk_webhook.cache import ChallengeCache
from plesk_webhook.dns.base import DnsProvider, DnsProviderError
from plesk_webhook.models import (
    INVALID_ACTION,
    RECORD_NOT_CACHED,
    ChallengeAction,
    ChallengeRequest,
    ChallengeResponse,
)

logger = logging.getLogger(__name__)


class ChallengeDispatcher:
    """Map each challenge request to exactly one response.

    Only one challenge is expected in flight at a time: the record id created
    by Present is kept in ``cache`` until the matching CleanUp removes it.
    """

    def __init__(self, provider: DnsProvider, cache: ChallengeCache) -> None:
        self._provider = provider
        self._cache = cache

    def dispatch(self, request: ChallengeRequest) -> ChallengeResponse:
        if request.action == ChallengeAction.PRESENT:
            return self._present(request)
        if request.action == ChallengeAction.CLEANUP:
            return self._cleanup(request)
        logger.warning("Rejecting challenge with unsupported action %r", request.action)
        return ChallengeResponse.failure(INVALID_ACTION)

    def _present(self, request: ChallengeRequest) -> ChallengeResponse:
        # Lock spans the provider call so two Presents cannot both create a record
        with self._cache.locked():
            if self._cache.get() is not None:
                logger.info("Challenge already present in cache for %s", request.resolved_fqdn)
                return ChallengeResponse.ok()

            logger.info("Adding DNS challenge for %s", request.resolved_fqdn)
            try:
                record_id = self._provider.add_challenge(request.key)
            except DnsProviderError as exc:
                logger.error("Failed to add DNS challenge for %s: %s", request.resolved_fqdn, exc)
                return ChallengeResponse.failure(str(exc))
            self._cache.set(record_id)

        return ChallengeResponse.ok()

    def _cleanup(self, request: ChallengeRequest) -> ChallengeResponse:
        with self._cache.locked():
            record_id = self._cache.take()
            if record_id is None:
                logger.warning("Record ID not found in cache, cannot clean up %s", request.resolved_fqdn)
                return ChallengeResponse.failure(RECORD_NOT_CACHED)

            # The slot stays cleared even if removal fails
            logger.info("Removing DNS challenge record %s for %s", record_id, request.resolved_fqdn)
            try:
                self._provider.remove_challenge(record_id)
            except DnsProviderError as exc:
                logger.error("Failed to remove DNS challenge record %s: %s", record_id, exc)
                return ChallengeResponse.failure(str(exc))

        return ChallengeResponse.ok()
