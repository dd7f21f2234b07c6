"""Process entry point — wire configuration, provider, dispatcher and listeners."""

from __future__ import annotations

import logging
import signal
import sys

from plesk_webhook.cache import ChallengeCache
from plesk_webhook.config import load_config
from plesk_webhook.dispatcher import ChallengeDispatcher
from plesk_webhook.dns import get_dns_provider
from plesk_webhook.listener import DualListener, ListenerError
from plesk_webhook.server import create_app
from plesk_webhook.tls import build_server_context, generate_self_signed, identity_hostnames

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str) -> None:
    """Configure root logging; werkzeug's per-request lines are replaced by the app's."""
    logging.basicConfig(level=level, format=_LOG_FORMAT, stream=sys.stderr)
    logging.getLogger("werkzeug").setLevel(logging.WARNING)


def main() -> int:
    try:
        config = load_config()
    except ValueError as exc:
        configure_logging("INFO")
        logger.error("Invalid configuration: %s", exc)
        return 2

    configure_logging(config.log_level)

    hostnames = identity_hostnames(config)
    identity = generate_self_signed(hostnames)
    logger.info("Generated self-signed certificate for %s", ", ".join(hostnames))

    with get_dns_provider(config) as provider:
        dispatcher = ChallengeDispatcher(provider, ChallengeCache())
        app = create_app(config, dispatcher)
        listener = DualListener(
            app,
            host=config.bind_address,
            http_port=config.http_port,
            https_port=config.https_port,
            ssl_context=build_server_context(identity),
        )
        signal.signal(signal.SIGTERM, lambda signum, frame: listener.stop())

        try:
            listener.serve_forever()
        except ListenerError as exc:
            logger.error("Webhook server failed: %s", exc)
            return 1
        except KeyboardInterrupt:
            logger.info("Interrupted, shutting down")
            listener.stop()

    return 0


if __name__ == "__main__":
    sys.exit(main())
