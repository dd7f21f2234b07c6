"""Tests for plesk_webhook.listener using real sockets on ephemeral ports."""

import socket
import ssl
import threading
from unittest.mock import MagicMock, patch

import httpx
import pytest

from plesk_webhook.cache import ChallengeCache
from plesk_webhook.dispatcher import ChallengeDispatcher
from plesk_webhook.dns.base import DnsProvider
from plesk_webhook.listener import DualListener, ListenerError
from plesk_webhook.server import create_app
from plesk_webhook.tls import build_server_context, generate_self_signed

_BASE_PATH = "/apis/acme.example.com/v1"


@pytest.fixture(scope="module")
def identity():
    return generate_self_signed(["localhost", "plesk.cert-manager.svc.cluster.local"])


@pytest.fixture
def listener(app_config, identity):
    provider = MagicMock(spec=DnsProvider)
    app = create_app(app_config, ChallengeDispatcher(provider, ChallengeCache()))
    listener = DualListener(
        app,
        host="127.0.0.1",
        http_port=0,
        https_port=0,
        ssl_context=build_server_context(identity),
    )
    yield listener
    listener.stop()


def _client_context(identity) -> ssl.SSLContext:
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    context.load_verify_locations(cadata=identity.cert_pem.decode())
    return context


class TestDualListener:
    def test_serves_plaintext(self, listener):
        listener.start()

        resp = httpx.get(f"http://127.0.0.1:{listener.http_port}{_BASE_PATH}", trust_env=False)

        assert resp.status_code == 200
        assert resp.json()["response"]["status"]["code"] == 501

    def test_tls_handshake_with_trusted_certificate(self, listener, identity):
        listener.start()
        context = _client_context(identity)

        with socket.create_connection(("127.0.0.1", listener.https_port), timeout=5) as sock:
            with context.wrap_socket(sock, server_hostname="localhost") as tls:
                assert tls.version() is not None
                peer = tls.getpeercert()

        assert ("DNS", "localhost") in peer["subjectAltName"]

    def test_serves_same_routes_over_tls(self, listener, identity):
        listener.start()

        with httpx.Client(verify=_client_context(identity), trust_env=False) as client:
            resp = client.get(f"https://localhost:{listener.https_port}{_BASE_PATH}")

        assert resp.status_code == 200
        assert resp.json()["response"]["uid"] == "1"

    def test_untrusted_client_fails_handshake(self, listener):
        listener.start()
        context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
        context.load_default_certs()

        with socket.create_connection(("127.0.0.1", listener.https_port), timeout=5) as sock:
            with pytest.raises(ssl.SSLCertVerificationError):
                context.wrap_socket(sock, server_hostname="localhost")

    def test_stop_ends_wait_without_error(self, listener):
        listener.start()
        listener.stop()

        listener.wait()

    def test_stop_while_serve_threads_not_yet_running(self, listener):
        with patch("plesk_webhook.listener.threading.Thread.start"):
            listener.start()
        http_port = listener.http_port

        stopper = threading.Thread(target=listener.stop)
        stopper.start()
        stopper.join(timeout=5)

        assert not stopper.is_alive()
        listener.wait()
        with pytest.raises(OSError):
            socket.create_connection(("127.0.0.1", http_port), timeout=1).close()

    def test_stop_before_start_unblocks_wait(self, listener):
        listener.stop()
        listener.start()

        waiter = threading.Thread(target=listener.wait)
        waiter.start()
        waiter.join(timeout=5)

        assert not waiter.is_alive()
        assert listener._servers == {}

    def test_unexpected_exit_stops_other_listener(self, listener):
        listener.start()
        https_port = listener.https_port

        # simulate the plaintext accept loop dying on its own
        listener._servers["http"].shutdown()

        with pytest.raises(ListenerError, match="HTTP listener stopped unexpectedly"):
            listener.wait()

        with pytest.raises(OSError):
            socket.create_connection(("127.0.0.1", https_port), timeout=1).close()

    def test_bind_failure_raises(self, app_config, identity):
        with socket.socket() as blocker:
            blocker.bind(("127.0.0.1", 0))
            blocker.listen()
            busy_port = blocker.getsockname()[1]

            listener = DualListener(
                MagicMock(),
                host="127.0.0.1",
                http_port=0,
                https_port=busy_port,
                ssl_context=build_server_context(identity),
            )

            with pytest.raises(ListenerError, match="Cannot bind HTTPS listener"):
                listener.start()
