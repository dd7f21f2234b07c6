"""Serve one WSGI application over plaintext HTTP and TLS at the same time."""

from __future__ import annotations

import logging
import ssl
import threading
from typing import TYPE_CHECKING

from werkzeug.serving import BaseWSGIServer, make_server

if TYPE_CHECKING:
    from flask import Flask

logger = logging.getLogger(__name__)


class ListenerError(RuntimeError):
    """A listener stopped without being asked to."""


class DualListener:
    """Run the same app on an HTTP and an HTTPS port.

    Both listeners live and die together: when either accept loop ends on its
    own, :meth:`wait` shuts the other one down and raises :class:`ListenerError`.
    """

    def __init__(
        self,
        app: Flask,
        host: str,
        http_port: int,
        https_port: int,
        ssl_context: ssl.SSLContext,
    ) -> None:
        self._app = app
        self._host = host
        self._ports = {"http": http_port, "https": https_port}
        self._ssl_context = ssl_context
        self._servers: dict[str, BaseWSGIServer] = {}
        self._threads: list[threading.Thread] = []
        self._exited = threading.Event()
        self._failed: list[str] = []
        self._serving: set[str] = set()
        self._stopping = False
        self._lock = threading.RLock()

    @property
    def http_port(self) -> int:
        return self._servers["http"].server_port

    @property
    def https_port(self) -> int:
        return self._servers["https"].server_port

    def start(self) -> None:
        """Bind both ports and start serving in background threads.

        Raises:
            ListenerError: If either port cannot be bound. Nothing is left running.
        """
        if self._stopping:
            return
        for name, port in self._ports.items():
            ssl_context = self._ssl_context if name == "https" else None
            try:
                self._servers[name] = make_server(self._host, port, self._app, threaded=True, ssl_context=ssl_context)
            # werkzeug reports bind errors on stderr and calls sys.exit(1)
            except (OSError, SystemExit) as exc:
                for server in self._servers.values():
                    server.server_close()
                self._servers.clear()
                raise ListenerError(f"Cannot bind {name.upper()} listener on {self._host}:{port}") from exc

        for name, server in self._servers.items():
            thread = threading.Thread(target=self._run, args=(name, server), name=f"{name}-listener", daemon=True)
            self._threads.append(thread)
            thread.start()
            logger.info("Serving %s on %s:%d", name.upper(), self._host, server.server_port)

    def _run(self, name: str, server: BaseWSGIServer) -> None:
        try:
            with self._lock:
                if self._stopping:
                    return
                self._serving.add(name)
            server.serve_forever()
        except Exception:
            logger.exception("%s listener crashed", name.upper())
        finally:
            with self._lock:
                if not self._stopping:
                    self._failed.append(name)
            self._exited.set()

    def wait(self) -> None:
        """Block until a listener exits, then stop the other.

        Raises:
            ListenerError: If the exit was not caused by :meth:`stop`.
        """
        self._exited.wait()
        with self._lock:
            failed = list(self._failed)
        self.stop()
        if failed:
            raise ListenerError(f"{', '.join(n.upper() for n in failed)} listener stopped unexpectedly")

    def stop(self) -> None:
        """Shut down both listeners and wait for their threads. Safe to call twice."""
        with self._lock:
            if self._stopping:
                return
            self._stopping = True
            serving = set(self._serving)
        # shutdown() only returns once serve_forever has run, so close idle servers instead
        for name, server in self._servers.items():
            if name in serving:
                server.shutdown()
            else:
                server.server_close()
        for thread in self._threads:
            if thread.ident is not None:
                thread.join()
        self._exited.set()
        logger.info("Listeners stopped")

    def serve_forever(self) -> None:
        self.start()
        self.wait()
