from __future__ import annotations

import http
import json
import logging
import threading
from typing import Callable, Optional
from urllib.parse import urlsplit

from websockets.exceptions import ConnectionClosed
from websockets.http11 import Request, Response
from websockets.sync.server import Server, ServerConnection, serve

from pomodoro import TimerSnapshot

from .config import HEALTHZ_PATH, STATE_PATH, StatusServerConfig
from .events import EVENT_HELLO, make_event, snapshot_payload


class StatusServer:
    """Pushes timer events to websocket clients and answers state polls.

    A client connecting to the websocket path first receives a `hello`
    event carrying the current snapshot, then every published event in
    order. `/state` returns the same snapshot as plain JSON for pollers
    such as status bars.
    """

    def __init__(
        self,
        config: StatusServerConfig,
        snapshot_fn: Callable[[], TimerSnapshot],
        logger: Optional[logging.Logger] = None,
    ):
        self._config = config
        self._snapshot_fn = snapshot_fn
        self._logger = logger or logging.getLogger("status_server")
        self._server: Optional[Server] = None
        self._thread: Optional[threading.Thread] = None
        self._clients: set[ServerConnection] = set()
        # Held while sending, so hello always precedes published events.
        self._clients_lock = threading.Lock()

    def start(self) -> None:
        """Bind the listening socket and serve connections on a daemon thread.

        Raises OSError when the address cannot be bound.
        """
        if self._server is not None:
            self._logger.warning("Status server is already running")
            return

        self._server = serve(
            self._handler,
            self._config.host,
            self._config.port,
            process_request=self._process_request,
            logger=self._logger,
        )
        self._thread = threading.Thread(
            target=self._server.serve_forever,
            daemon=True,
            name="status-server",
        )
        self._thread.start()
        self._logger.info(
            "Status server listening on ws://%s:%d%s",
            self._config.host,
            self._config.port,
            self._config.websocket_path,
        )

    def stop(self, timeout_seconds: float = 5.0) -> None:
        server = self._server
        if server is None:
            return

        server.shutdown()
        with self._clients_lock:
            clients = tuple(self._clients)
            self._clients.clear()
        for client in clients:
            client.close(code=1001, reason="Server shutting down")

        if self._thread is not None:
            self._thread.join(timeout=timeout_seconds)
            if self._thread.is_alive():
                self._logger.error(
                    "Status server thread did not stop within %.1fs",
                    timeout_seconds,
                )
        self._server = None
        self._thread = None

    def publish_snapshot(self, event_type: str, snapshot: TimerSnapshot, **payload) -> None:
        self.publish(event_type, **snapshot_payload(snapshot), **payload)

    def publish(self, event_type: str, **payload) -> None:
        message = make_event(event_type, **payload)
        with self._clients_lock:
            for client in tuple(self._clients):
                try:
                    client.send(message)
                except ConnectionClosed as error:
                    self._clients.discard(client)
                    self._logger.debug("Dropped status client %s: %s", client.remote_address, error)

    def _handler(self, connection: ServerConnection) -> None:
        hello = make_event(EVENT_HELLO, **snapshot_payload(self._snapshot_fn()))
        with self._clients_lock:
            try:
                connection.send(hello)
            except ConnectionClosed:
                return
            self._clients.add(connection)

        self._logger.info("Status client connected: %s", connection.remote_address)
        try:
            for message in connection:
                self._logger.debug("Ignoring message from status client: %r", message)
        except ConnectionClosed as error:
            self._logger.debug("Status client closed abnormally: %s", error)
        finally:
            with self._clients_lock:
                self._clients.discard(connection)
            self._logger.info("Status client disconnected: %s", connection.remote_address)

    def _process_request(
        self,
        connection: ServerConnection,
        request: Request,
    ) -> Optional[Response]:
        path = urlsplit(request.path).path
        if path == self._config.websocket_path:
            return None

        if path == STATE_PATH:
            body = json.dumps(snapshot_payload(self._snapshot_fn()))
            response = connection.respond(http.HTTPStatus.OK, body + "\n")
            del response.headers["Content-Type"]
            response.headers["Content-Type"] = "application/json"
            return response

        if path == HEALTHZ_PATH:
            return connection.respond(http.HTTPStatus.OK, "ok\n")

        return connection.respond(http.HTTPStatus.NOT_FOUND, "not found\n")
