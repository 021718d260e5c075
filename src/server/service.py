from __future__ import annotations

import asyncio
import logging
import threading
from http import HTTPStatus
from typing import Any, Callable, Optional
from urllib.parse import urlsplit

from websockets.asyncio.server import ServerConnection, broadcast, serve
from websockets.exceptions import ConnectionClosed
from websockets.http11 import Request, Response

from contracts.ui_protocol import EVENT_ERROR, EVENT_HELLO

from .config import UIServerConfig
from .events import StickyEventStore, make_event, parse_client_message

MessageHandler = Callable[[dict[str, Any]], None]


class UIServer:
    """Websocket bridge between UI clients and the session, on its own thread.

    Outbound events may be published from any thread; they are handed to the
    server's event loop and broadcast to every connected client. Inbound
    client messages are decoded and passed to the registered handler.
    """

    def __init__(
        self,
        config: UIServerConfig,
        logger: Optional[logging.Logger] = None,
        message_handler: Optional[MessageHandler] = None,
    ):
        self._config = config
        self._logger = logger or logging.getLogger("ui_server")
        self._message_handler = message_handler
        self._thread: Optional[threading.Thread] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._shutdown: Optional[asyncio.Event] = None
        self._ready = threading.Event()
        self._startup_error: Optional[BaseException] = None
        self._clients: set[ServerConnection] = set()
        self._sticky_events = StickyEventStore()

    @property
    def host(self) -> str:
        return self._config.host

    @property
    def port(self) -> int:
        return self._config.port

    @property
    def websocket_path(self) -> str:
        return self._config.websocket_path

    @property
    def client_count(self) -> int:
        return len(self._clients)

    @property
    def is_running(self) -> bool:
        return (
            self._thread is not None
            and self._thread.is_alive()
            and self._loop is not None
            and self._startup_error is None
        )

    def set_message_handler(self, handler: Optional[MessageHandler]) -> None:
        self._message_handler = handler

    def start(self, timeout_seconds: float = 5.0) -> None:
        if self.is_running:
            self._logger.warning("UI server is already running")
            return

        self._startup_error = None
        self._ready.clear()
        self._thread = threading.Thread(
            target=self._thread_main,
            daemon=True,
            name="ui-server",
        )
        self._thread.start()

        if not self._ready.wait(timeout_seconds):
            raise RuntimeError(f"UI server did not start within {timeout_seconds:.1f}s")
        if self._startup_error is not None:
            raise RuntimeError(f"UI server startup failed: {self._startup_error}")

    def stop(self, timeout_seconds: float = 5.0) -> None:
        if self._thread is None:
            return

        loop, shutdown = self._loop, self._shutdown
        if loop is not None and shutdown is not None:
            try:
                loop.call_soon_threadsafe(shutdown.set)
            except RuntimeError:
                # Loop already closed.
                pass

        self._thread.join(timeout=timeout_seconds)
        if self._thread.is_alive():
            self._logger.error("UI server thread did not stop within %.1fs", timeout_seconds)
        self._thread = None

    def publish(self, event_type: str, **payload: Any) -> None:
        """Broadcast an event to connected clients; safe to call from any thread."""
        message = make_event(event_type, **payload)
        self._sticky_events.remember(event_type, message)

        loop = self._loop
        if loop is None or not self.is_running:
            return
        try:
            loop.call_soon_threadsafe(self._broadcast, message)
        except RuntimeError:
            # Loop may be shutting down.
            return

    def handle_message(self, raw: str | bytes) -> Optional[str]:
        """Route one client message; returns an error event for the sender, if any."""
        payload = parse_client_message(raw)
        if payload is None:
            return make_event(EVENT_ERROR, message="Message must be a JSON object")

        if self._message_handler is None:
            self._logger.debug("No message handler registered, dropping: %s", payload)
            return None

        try:
            self._message_handler(payload)
        except Exception as error:
            self._logger.warning("Rejected UI message %s: %s", payload.get("type"), error)
            return make_event(EVENT_ERROR, message=str(error))
        return None

    def _thread_main(self) -> None:
        try:
            asyncio.run(self._serve())
        except Exception as error:  # pragma: no cover - requires binding a real socket
            self._startup_error = error
            self._logger.error("UI server failed: %s", error, exc_info=True)
        finally:
            self._loop = None
            self._shutdown = None
            self._clients.clear()
            self._ready.set()

    async def _serve(self) -> None:
        self._loop = asyncio.get_running_loop()
        self._shutdown = asyncio.Event()
        async with serve(
            self._handle_client,
            host=self._config.host,
            port=self._config.port,
            process_request=self._route_http,
            logger=self._logger,
        ) as server:
            self._logger.info(
                "UI server running at ws://%s:%d%s",
                self._config.host,
                self._config.port,
                self._config.websocket_path,
            )
            self._ready.set()
            await self._shutdown.wait()
            server.close()
            await server.wait_closed()

    async def _handle_client(self, websocket: ServerConnection) -> None:
        self._clients.add(websocket)
        self._logger.info("Client connected: %s (%d total)", websocket.remote_address, len(self._clients))
        try:
            await websocket.send(make_event(EVENT_HELLO, message="Focus timer connected"))
            for sticky in self._sticky_events.snapshot():
                await websocket.send(sticky)

            async for message in websocket:
                self._logger.debug("Received from UI: %s", message)
                reply = self.handle_message(message)
                if reply is not None:
                    await websocket.send(reply)
        except ConnectionClosed as error:
            self._logger.debug("Connection closed: %s", error)
        finally:
            self._clients.discard(websocket)
            self._logger.info("Client disconnected: %s", websocket.remote_address)

    def _route_http(self, connection: ServerConnection, request: Request) -> Optional[Response]:
        path = urlsplit(request.path).path
        if path == self._config.websocket_path:
            return None
        if path == self._config.healthz_path:
            return connection.respond(HTTPStatus.OK, "ok\n")
        return connection.respond(HTTPStatus.NOT_FOUND, "not found\n")

    def _broadcast(self, message: str) -> None:
        if self._clients:
            broadcast(set(self._clients), message)
