from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Callable, Mapping, Optional
from urllib.parse import urlsplit

import websockets
from websockets.asyncio.server import Server, ServerConnection
from websockets.datastructures import Headers
from websockets.http11 import Request, Response

from contracts.ui_protocol import (
    EVENT_COMMAND_RESULT,
    EVENT_ERROR,
    EVENT_HELLO,
)

from .config import UIServerConfig
from .events import ClientMessageError, StickyEventStore, make_event, parse_client_message

CommandHandler = Callable[[str, Mapping[str, Any]], dict[str, Any]]
ViewProvider = Callable[[], dict[str, Any]]


class UIServer:
    """Asyncio websocket bridge streaming session events and accepting commands.

    The server shares the caller's event loop, so command handlers run on the
    same loop as the session they drive.
    """

    def __init__(
        self,
        config: UIServerConfig,
        *,
        command_handler: Optional[CommandHandler] = None,
        view_provider: Optional[ViewProvider] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._config = config
        self._command_handler = command_handler
        self._view_provider = view_provider
        self._logger = logger or logging.getLogger("ui_server")
        self._server: Optional[Server] = None
        self._connected_clients: set[ServerConnection] = set()
        self._sticky_events = StickyEventStore()
        self._pending_broadcasts: set[asyncio.Task[None]] = set()

    @property
    def host(self) -> str:
        return self._config.host

    @property
    def port(self) -> int:
        """Bound port once running, otherwise the configured one."""
        if self._server is not None:
            for sock in self._server.sockets:
                return sock.getsockname()[1]
        return self._config.port

    @property
    def websocket_path(self) -> str:
        return self._config.websocket_path

    @property
    def is_running(self) -> bool:
        return self._server is not None

    @property
    def client_count(self) -> int:
        return len(self._connected_clients)

    def set_command_handler(self, handler: Optional[CommandHandler]) -> None:
        self._command_handler = handler

    def set_view_provider(self, provider: Optional[ViewProvider]) -> None:
        self._view_provider = provider

    async def start(self) -> None:
        if self.is_running:
            self._logger.warning("UI server is already running")
            return

        self._server = await websockets.serve(
            self._handler,
            host=self._config.host,
            port=self._config.port,
            process_request=self._process_request,
            logger=self._logger,
        )
        self._logger.info(
            "UI server running at http://%s:%d (websocket: %s)",
            self._config.host,
            self.port,
            self._config.websocket_path,
        )

    async def stop(self) -> None:
        server = self._server
        if server is None:
            return

        await self._close_clients()
        server.close()
        await server.wait_closed()
        if self._pending_broadcasts:
            await asyncio.gather(*self._pending_broadcasts, return_exceptions=True)
        self._server = None
        self._logger.info("UI server stopped")

    def publish(self, event_type: str, **payload: Any) -> None:
        """Broadcast an event to connected clients; sticky events are kept for replay."""
        message = make_event(event_type, **payload)
        self._sticky_events.remember(event_type, message)
        if not self.is_running or not self._connected_clients:
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        task = loop.create_task(self._broadcast(message))
        self._pending_broadcasts.add(task)
        task.add_done_callback(self._forget_broadcast)

    def _forget_broadcast(self, task: asyncio.Task[None]) -> None:
        self._pending_broadcasts.discard(task)
        if not task.cancelled() and task.exception() is not None:
            self._logger.warning("Broadcast failed: %s", task.exception())

    async def _handler(self, websocket: ServerConnection) -> None:
        request_path = (
            urlsplit(websocket.request.path).path
            if websocket.request is not None
            else ""
        )
        if request_path != self._config.websocket_path:
            await websocket.close(code=1008, reason="Invalid websocket path")
            return

        self._connected_clients.add(websocket)
        self._logger.info("Client connected: %s", websocket.remote_address)
        try:
            await websocket.send(
                make_event(EVENT_HELLO, message="Session websocket connected")
            )
            for message in self._sticky_events.snapshot():
                await websocket.send(message)
            async for message in websocket:
                self._logger.debug("Received from UI: %s", message)
                reply = self._handle_message(message)
                if reply is not None:
                    await websocket.send(reply)
        except websockets.exceptions.ConnectionClosed:
            self._logger.info("Client disconnected: %s", websocket.remote_address)
        finally:
            self._connected_clients.discard(websocket)

    def _handle_message(self, raw: str | bytes) -> Optional[str]:
        try:
            command = parse_client_message(raw)
        except ClientMessageError as error:
            self._logger.warning("Rejected UI message: %s", error)
            return make_event(EVENT_ERROR, message=str(error))

        if self._command_handler is None:
            return make_event(EVENT_ERROR, message="Commands are not accepted")

        try:
            result = self._command_handler(command.name, command.message)
        except Exception as error:
            self._logger.error("Command %s failed: %s", command.name, error, exc_info=True)
            return make_event(EVENT_ERROR, message=f"Command {command.name} failed")

        return make_event(EVENT_COMMAND_RESULT, command=command.name, **result)

    async def _process_request(
        self,
        connection: ServerConnection,
        request: Request,
    ) -> Response | None:
        del connection  # Unused in HTTP routing.
        path = urlsplit(request.path).path

        if path == self._config.websocket_path:
            return None

        if path == self._config.healthz_path:
            return self._response(
                200,
                "OK",
                b"ok\n",
                "text/plain; charset=utf-8",
            )

        if path == self._config.session_path and self._view_provider is not None:
            body = json.dumps(self._view_provider()).encode("utf-8")
            return self._response(
                200,
                "OK",
                body,
                "application/json; charset=utf-8",
            )

        return self._response(
            404,
            "Not Found",
            b"not found\n",
            "text/plain; charset=utf-8",
        )

    def _response(
        self,
        status_code: int,
        reason_phrase: str,
        body: bytes,
        content_type: str,
    ) -> Response:
        headers = Headers()
        headers["Content-Type"] = content_type
        headers["Content-Length"] = str(len(body))
        headers["Cache-Control"] = "no-store"
        return Response(status_code, reason_phrase, headers, body)

    async def _close_clients(self) -> None:
        if not self._connected_clients:
            return

        tasks = [
            client.close(code=1001, reason="Server shutting down")
            for client in tuple(self._connected_clients)
        ]
        await asyncio.gather(*tasks, return_exceptions=True)
        self._connected_clients.clear()

    async def _broadcast(self, message: str) -> None:
        if not self._connected_clients:
            return

        clients = tuple(self._connected_clients)
        disconnected = []
        tasks = [client.send(message) for client in clients]
        results = await asyncio.gather(*tasks, return_exceptions=True)
        for client, result in zip(clients, results):
            if isinstance(result, Exception):
                disconnected.append(client)
                self._logger.warning("Failed to send message to client: %s", result)

        for client in disconnected:
            self._connected_clients.discard(client)

