"""
WebSocket Base Manager Module
==============================

Thread-safe foundation for WebSocket connection management. Used by the
log stream (/logs) to push audit and ingestion events to connected admin
consoles.

Key Features:
-------------
1. **Thread Safety**: Lock-protected client list
2. **Graceful Degradation**: Failed connections are removed on send
3. **Cross-Thread Communication**: send_from_thread() lets sync request
   handlers (run in FastAPI's threadpool) broadcast on the main loop

Usage Example:
-------------
    manager = CustomWebSocketManager()
    manager.set_main_loop(asyncio.get_running_loop())

    @app.websocket("/custom")
    async def websocket_endpoint(ws: WebSocket):
        await manager.register(ws)
        try:
            while True:
                message = await ws.receive_text()
                await manager.handle_message(ws, message)
        finally:
            manager.unregister(ws)
"""

from fastapi import WebSocket
import asyncio
from typing import List, Optional, Dict, Any
import json
import threading


class WebSocketManager:
    """
    Base WebSocket manager for handling multiple concurrent client connections.

    Attributes:
        clients (List[WebSocket]): Currently active WebSocket connections
        main_loop (Optional[asyncio.AbstractEventLoop]): FastAPI's main event loop
        _lock (threading.Lock): Protects the client list

    Lifecycle:
        1. Instantiate manager
        2. Call set_main_loop() during application startup
        3. Call register() when client connects
        4. Call broadcast() / send_from_thread() to send messages
        5. Call unregister() when client disconnects
    """

    def __init__(self):
        self.clients: List[WebSocket] = []
        self.main_loop: Optional[asyncio.AbstractEventLoop] = None
        self._lock = threading.Lock()

    def set_main_loop(self, loop: asyncio.AbstractEventLoop):
        """
        Register FastAPI's main event loop. Must be called from the lifespan
        handler, otherwise send_from_thread() cannot schedule broadcasts.
        """
        self.main_loop = loop

    async def register(self, ws: WebSocket):
        """
        Accept and register a new WebSocket client connection.

        The client is added before accept() so no message is lost during
        the handshake; on handshake failure it is removed again.
        """
        with self._lock:
            if ws not in self.clients:
                self.clients.append(ws)

        try:
            await ws.accept()
            print(f"[WSBase] Client registered. Total clients: {len(self.clients)}")
        except Exception:
            self.unregister(ws)
            raise

    def unregister(self, ws: WebSocket):
        """
        Remove a WebSocket client. Idempotent.
        """
        with self._lock:
            if ws in self.clients:
                self.clients.remove(ws)
                print(f"[WSBase] Client unregistered. Total clients: {len(self.clients)}")

    @property
    def has_clients(self) -> bool:
        with self._lock:
            return len(self.clients) > 0

    async def broadcast(self, message: Dict[str, Any]):
        """
        Send a JSON message to every client; clients failing the send are
        unregistered.
        """
        to_remove = []

        with self._lock:
            current_clients = list(self.clients)

        for ws in current_clients:
            try:
                await ws.send_text(json.dumps(message))
            except Exception:
                to_remove.append(ws)

        for ws in to_remove:
            self.unregister(ws)

    def send_from_thread(self, message: Dict[str, Any]):
        """
        Schedule a broadcast on the main loop from any thread.

        Fire and forget: the caller does not wait for delivery.
        """
        if not self.has_clients:
            return

        if self.main_loop:
            asyncio.run_coroutine_threadsafe(
                self.broadcast(message), self.main_loop
            )

    async def handle_message(self, ws: WebSocket, message: str):
        """
        Template method for subclasses. Default implementation only logs.
        """
        print(f"[WSBase] Received message from client: {message}")
