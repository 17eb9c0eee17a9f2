"""
Log WebSocket Management Module
================================

Real-time log streaming over WebSocket (/logs). Audit events (access to a
foreign device, device deletion, rejected logins) and ingestion events are
printed to the console and broadcast to connected admin consoles.

Message Format:
--------------
    {
        "msg_type": "log" | "error" | "warning",
        "message": "The log message content"
    }

Usage Example:
-------------
    from src.Core.log_ws import log_from_thread, audit

    log_from_thread("[INGEST] Blob #12 stored", "log")
    audit("User #3 tried to access foreign device 17", "error")
"""

from typing import Dict, Any
from fastapi import WebSocket
from .wsBase import WebSocketManager


def log_from_thread(message: str, msg_type: str = "log"):
    """
    Print a log line and broadcast it to all connected log clients.

    Args:
        message: The log message content
        msg_type: "log", "error" or "warning"

    Safe to call from sync request handlers running in the threadpool.
    """
    print(message)
    if log_ws_manager.has_clients:
        payload: Dict[str, Any] = {"msg_type": msg_type, "message": str(message)}
        log_ws_manager.send_from_thread(payload)


def audit(message: str, msg_type: str = "log"):
    """
    Audit trail entry (ownership violations, deletions, rejected logins).
    """
    log_from_thread(f"[AUDIT] {message}", msg_type)


class LogWebSocketManager(WebSocketManager):
    """
    WebSocket manager for the log stream. Clients only listen; incoming
    messages are echoed to the console.
    """

    async def handle_message(self, ws: WebSocket, message: str):
        print(f"[LOG-WS] Received message from client: {message}")


# ============================================================
# GLOBAL LOG WEBSOCKET MANAGER INSTANCE
# ============================================================
log_ws_manager = LogWebSocketManager()
