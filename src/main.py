"""
src/main.py
============================================
FastAPI Application for the RA Telemetry Server
============================================

Entry point of the RA server. Devices authenticate with a name and
passphrase, receive a short-lived session and then push channel
definitions, readings and files. Owners manage their devices through the
/devices endpoints.

Architecture Overview:
---------------------
- /ra:       Device-facing API (login, channels, data, blobs, config poll)
- /devices:  Owner-facing device administration
- /logs:     WebSocket stream of audit and ingestion events
- /health:   Liveness and database check
"""

# Environment Configuration
from dotenv import load_dotenv
import os
load_dotenv()

# FastAPI Core
from fastapi import FastAPI, WebSocket
from src.Core.config import settings
from src.Controller.Routes import devices, ra
from contextlib import asynccontextmanager
import asyncio

# WebSocket Management (system logs only)
from src.Core import log_ws

# Database
from src.DB.database import create_all_tables, test_db_connection

# Blob storage
from src.Services.blob_storage import ensure_storage

# ============================================================
# DEPLOYMENT CONFIGURATION #1: ROOT PATH HANDLING
# ============================================================
from starlette.middleware.base import BaseHTTPMiddleware
from fastapi.responses import RedirectResponse

# Extract root path for subdirectory deployment (e.g., /ra-server)
ROOT_PATH = os.getenv("ROOT_PATH", "").strip()
if ROOT_PATH:
    if not ROOT_PATH.startswith("/"):
        ROOT_PATH = "/" + ROOT_PATH
    if ROOT_PATH.endswith("/"):
        ROOT_PATH = ROOT_PATH[:-1]


class StripPrefixMiddleware(BaseHTTPMiddleware):
    """
    Removes the ROOT_PATH prefix from incoming requests.

    Example:
        ROOT_PATH = "/ra-server"
        Incoming request: /ra-server/ra/login
        FastAPI receives: /ra/login
    """

    def __init__(self, app, prefix: str):
        super().__init__(app)
        self.prefix = prefix

    async def dispatch(self, request, call_next):
        if self.prefix:
            path = request.url.path

            # Redirect bare prefix to prefix with trailing slash
            if path == self.prefix:
                return RedirectResponse(url=self.prefix + "/", status_code=307)

            if path.startswith(self.prefix + "/"):
                request.scope["path"] = path[len(self.prefix):] or "/"

        return await call_next(request)


# ============================================================
# DEPLOYMENT CONFIGURATION #2: DYNAMIC CORS CONFIGURATION
# ============================================================
from fastapi.middleware.cors import CORSMiddleware


def _parse_origins(csv_value: str):
    """
    Parse comma-separated origins.

    Examples:
        "*" → (True, ["*"])
        "https://app.com,https://admin.app.com" → (False, ["https://app.com", "https://admin.app.com"])
        "" → (False, [])
    """
    if not csv_value:
        return (False, [])

    csv_value = csv_value.strip()

    if csv_value == "*":
        return (True, ["*"])

    origins = [origin.strip() for origin in csv_value.split(",") if origin.strip()]
    return (False, origins)


_http_allow_all, _http_origins = _parse_origins(
    os.getenv("HTTP_ALLOWED_ORIGINS", "*")
)
_ws_allow_all, _ws_origins = _parse_origins(
    os.getenv("WS_ALLOWED_ORIGINS", "*")
)


# ============================================================
# APPLICATION LIFESPAN MANAGEMENT
# ============================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup Sequence:
        1. Configure event loop for the log WebSocket manager
        2. Create tables when AUTO_CREATE_TABLES is set (otherwise alembic)
        3. Make sure the blob storage directory exists
    """
    loop = asyncio.get_running_loop()
    log_ws.log_ws_manager.set_main_loop(loop)

    if settings.AUTO_CREATE_TABLES:
        print("[STARTUP] 📄 Creating database tables...")
        create_all_tables()

    ensure_storage()
    print(f"[STARTUP] ✅ Blob storage at {settings.DATA_DIR}")

    print("[STARTUP] ✅ Application initialization complete")

    yield

    print("[SHUTDOWN] 🛑 Application shutdown initiated")


# ============================================================
# APPLICATION INSTANCE CREATION
# ============================================================
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.PROJECT_VERSION,
    lifespan=lifespan
)


# ============================================================
# MIDDLEWARE REGISTRATION
# ============================================================
# Middlewares are executed in REVERSE order of registration

if ROOT_PATH:
    app.add_middleware(StripPrefixMiddleware, prefix=ROOT_PATH)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_http_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================
# HEALTH CHECK ENDPOINT
# ============================================================
@app.get("/health")
def health():
    """
    Health check for the load balancer.

    Returns:
        {"status": "ok", "database": true}
    """
    return {"status": "ok", "database": test_db_connection()}


# ============================================================
# REST API ROUTE REGISTRATION
# ============================================================
app.include_router(ra.router, prefix="/ra", tags=["ra"])
app.include_router(devices.router, prefix="/devices", tags=["devices"])


# ============================================================
# WEBSOCKET ENDPOINTS
# ============================================================
async def socket_handler(ws: WebSocket, manager):
    """
    Generic WebSocket connection handler with origin validation.

    Connections from origins outside WS_ALLOWED_ORIGINS are closed with 403.
    """
    origin = ws.headers.get("origin")

    if (not _ws_allow_all) and (origin not in _ws_origins):
        print(f"[WS] ❌ Connection rejected - unauthorized origin: {origin}")
        await ws.close(code=403)
        return

    await manager.register(ws)

    try:
        while True:
            message = await ws.receive_text()
            await manager.handle_message(ws, message)
    except Exception as e:
        print(f"[WS] Connection closed: {e}")
    finally:
        manager.unregister(ws)


@app.websocket("/logs")
async def websocket_logs(ws: WebSocket):
    """
    Real-time audit and ingestion log stream.

    Message Format:
        {"msg_type": "log" | "error" | "warning", "message": "..."}
    """
    await socket_handler(ws, log_ws.log_ws_manager)


# ============================================================
# API INFORMATION ENDPOINT
# ============================================================
@app.get("/api")
def api_info():
    return {
        "status": "online",
        "version": settings.PROJECT_VERSION,
        "features": {
            "websockets": ["/logs"],
            "max_blob_bytes": settings.MAX_BLOB_BYTES
        },
        "endpoints": {
            "ra": "/ra/*",
            "devices": "/devices/*",
            "logs": "/logs (WebSocket)",
            "health": "/health"
        }
    }
