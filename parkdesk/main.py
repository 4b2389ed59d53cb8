# parkdesk/main.py
"""
FastAPI application entry point.
Includes security middleware, error handlers, and all routers.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from parkdesk.routers import register, cash, vehicles, configuration, health
from parkdesk.database import create_tables
from parkdesk.config import settings
from parkdesk.errors import ParkingError
from parkdesk.services.live_totals import LiveTotals
from parkdesk.deps import open_sql_records
from parkdesk.services.store import notifier
from parkdesk.utils.logger import get_logger
import time

logger = get_logger(__name__)

app = FastAPI(
    title="ParkDesk API",
    description="Single-lot parking register: entries, exits, passes, cash drawer. Fully offline.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (allow the desk UI on the same machine/LAN to call the API) ─────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── API Key Middleware ───────────────────────────────────────────────────────
class APIKeyMiddleware(BaseHTTPMiddleware):
    """
    Optional lightweight API key auth.
    Set API_KEY in .env. Leave empty to disable auth.
    """
    async def dispatch(self, request: Request, call_next):
        open_paths = {"/api/v1/health", "/docs", "/redoc", "/openapi.json"}
        if request.url.path in open_paths or not settings.API_KEY:
            return await call_next(request)

        api_key = request.headers.get("X-API-Key") or request.query_params.get("api_key")
        if api_key != settings.API_KEY:
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"detail": "Invalid or missing API key"},
            )
        return await call_next(request)


if settings.API_KEY:
    app.add_middleware(APIKeyMiddleware)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Domain Error Handler ─────────────────────────────────────────────────────
@app.exception_handler(ParkingError)
async def parking_error_handler(request: Request, exc: ParkingError):
    logger.info(f"[{exc.code.upper()}] {request.method} {request.url.path}: {exc.detail}")
    content = {"code": exc.code, "detail": exc.detail}
    if getattr(exc, "reason", None):
        content["reason"] = exc.reason
        content["until"] = str(exc.until)
    return JSONResponse(status_code=exc.status_code, content=content)


# ── Global Exception Handler ─────────────────────────────────────────────────
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(register.router,      prefix="/api/v1", tags=["🚗 Register"])
app.include_router(cash.router,          prefix="/api/v1", tags=["💵 Cash"])
app.include_router(vehicles.router,      prefix="/api/v1", tags=["🔍 Vehicles"])
app.include_router(configuration.router, prefix="/api/v1", tags=["⚙️ Configuration"])
app.include_router(health.router,        prefix="/api/v1", tags=["💚 Health"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("🚀 ParkDesk starting up...")
    create_tables()
    logger.info("✅ Database tables ready")
    app.state.live_totals = LiveTotals(open_sql_records, notifier)
    logger.info(f"🖨  Printer: {settings.PRINTER_URL or 'not configured (receipts logged only)'}")
    logger.info(f"🌐 Listening on http://{settings.BACKEND_IP}:{settings.BACKEND_PORT}")
    logger.info("📖 API docs at /docs")


@app.on_event("shutdown")
async def shutdown():
    logger.info("🛑 ParkDesk shutting down...")
    app.state.live_totals.close()
