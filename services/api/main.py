"""
Event Forms - Backend API
FastAPI service collecting RSVP and guestbook submissions into
Google Sheets, or local JSON files when Sheets is unavailable.

Install dependencies:
pip install -e .

Run server:
uvicorn main:app --host 0.0.0.0 --port 8000
"""

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Optional
from pathlib import Path
import contextvars
import logging
import os
import time
import uuid

from core.storage import select_storage_adapter
from routers import submissions as submissions_router
from schemas import HealthCheck
from settings import Settings, get_settings

# ========== Request Context for Tracing ==========
request_id_var = contextvars.ContextVar('request_id', default=None)

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI app. The storage backend is chosen in the startup
    hook, so nothing touches Sheets or the disk until the server starts.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Event Forms API",
        description="RSVP and guestbook submissions (Google Sheets with local JSON fallback)",
        version="1.0",
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.settings = settings
    app.state.storage_adapter = None

    # ========== Request Tracing Middleware ==========
    @app.middleware("http")
    async def request_tracing_middleware(request, call_next):
        """Add request_id and timing to all requests."""
        request_id = str(uuid.uuid4())[:8]
        request_id_var.set(request_id)
        started = time.time()

        response = await call_next(request)

        latency = time.time() - started
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"({round(latency * 1000, 2)} ms) [{request_id}]"
        )
        response.headers["X-Request-ID"] = request_id
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_origins_list(),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ========== Error envelopes: {"ok": false, "error": "..."} ==========
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request, exc):
        return JSONResponse(
            status_code=exc.status_code,
            content={"ok": False, "error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request, exc):
        logger.info(f"Rejected request to {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"ok": False, "error": "Invalid request"},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        logger.error(f"Unhandled exception [{request_id_var.get()}]: {str(exc)}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"ok": False, "error": "Internal server error"}
        )

    # ========== Lifecycle ==========
    @app.on_event("startup")
    async def startup_event():
        logger.info("Event Forms API starting up...")
        app.state.storage_adapter = select_storage_adapter(settings)
        logger.info(f"Storage Backend: {app.state.storage_adapter.backend.upper()}")
        logger.info(f"Allowed origins: {settings.get_origins_list()}")

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("Event Forms API shutting down...")

    # ========== Health ==========
    @app.get("/health", response_model=HealthCheck)
    async def health_check():
        """Health check endpoint (touches the active backend)."""
        adapter = app.state.storage_adapter
        if adapter is None:
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "starting", "backend": None},
            )
        try:
            adapter.ping()
        except Exception as e:
            logger.error(f"Health check failed: {str(e)}")
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "unhealthy", "backend": adapter.backend},
            )
        return {"status": "healthy", "backend": adapter.backend}

    @app.get("/healthz")
    async def healthz():
        """Liveness probe: the process is up and answering."""
        return {"status": "ok", "timestamp": time.time(), "version": "1.0"}

    app.include_router(submissions_router.router)

    # Static site goes last so API routes always win
    static_dir = settings.static_dir.strip()
    if static_dir:
        if Path(static_dir).is_dir():
            app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
        else:
            logger.warning(f"STATIC_DIR '{static_dir}' does not exist, not serving static files")

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", get_settings().port))
    uvicorn.run("main:app", host="0.0.0.0", port=port)
