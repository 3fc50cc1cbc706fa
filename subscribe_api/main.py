from contextlib import asynccontextmanager
import logging
from pathlib import Path

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import FileResponse
from secure import (
    ContentSecurityPolicy,
    ReferrerPolicy,
    Secure,
    StrictTransportSecurity,
    XContentTypeOptions,
    XFrameOptions,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.types import ASGIApp

from subscribe_api.app.api.endpoints import subscribe
from subscribe_api.app.core.config import Settings, get_settings
from subscribe_api.app.core.database import Database
from subscribe_api.app.core.errors import register_exception_handlers
from subscribe_api.app.core.logging import setup_logging
from subscribe_api.app.schemas import HealthResponse

logger = logging.getLogger(__name__)

# Harden default security headers; the landing page only loads same-origin assets
SECURE_HEADERS = Secure(
    hsts=StrictTransportSecurity().max_age(63072000).include_subdomains(),
    xfo=XFrameOptions().deny(),
    referrer=ReferrerPolicy().strict_origin_when_cross_origin(),
    csp=ContentSecurityPolicy()
    .default_src("'self'")
    .img_src("'self'", "data:")
    .connect_src("'self'"),
    xcto=XContentTypeOptions().nosniff(),
)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, secure_headers: Secure, is_dev: bool) -> None:
        super().__init__(app)
        self.secure_headers = secure_headers
        self.is_dev = is_dev

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        await self.secure_headers.set_headers_async(response)
        # Avoid sending HSTS on cleartext requests to keep local dev/proxy setups flexible.
        if self.is_dev and request.url.scheme not in ("https", "wss"):
            if "Strict-Transport-Security" in response.headers:
                del response.headers["Strict-Transport-Security"]

        if request.url.path.startswith("/api/"):
            response.headers["Cache-Control"] = "no-store"

        return response


def resolve_static_file(static_dir: Path, file_path: str) -> Path:
    """Map a request path onto a file under ``static_dir``."""
    root = static_dir.resolve()
    try:
        full_path = (root / file_path).resolve()
    except (ValueError, OSError):
        # e.g. embedded NUL bytes
        raise HTTPException(status_code=404, detail="Not found")

    # Security: Prevent path traversal
    try:
        full_path.relative_to(root)
    except ValueError:
        raise HTTPException(status_code=403, detail="Access denied")

    if full_path.is_dir():
        full_path = full_path / "index.html"

    if not full_path.is_file():
        raise HTTPException(status_code=404, detail="Not found")
    return full_path


def create_app(app_settings: Settings | None = None) -> FastAPI:
    app_settings = app_settings or get_settings()
    setup_logging(app_settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup: any failure here aborts the server before it accepts requests
        try:
            db = Database(settings=app_settings)
            db.create_schema()
        except Exception:
            logger.exception("Startup failed")
            raise
        app.state.db = db
        logger.info(
            "Subscribe API ready",
            extra={"data": {"static_dir": str(app_settings.static_dir), "port": app_settings.port}},
        )
        yield
        # Shutdown
        db.dispose()
        app.state.db = None

    app = FastAPI(
        title="Subscribe API",
        description="Newsletter signup endpoint for the landing page",
        version="1.0.0",
        docs_url="/docs" if app_settings.is_dev else None,
        redoc_url="/redoc" if app_settings.is_dev else None,
        openapi_url="/openapi.json" if app_settings.is_dev else None,
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.db = None

    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.allowed_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Accept"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(
        SecurityHeadersMiddleware,
        secure_headers=SECURE_HEADERS,
        is_dev=app_settings.is_dev,
    )

    app.include_router(subscribe.router, prefix="/api", tags=["subscribe"])

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        return HealthResponse()

    # Registered last so API routes win over same-named files
    @app.get("/{file_path:path}", include_in_schema=False)
    async def serve_static(file_path: str):
        return FileResponse(resolve_static_file(app_settings.static_dir, file_path))

    return app


app = create_app()
