"""HTTP API for the average calculator."""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .categories import InvalidCategory
from .config import Config
from .fetcher import NumberFetcher, UpstreamError
from .logging import get_logger
from .service import AverageService
from .window import SlidingWindow

logger = get_logger(__name__)

GENERIC_ERROR_MESSAGE = "Unexpected error"

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "X-DNS-Prefetch-Control": "off",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Content-Security-Policy": "default-src 'self'",
}


def build_service(config: Config) -> AverageService:
    """Wire a fetcher and an empty window according to config."""
    return AverageService(
        fetcher=NumberFetcher(config.fetch_timeout_ms),
        window=SlidingWindow(config.window_size),
        endpoints=config.endpoints,
        warn_ms=config.processing_warn_ms,
    )


def _iso_now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


def create_app(config: Config, service: Optional[AverageService] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: Loaded configuration
        service: Optional pre-built service (tests inject one with a fake fetcher)

    Returns:
        Configured FastAPI app; the shared service is on app.state.service
    """
    service = service or build_service(config)
    production = config.is_production

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Average calculator ready")
        logger.info(f"Window size: {service.window.capacity}, fetch timeout: {service.fetcher.timeout_ms}ms")
        yield
        logger.info(f"Shutting down with window {service.window.snapshot()}, closing upstream session")
        service.fetcher.close()

    app = FastAPI(
        title="Average Calculator Microservice",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.state.service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    @app.exception_handler(InvalidCategory)
    async def invalid_category_handler(request: Request, exc: InvalidCategory):
        return JSONResponse(status_code=400, content={"error": exc.message})

    @app.exception_handler(UpstreamError)
    async def upstream_error_handler(request: Request, exc: UpstreamError):
        logger.error(f"Upstream failure for {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=500,
            content={
                "error": "Failed to process request",
                "message": GENERIC_ERROR_MESSAGE if production else exc.message,
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        # Unknown routes and unsupported methods both read as "not found"
        if exc.status_code in (404, 405):
            return JSONResponse(status_code=404, content={"error": "Not found"})
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "message": GENERIC_ERROR_MESSAGE if production else str(exc),
            },
        )

    @app.get("/health")
    def health():
        return {"status": "ok", "timestamp": _iso_now()}

    @app.get("/")
    def index():
        return {
            "name": "Average Calculator Microservice",
            "endpoints": {
                "/numbers/:numberid": "Get numbers and calculate average. Valid numberid values: p, f, e, r",
                "/health": "Health check endpoint",
            },
        }

    # Plain def: FastAPI runs it in its worker pool, the window lock serializes merges
    @app.get("/numbers/{number_id}")
    def numbers(number_id: str):
        return app.state.service.process(number_id).to_dict()

    return app
