"""FastAPI application factory."""

import logging
import secrets
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security.utils import get_authorization_scheme_param
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.middleware.base import BaseHTTPMiddleware

from ..subscriber.metrics import MetricsCollector, get_metrics
from .dependencies import NotReadyError
from .schemas import ErrorResponse

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

# Reachable without a token so that docs and scraping keep working
PUBLIC_PATHS = frozenset({"/docs", "/docs/oauth2-redirect", "/redoc", "/openapi.json", "/metrics"})

DESCRIPTION = """
Forwards completed survey responses to configured webhook URLs.

The survey host calls `POST /api/v1/events/survey-completed` once a response is
finalized. The service reads the response, its label export and the
participant, and POSTs one JSON document to every URL configured for the
survey. A survey's own URLs (one per line) win over the global default URL.

When `SURVEY_WEBHOOK_API_BEARER_TOKEN` is set, every endpoint except the docs
and `/metrics` requires `Authorization: Bearer <token>`.
"""

OPENAPI_TAGS = [
    {"name": "health", "description": "Service and database status"},
    {"name": "events", "description": "Survey completion notifications from the survey host"},
    {"name": "settings", "description": "Global and per-survey webhook settings"},
]


class BearerAuthMiddleware(BaseHTTPMiddleware):
    """Reject requests without the configured bearer token."""

    def __init__(self, app, bearer_token: str, metrics: Optional[MetricsCollector] = None):
        super().__init__(app)
        self.bearer_token = bearer_token
        self.metrics = metrics

    def _reject(self, request: Request, detail: str) -> JSONResponse:
        logger.warning(f"Rejected {request.method} {request.url.path}: {detail}")
        if self.metrics:
            self.metrics.record_error("api", "unauthorized")
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=ErrorResponse(error="Authentication required", detail=detail).model_dump(),
            headers={"WWW-Authenticate": "Bearer"},
        )

    async def dispatch(self, request: Request, call_next):
        if request.url.path in PUBLIC_PATHS:
            return await call_next(request)

        authorization = request.headers.get("Authorization")
        if not authorization:
            return self._reject(request, "Missing Authorization header")

        scheme, token = get_authorization_scheme_param(authorization)
        if scheme.lower() != "bearer" or not token or " " in token:
            return self._reject(
                request, "Invalid Authorization header format. Expected: 'Bearer <token>'"
            )

        if not secrets.compare_digest(token.encode(), self.bearer_token.encode()):
            return self._reject(request, "Invalid bearer token")

        return await call_next(request)


def _install_error_handlers(app: FastAPI, metrics: Optional[MetricsCollector]) -> None:
    """Answer every failure with an ErrorResponse body."""

    def error(status_code: int, message: str, detail=None) -> JSONResponse:
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(error=message, detail=detail).model_dump(),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        detail = [
            {"loc": list(err.get("loc", ())), "msg": str(err.get("msg", "")), "type": err.get("type")}
            for err in exc.errors()
        ]
        logger.info(f"Invalid request to {request.url.path}: {len(detail)} error(s)")
        return error(status.HTTP_422_UNPROCESSABLE_ENTITY, "Validation error", detail)

    @app.exception_handler(NotReadyError)
    async def not_ready(request: Request, exc: NotReadyError) -> JSONResponse:
        logger.warning(f"{request.url.path} called before startup finished: {exc}")
        return error(status.HTTP_503_SERVICE_UNAVAILABLE, "Service not ready", str(exc))

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error(f"Unexpected error on {request.url.path}: {exc}", exc_info=True)
        if metrics:
            metrics.record_error("api", type(exc).__name__)
        detail = str(exc) if logger.isEnabledFor(logging.DEBUG) else None
        return error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", detail)


def _instrument(app: FastAPI) -> None:
    """Expose request metrics at /metrics next to the dispatch metrics."""
    Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        should_respect_env_var=False,
        should_instrument_requests_inprogress=True,
        excluded_handlers=sorted(PUBLIC_PATHS),
        inprogress_name="survey_webhook_http_inprogress",
        inprogress_labels=True,
    ).instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)


def create_app(
    title: str = "Survey Webhook",
    version: str = "1.0.0",
    enable_metrics: bool = True,
    bearer_token: Optional[str] = None,
) -> FastAPI:
    """
    Build the API application.

    Args:
        title: API title for OpenAPI documentation
        version: API version
        enable_metrics: Serve /metrics and count API errors
        bearer_token: Require this token on every non-public path

    Returns:
        Configured FastAPI application
    """
    from .routes import events, health, settings

    metrics = get_metrics() if enable_metrics else None

    app = FastAPI(
        title=title,
        version=version,
        description=DESCRIPTION,
        license_info={"name": "MIT"},
        openapi_tags=OPENAPI_TAGS,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT"],
        allow_headers=["Authorization", "Content-Type"],
    )

    if bearer_token:
        app.add_middleware(BearerAuthMiddleware, bearer_token=bearer_token, metrics=metrics)
    logger.info(f"Bearer token authentication {'enabled' if bearer_token else 'disabled'}")

    _install_error_handlers(app, metrics)

    error_responses = {
        500: {"model": ErrorResponse, "description": "Internal server error"},
        503: {"model": ErrorResponse, "description": "Service not ready"},
    }
    for router, tag in ((health.router, "health"), (events.router, "events"), (settings.router, "settings")):
        app.include_router(router, prefix=API_PREFIX, tags=[tag], responses=error_responses)

    if enable_metrics:
        _instrument(app)

    logger.info(f"API application created: {title} v{version}")
    return app
