"""FastAPI app for the historical database API."""

import logging
import time
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config.config import AppConfig, load_config
from core.errors.exceptions import AppError
from core.logging.context import clear_log_context, set_log_context
from core.logging.setup import generate_request_id
from core.logging.utilities import log_exception
from historical_db.customers.repository import CustomerRepository
from historical_db.customers.routes import create_customers_router
from historical_db.customers.service import CustomerService
from historical_db.database.provider import DatabaseProvider

logger = logging.getLogger(__name__)


def _add_cors(app: FastAPI, allowed_origins: Optional[List[str]]) -> None:
    if not allowed_origins:
        # Reflect whatever origin the browser sends
        app.add_middleware(
            CORSMiddleware,
            allow_origin_regex=".*",
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
        return

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def create_customers_module(provider: DatabaseProvider) -> APIRouter:
    repository = CustomerRepository(provider.get_gateway)
    service = CustomerService(repository)
    return create_customers_router(service)


def create_app(
    config: Optional[AppConfig] = None,
    customers_router: Optional[APIRouter] = None,
    provider: Optional[DatabaseProvider] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        config: Application config (default: ``load_config()``)
        customers_router: Replacement customers router, mainly for tests
        provider: Database provider; built from ``config`` when the default
            customers router is used and none is given

    The provider, if any, is disposed on shutdown.
    """
    config = config or load_config()

    if customers_router is None:
        provider = provider or DatabaseProvider(config)
        customers_router = create_customers_module(provider)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        yield
        if provider is not None:
            await provider.dispose()
            logger.info("Database provider disposed")

    app = FastAPI(
        title="Historical DB API",
        docs_url=None,
        redoc_url=None,
        lifespan=lifespan,
    )
    _add_cors(app, config.allowed_origins)

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request_id = request.headers.get("x-request-id") or generate_request_id()
        set_log_context(request_id=request_id, operation=f"{request.method} {request.url.path}")
        start_time = time.perf_counter()
        try:
            response = await call_next(request)
            logger.info(
                "Request completed",
                extra={
                    "http_method": request.method,
                    "http_path": request.url.path,
                    "http_status": response.status_code,
                    "duration_ms": round((time.perf_counter() - start_time) * 1000, 2),
                },
            )
            return response
        finally:
            clear_log_context()

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        log_exception(
            logger,
            exc,
            "Unhandled error",
            http_method=request.method,
            http_path=request.url.path,
        )
        message = exc.message if isinstance(exc, AppError) else str(exc)
        return JSONResponse(status_code=500, content={"message": message or "Unexpected error"})

    @app.get("/api/health")
    async def health():
        return {"status": "ok"}

    app.include_router(customers_router, prefix="/api/customers")

    return app


__all__ = ["create_app", "create_customers_module"]
