import logging
import socket
import time
from contextlib import asynccontextmanager
from datetime import timedelta
from uuid import uuid4

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from app.config import allowed_origins, ensure_runtime_settings, settings
from app.db.migration_check import prepare_schema
from app.db.session import engine
from app.observability import configure_logging, log_event, metrics_store, set_request_id
from app.routers.health import router as health_router
from app.routers.metrics import router as metrics_router
from app.routers.orders import router as orders_router
from app.services.archive_scheduler import DailyArchiveScheduler, run_archive_sweep
from app.services.errors import (
    OrderError,
    OrderNotFoundError,
    OrderStoreError,
    OrderValidationError,
)


def build_archive_scheduler() -> DailyArchiveScheduler:
    archive_after = timedelta(hours=settings.archive_after_hours)
    return DailyArchiveScheduler(
        lambda: run_archive_sweep(archive_after=archive_after),
        run_hour_utc=settings.archive_run_hour_utc,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.log_level)
    ensure_runtime_settings()
    prepare_schema(engine)

    scheduler: DailyArchiveScheduler | None = None
    if settings.archive_scheduler_enabled:
        scheduler = build_archive_scheduler()
        scheduler.start()
    app.state.archive_scheduler = scheduler

    log_event("orders_service_started")
    try:
        yield
    finally:
        if scheduler is not None:
            scheduler.stop()
        log_event("orders_service_stopped")


app = FastAPI(
    title=settings.app_name,
    version="1.0.0",
    description="Order lifecycle API: creation, payment, trash, archive and CSV export",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next) -> Response:
    request_id = request.headers.get("X-Request-ID") or str(uuid4())
    set_request_id(request_id)

    status_code = 500
    start = time.perf_counter()
    try:
        response = await call_next(request)
        status_code = response.status_code
    finally:
        metrics_store.increment("http_requests_total")
        metrics_store.observe("http_request_duration_seconds", time.perf_counter() - start)
        log_event(
            f"http_request {request.method} {request.url.path} {status_code}",
            order_id=request.path_params.get("order_id"),
        )

    response.headers["X-Request-ID"] = request_id
    return response


def _error_response(status_code: int, error: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "message": message})


@app.exception_handler(OrderNotFoundError)
async def order_not_found_handler(_request: Request, exc: OrderNotFoundError) -> JSONResponse:
    return _error_response(404, "Order not found", exc.message)


@app.exception_handler(OrderValidationError)
async def order_validation_handler(_request: Request, exc: OrderValidationError) -> JSONResponse:
    return _error_response(422, "Validation failed", exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    )
    return _error_response(422, "Validation failed", details)


@app.exception_handler(OrderStoreError)
async def order_store_handler(_request: Request, exc: OrderStoreError) -> JSONResponse:
    log_event(f"order_store_error:{exc.action}", level=logging.ERROR)
    return _error_response(500, f"Failed to {exc.action}", exc.message)


@app.exception_handler(OrderError)
async def order_error_handler(_request: Request, exc: OrderError) -> JSONResponse:
    return _error_response(500, "Order operation failed", exc.message)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log_event(
        f"unhandled_exception {type(exc).__name__} in {request.method} {request.url.path}",
        level=logging.ERROR,
        exc_info=True,
    )
    return _error_response(500, "Internal server error", str(exc))


@app.get("/", summary="Service banner")
def root() -> dict[str, str]:
    return {"message": f"{settings.app_name} running"}


app.include_router(health_router)
app.include_router(metrics_router)
app.include_router(orders_router, prefix=settings.api_prefix)


def port_is_free(host: str, port: int) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.bind((host, port))
        except OSError:
            return False
    return True


def find_available_port(
    host: str,
    start_port: int,
    attempts: int,
    is_free=port_is_free,
) -> int:
    for port in range(start_port, start_port + attempts):
        if is_free(host, port):
            return port
        log_event(f"port_in_use:{port}", level=logging.WARNING)
    raise RuntimeError(
        f"No free port in range {start_port}-{start_port + attempts - 1}"
    )


def run() -> None:
    port = find_available_port(settings.host, settings.port, settings.port_retry_attempts)
    uvicorn.run(
        app,
        host=settings.host,
        port=port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
