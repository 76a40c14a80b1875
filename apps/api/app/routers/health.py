import logging

from fastapi import APIRouter, Request, Response, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.db.session import SessionLocal
from app.observability import log_event
from app.schemas.health import HealthResponse, ReadinessCheck, ReadinessResponse

router = APIRouter(tags=["health"])


@router.get("/health", summary="Liveness probe", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse()


@router.get(
    "/ready",
    summary="Readiness probe: database and archive scheduler",
    response_model=ReadinessResponse,
    responses={status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ReadinessResponse}},
)
def readiness(request: Request, response: Response) -> ReadinessResponse:
    checks = [check_database(), check_archive_scheduler(request)]
    if any(check.status == "error" for check in checks):
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return ReadinessResponse(status="degraded", checks=checks)
    return ReadinessResponse(status="ready", checks=checks)


def check_database() -> ReadinessCheck:
    try:
        with SessionLocal() as db:
            db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        log_event(f"readiness_database_failed:{type(exc).__name__}", level=logging.WARNING)
        return ReadinessCheck(name="database", status="error", detail=type(exc).__name__)
    return ReadinessCheck(name="database", status="ok")


def check_archive_scheduler(request: Request) -> ReadinessCheck:
    scheduler = getattr(request.app.state, "archive_scheduler", None)
    if scheduler is None:
        return ReadinessCheck(name="archive_scheduler", status="disabled")
    if not scheduler.running:
        return ReadinessCheck(
            name="archive_scheduler", status="error", detail="scheduler thread is not running"
        )
    return ReadinessCheck(name="archive_scheduler", status="ok")
