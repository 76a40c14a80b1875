from fastapi import APIRouter

from app.config import settings
from app.observability import metrics_store
from app.schemas.metrics import MetricsResponse

router = APIRouter(tags=["metrics"])


@router.get("/metrics", summary="Order counters and request timings", response_model=MetricsResponse)
def read_metrics() -> MetricsResponse:
    counters, timings = metrics_store.snapshot()
    return MetricsResponse(service=settings.app_name, counters=counters, timings=timings)
