from pydantic import BaseModel


class TimingStats(BaseModel):
    count: int
    avg_s: float
    max_s: float


class MetricsResponse(BaseModel):
    """Process-local counters; they reset on restart and are not shared across workers."""

    service: str
    counters: dict[str, int]
    timings: dict[str, TimingStats]
