from typing import Literal

from pydantic import BaseModel

CheckStatus = Literal["ok", "error", "disabled"]


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"


class ReadinessCheck(BaseModel):
    name: str
    status: CheckStatus
    detail: str | None = None


class ReadinessResponse(BaseModel):
    """`ready` when no check reports `error`; a disabled scheduler does not degrade."""

    status: Literal["ready", "degraded"]
    checks: list[ReadinessCheck]
