"""Health Schemas — liveness response contract."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Liveness probe body."""
    ok: bool
    timestamp: str
    uptime: float
    environment: str
