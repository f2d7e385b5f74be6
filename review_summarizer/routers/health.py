from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel, Field

from review_summarizer.config import settings

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    environment: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


@router.get("/health", response_model=HealthResponse)
async def get_health() -> HealthResponse:
    return HealthResponse(status="ok", environment=settings.app_env)
