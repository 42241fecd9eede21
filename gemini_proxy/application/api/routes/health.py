"""
Health Check Routes

Liveness probe only: if the process can answer, it is alive. No upstream or
configuration checks, so a missing API key does not take the instance out
of rotation.
"""

from fastapi import APIRouter

from gemini_proxy.application.api.models import HealthResponse

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return HealthResponse(ok=True)
