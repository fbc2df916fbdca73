"""
Coffee API - Health Check Route
================================

What:  Liveness endpoint for container health checks and load balancers.
How:   Returns {"status": "ok"} without touching the database, so it answers
       200 for as long as the process is serving HTTP.
"""

from fastapi import APIRouter

from coffee_api.schemas.coffee import HealthResponse

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service liveness check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok")
