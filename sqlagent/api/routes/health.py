"""
Health Check Routes

Liveness endpoint for load balancers; dependency checks live under each
agent's own ``/health`` route.
"""

from datetime import UTC, datetime

from fastapi import APIRouter, status

from sqlagent import __version__

router = APIRouter()


@router.get("/health", status_code=status.HTTP_200_OK)
async def health() -> dict[str, str]:
    """Returns 200 OK whenever the process is serving requests."""
    return {
        "status": "healthy",
        "version": __version__,
        "timestamp": datetime.now(UTC).isoformat(),
    }
