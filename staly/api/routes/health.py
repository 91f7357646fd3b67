"""
Health check endpoints.
"""

from fastapi import APIRouter

from staly.api.deps import ContainerDep

router = APIRouter()


@router.get("/")
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy", "message": "Staly API is running"}


@router.get("/ready")
async def readiness_check(container: ContainerDep):
    """
    Readiness check - verify the storage backend answers.
    """
    checks = {"api": "ready"}
    try:
        await container.auth.store.load_session()
        checks["storage"] = "ready"
    except Exception:
        checks["storage"] = "unavailable"

    all_ready = all(v == "ready" for v in checks.values())

    return {
        "status": "ready" if all_ready else "not_ready",
        "checks": checks,
    }
