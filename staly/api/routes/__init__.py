"""
API router aggregating all route modules.
"""

from fastapi import APIRouter

from staly.api.routes import health, session, stays

router = APIRouter()

# Include all route modules
router.include_router(health.router, prefix="/health", tags=["Health"])
router.include_router(session.router, prefix="/session", tags=["Session"])
router.include_router(stays.router, prefix="/stays", tags=["Stays"])
