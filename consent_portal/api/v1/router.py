"""API v1 router aggregating all endpoints."""

from fastapi import APIRouter

from consent_portal.api.v1 import admin, audit, consent, health, profiles, reference

api_router = APIRouter()

# Health check
api_router.include_router(
    health.router,
    prefix="/health",
    tags=["health"],
)

# Caller profile
api_router.include_router(profiles.router)

# Hospitals and research projects
api_router.include_router(reference.router)

# Patient consent
api_router.include_router(consent.router)

# Consent statistics and export
api_router.include_router(admin.router)

# Audit log (read-only)
api_router.include_router(
    audit.router,
    prefix="/audit",
    tags=["audit"],
)
