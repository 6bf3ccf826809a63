from fastapi import APIRouter

from .routes import (
    businesses,
    customers,
    health,
    public,
    scans,
)

api_router = APIRouter()

# Health check
api_router.include_router(health.router, tags=["health"])

# Business-scoped resources (operator dashboard)
api_router.include_router(businesses.router, prefix="/businesses", tags=["businesses"])
api_router.include_router(customers.router, prefix="/customers", tags=["customers"])

# Scanner app
api_router.include_router(scans.router, prefix="/scans", tags=["scans"])

# Public endpoints (no auth required)
api_router.include_router(public.router, prefix="/public", tags=["public"])
