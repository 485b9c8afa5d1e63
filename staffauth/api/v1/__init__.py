"""API routes."""

from fastapi import APIRouter

from staffauth.api.v1 import health, users


def build_router(include_admin_routes: bool = False) -> APIRouter:
    """Assemble the route table; edit/list user routes are opt-in."""
    router = APIRouter()
    router.include_router(health.router, prefix="/health", tags=["health"])
    router.include_router(users.router, prefix="/users", tags=["users"])
    if include_admin_routes:
        router.include_router(users.admin_router, prefix="/users", tags=["users"])
    return router
