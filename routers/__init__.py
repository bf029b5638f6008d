# routers/__init__.py

from fastapi import APIRouter

from .auth import router as auth_router
from .signup import router as signup_router
from .admin import router as admin_router
from .leads import router as leads_router
from .projects import router as projects_router
from .assignments import router as assignments_router
from .portal import router as portal_router
from .navigation import router as navigation_router
from .health import router as health_router


api_router = APIRouter()

# Auth + public
api_router.include_router(auth_router)
api_router.include_router(signup_router)

# Admin
api_router.include_router(admin_router)
api_router.include_router(leads_router)
api_router.include_router(projects_router)
api_router.include_router(assignments_router)

# Staff / client portals
api_router.include_router(portal_router)

# Routing helpers
api_router.include_router(navigation_router)

# Health
api_router.include_router(health_router)

__all__ = ["api_router"]
