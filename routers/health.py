# routers/health.py

from fastapi import APIRouter
from core.config import settings
from core.config_validator import validate_required_config
from core.supabase_client import ping_supabase

router = APIRouter(
    prefix="/health",
    tags=["Health"],
)


# -----------------------------------------------------
# GET /health/db
# Checks Supabase connection + table queries
# No auth required
# -----------------------------------------------------
@router.get("/db", summary="Supabase / DB health check")
def health_db():
    """
    Verifies Supabase connectivity.
    - Checks if URL + key are configured
    - Attempts to query every document table
    - Returns row-count + error details per table
    """
    status = ping_supabase()
    return {
        "service": "Supabase",
        "status": status.get("status", "unknown"),
        "details": status,
    }


# -----------------------------------------------------
# GET /health/app
# Simple API health check for uptime monitors
# -----------------------------------------------------
@router.get("/app", summary="App health check")
def health_app():
    missing = validate_required_config()
    return {
        "service": settings.PROJECT_NAME,
        "status": "ok" if not missing else "misconfigured",
        "missing_config": missing,
    }
