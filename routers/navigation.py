# routers/navigation.py

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import RedirectResponse

from dependencies.auth import get_session_state
from services.access_guard import AccessDecision, Decision, decide_access
from services.navigation import ROUTE_TABLE, NavItem, dashboard_path, find_route, navigation_for
from services.session import SessionState


router = APIRouter(tags=["Navigation"])


# -----------------------------------------------------
# /dashboard → role-specific dashboard
# -----------------------------------------------------
@router.get("/dashboard", include_in_schema=False)
def dashboard_redirect(state: SessionState = Depends(get_session_state)):
    return RedirectResponse(dashboard_path(state), status_code=status.HTTP_302_FOUND)


# -----------------------------------------------------
# Route table + guard decisions for the page layer
# -----------------------------------------------------
@router.get("/navigation/routes", summary="Route table (path → required roles)")
def list_routes():
    return [
        {"path": rule.path, "required_roles": sorted(r.value for r in rule.required_roles)}
        for rule in ROUTE_TABLE
    ]


@router.get("/navigation/access", response_model=AccessDecision, summary="Guard decision for a page")
def check_access(path: str, state: SessionState = Depends(get_session_state)):
    rule = find_route(path)
    if rule is None:
        raise HTTPException(404, f"No route for {path}")
    if rule.public:
        return AccessDecision(decision=Decision.ALLOW)
    return decide_access(state, rule.required_roles, current_path=path)


@router.get("/navigation/menu", response_model=List[NavItem], summary="Menu entries for my role")
def read_menu(state: SessionState = Depends(get_session_state)):
    return navigation_for(state)
