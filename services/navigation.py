# services/navigation.py

from typing import Dict, FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict

from models.enums import Role
from services.access_guard import LOGIN_PATH, UNAUTHORIZED_PATH
from services.session import SessionState


class RouteRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    required_roles: FrozenSet[Role] = frozenset()

    @property
    def public(self) -> bool:
        return not self.required_roles

    def matches(self, path: str) -> bool:
        if self.path.endswith("/*"):
            prefix = self.path[:-1]
            return path.startswith(prefix) or path == prefix.rstrip("/")
        return path == self.path


# ============================================
# ROUTE TABLE (page layer)
# ============================================
ROUTE_TABLE: List[RouteRule] = [
    RouteRule(path="/"),
    RouteRule(path=LOGIN_PATH),
    RouteRule(path="/signup"),
    RouteRule(path=UNAUTHORIZED_PATH),
    RouteRule(path="/complete-signin"),
    RouteRule(path="/admin/*", required_roles=frozenset({Role.ADMIN})),
    RouteRule(path="/staff/*", required_roles=frozenset({Role.STAFF})),
    RouteRule(path="/client/*", required_roles=frozenset({Role.CLIENT})),
]


def find_route(path: str) -> Optional[RouteRule]:
    for rule in ROUTE_TABLE:
        if rule.matches(path):
            return rule
    return None


# ============================================
# ROLE → DASHBOARD
# ============================================
# Every Role must appear here; None means the role has no dashboard.
ROLE_DASHBOARDS: Dict[Role, Optional[str]] = {
    Role.ADMIN: "/admin/dashboard",
    Role.STAFF: "/staff/dashboard",
    Role.CLIENT: "/client/dashboard",
    Role.LEAD: None,
}

_missing_roles = set(Role) - set(ROLE_DASHBOARDS)
if _missing_roles:
    raise RuntimeError(f"ROLE_DASHBOARDS is missing roles: {sorted(_missing_roles)}")


def dashboard_path(state: SessionState) -> Optional[str]:
    """
    Where the generic /dashboard path lands for this session.
    None while the session is still loading.
    """
    if state.loading:
        return None
    if state.profile is None:
        return LOGIN_PATH if state.identity is None else UNAUTHORIZED_PATH
    return ROLE_DASHBOARDS[state.profile.role] or UNAUTHORIZED_PATH


# ============================================
# ROLE → NAVIGATION MENU
# ============================================
class NavItem(BaseModel):
    path: str
    label: str


NAV_ITEMS: Dict[Role, List[NavItem]] = {
    Role.ADMIN: [
        NavItem(path="/admin/dashboard", label="Dashboard"),
        NavItem(path="/admin/leads", label="Lead Management"),
        NavItem(path="/admin/users", label="User Management"),
        NavItem(path="/admin/projects", label="Client Projects"),
        NavItem(path="/admin/assignments", label="Staff Assignments"),
    ],
    Role.STAFF: [
        NavItem(path="/staff/dashboard", label="Dashboard"),
        NavItem(path="/staff/projects", label="My Projects"),
    ],
    Role.CLIENT: [
        NavItem(path="/client/dashboard", label="Dashboard"),
        NavItem(path="/client/projects", label="My Projects"),
    ],
    Role.LEAD: [],
}


def navigation_for(state: SessionState) -> List[NavItem]:
    if state.profile is None:
        return []
    return NAV_ITEMS[state.profile.role]
