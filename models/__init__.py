# -------------------------
# Enums
# -------------------------
from .enums import (
    AssignmentStatus,
    LeadStatus,
    ProjectStatus,
    Role,
    UserStatus,
)

# -------------------------
# User Profiles
# -------------------------
from .user import (
    UserCreate,
    UserCreated,
    UserProfile,
    UserUpdate,
)

# -------------------------
# Leads
# -------------------------
from .lead import (
    Lead,
    LeadCreate,
    LeadStatusUpdate,
    SurveyResponses,
)

# -------------------------
# Client Projects
# -------------------------
from .project import (
    ClientProject,
    ClientProjectCreate,
    ClientProjectUpdate,
    ExternalCredentials,
)

# -------------------------
# Staff Assignments
# -------------------------
from .assignment import (
    AssignmentCreate,
    AssignmentUpdate,
    StaffAssignment,
    assignment_key,
)

# -------------------------
# Auth Models
# -------------------------
from .auth import (
    AuthTokens,
    Identity,
    LoginRequest,
    SignInResponse,
)

__all__ = [
    # enums
    "AssignmentStatus",
    "LeadStatus",
    "ProjectStatus",
    "Role",
    "UserStatus",

    # users
    "UserCreate",
    "UserCreated",
    "UserProfile",
    "UserUpdate",

    # leads
    "Lead",
    "LeadCreate",
    "LeadStatusUpdate",
    "SurveyResponses",

    # projects
    "ClientProject",
    "ClientProjectCreate",
    "ClientProjectUpdate",
    "ExternalCredentials",

    # assignments
    "AssignmentCreate",
    "AssignmentUpdate",
    "StaffAssignment",
    "assignment_key",

    # auth
    "AuthTokens",
    "Identity",
    "LoginRequest",
    "SignInResponse",
]
