from enum import Enum


class BaseStrEnum(str, Enum):
    """
    Base enum that serializes cleanly to a string
    and provides a .list() method for UI dropdowns.
    """

    def __str__(self):
        return str(self.value)

    @classmethod
    def list(cls):
        return [item.value for item in cls]


# -----------------------------------------------------
# ROLE
# -----------------------------------------------------
class Role(BaseStrEnum):
    """Closed set of platform roles. Routing switches over all four."""

    ADMIN = "ADMIN"
    STAFF = "STAFF"
    CLIENT = "CLIENT"
    LEAD = "LEAD"


# -----------------------------------------------------
# USER STATUS
# -----------------------------------------------------
class UserStatus(BaseStrEnum):
    active = "active"
    pending = "pending"
    disabled = "disabled"


# -----------------------------------------------------
# LEAD STATUS
# -----------------------------------------------------
class LeadStatus(BaseStrEnum):
    """Workflow state for a lead. `approved` is only set by promotion."""

    new = "new"
    contacted = "contacted"
    approved = "approved"
    rejected = "rejected"


# -----------------------------------------------------
# CLIENT PROJECT STATUS
# -----------------------------------------------------
class ProjectStatus(BaseStrEnum):
    setup = "setup"
    active = "active"
    inactive = "inactive"


# -----------------------------------------------------
# STAFF ASSIGNMENT STATUS
# -----------------------------------------------------
class AssignmentStatus(BaseStrEnum):
    active = "active"
    inactive = "inactive"
    pending = "pending"
