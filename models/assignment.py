# models/assignment.py

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, field_validator

from models.base import materialize_timestamp
from models.enums import AssignmentStatus


def assignment_key(staff_id: str, client_project_id: str) -> str:
    """Composite document id for a (staff, project) pair."""
    return f"{staff_id}_{client_project_id}"


class StaffAssignment(BaseModel):
    """
    Staff ↔ client project link. Identity is the (staff_id, client_project_id)
    pair; there is no surrogate key.
    """
    staff_id: str
    client_project_id: str
    assignment_status: AssignmentStatus = AssignmentStatus.active
    notes: Optional[str] = None
    assigned_at: datetime

    @field_validator("assigned_at", mode="before")
    @classmethod
    def normalize_assigned_at(cls, v):
        return materialize_timestamp(v)

    @property
    def key(self) -> str:
        return assignment_key(self.staff_id, self.client_project_id)


class AssignmentCreate(BaseModel):
    notes: Optional[str] = None


class AssignmentUpdate(BaseModel):
    assignment_status: Optional[AssignmentStatus] = None
    notes: Optional[str] = None
