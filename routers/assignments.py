# routers/assignments.py

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from dependencies.auth import requires_role
from dependencies.services import get_assignment_manager
from models.assignment import AssignmentCreate, AssignmentUpdate, StaffAssignment
from models.enums import Role
from models.user import UserProfile
from services.assignments import AssignmentManager


router = APIRouter(
    prefix="/admin/assignments",
    tags=["Staff Assignments"],
)

admin_only = requires_role([Role.ADMIN])


@router.get("", response_model=List[StaffAssignment], summary="List assignments by project or staff")
def list_assignments(
    project_id: Optional[str] = None,
    staff_id: Optional[str] = None,
    current_admin: UserProfile = Depends(admin_only),
    assignments: AssignmentManager = Depends(get_assignment_manager),
):
    if project_id:
        return assignments.get_assignments_by_project(project_id)
    if staff_id:
        return assignments.get_assignments_by_staff(staff_id)
    raise HTTPException(400, "Pass project_id or staff_id")


@router.put(
    "/{staff_id}/{project_id}",
    response_model=StaffAssignment,
    summary="Assign staff to a project (overwrites an existing assignment)",
)
def assign_staff(
    staff_id: str,
    project_id: str,
    payload: AssignmentCreate,
    current_admin: UserProfile = Depends(admin_only),
    assignments: AssignmentManager = Depends(get_assignment_manager),
):
    return assignments.assign_staff_to_project(staff_id, project_id, payload.notes)


@router.patch("/{staff_id}/{project_id}", response_model=StaffAssignment, summary="Update an assignment")
def update_assignment(
    staff_id: str,
    project_id: str,
    payload: AssignmentUpdate,
    current_admin: UserProfile = Depends(admin_only),
    assignments: AssignmentManager = Depends(get_assignment_manager),
):
    return assignments.update_staff_assignment(staff_id, project_id, payload)


@router.delete("/{staff_id}/{project_id}", summary="Remove an assignment")
def remove_assignment(
    staff_id: str,
    project_id: str,
    current_admin: UserProfile = Depends(admin_only),
    assignments: AssignmentManager = Depends(get_assignment_manager),
):
    assignments.remove_staff_assignment(staff_id, project_id)
    return {"success": True}
