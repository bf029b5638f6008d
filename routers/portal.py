# routers/portal.py

from typing import List

from fastapi import APIRouter, Depends

from dependencies.auth import requires_role
from dependencies.services import get_assignment_manager, get_project_service
from models.enums import Role
from models.project import ClientProject
from models.user import UserProfile
from services.assignments import AssignmentManager
from services.dashboard import ClientDashboard, StaffDashboard, client_dashboard, staff_dashboard
from services.projects import ProjectService


router = APIRouter(tags=["Portal"])

staff_only = requires_role([Role.STAFF])
client_only = requires_role([Role.CLIENT])


# -----------------------------------------------------
# STAFF
# -----------------------------------------------------
@router.get("/staff/dashboard", response_model=StaffDashboard, summary="Staff dashboard")
def read_staff_dashboard(
    profile: UserProfile = Depends(staff_only),
    assignments: AssignmentManager = Depends(get_assignment_manager),
):
    return staff_dashboard(profile, assignments)


@router.get("/staff/projects", response_model=List[ClientProject], summary="Projects assigned to me")
def read_staff_projects(
    profile: UserProfile = Depends(staff_only),
    assignments: AssignmentManager = Depends(get_assignment_manager),
):
    return staff_dashboard(profile, assignments).projects


# -----------------------------------------------------
# CLIENT
# -----------------------------------------------------
@router.get("/client/dashboard", response_model=ClientDashboard, summary="Client dashboard")
def read_client_dashboard(
    profile: UserProfile = Depends(client_only),
    projects: ProjectService = Depends(get_project_service),
):
    return client_dashboard(profile, projects)


@router.get("/client/projects", response_model=List[ClientProject], summary="My projects")
def read_client_projects(
    profile: UserProfile = Depends(client_only),
    projects: ProjectService = Depends(get_project_service),
):
    return projects.get_client_projects(profile.user_id)
