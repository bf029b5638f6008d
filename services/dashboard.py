# services/dashboard.py

from typing import List

from pydantic import BaseModel

from models.assignment import StaffAssignment
from models.enums import LeadStatus
from models.project import ClientProject
from models.user import UserProfile
from services.assignments import AssignmentManager
from services.leads import LeadService
from services.projects import ProjectService
from services.users import UserService


class AdminStats(BaseModel):
    new_leads: int
    total_users: int
    total_projects: int


class StaffDashboard(BaseModel):
    profile: UserProfile
    assignments: List[StaffAssignment]
    projects: List[ClientProject]


class ClientDashboard(BaseModel):
    profile: UserProfile
    projects: List[ClientProject]


def admin_stats(leads: LeadService, users: UserService, projects: ProjectService) -> AdminStats:
    return AdminStats(
        new_leads=len(leads.get_leads(LeadStatus.new)),
        total_users=len(users.get_users()),
        total_projects=len(projects.get_client_projects()),
    )


def staff_dashboard(profile: UserProfile, assignments: AssignmentManager) -> StaffDashboard:
    """Assignments of one staff member, with the projects they point at."""
    mine = assignments.get_assignments_by_staff(profile.user_id)

    projects = []
    for assignment in mine:
        project = assignments.projects.get_client_project_by_id(assignment.client_project_id)
        # Dangling assignments (project deleted elsewhere) are skipped
        if project is not None:
            projects.append(project)

    return StaffDashboard(profile=profile, assignments=mine, projects=projects)


def client_dashboard(profile: UserProfile, projects: ProjectService) -> ClientDashboard:
    return ClientDashboard(profile=profile, projects=projects.get_client_projects(profile.user_id))
