# routers/projects.py

from typing import List, Optional

from fastapi import APIRouter, Depends

from dependencies.auth import requires_role
from dependencies.services import get_assignment_manager, get_project_service
from models.enums import Role
from models.project import ClientProject, ClientProjectCreate, ClientProjectUpdate
from models.user import UserProfile
from services.assignments import AssignmentManager
from services.projects import ProjectService


router = APIRouter(
    prefix="/admin/projects",
    tags=["Client Projects"],
)

admin_only = requires_role([Role.ADMIN])


@router.get("", response_model=List[ClientProject], summary="List client projects")
def list_projects(
    client_id: Optional[str] = None,
    current_admin: UserProfile = Depends(admin_only),
    projects: ProjectService = Depends(get_project_service),
):
    return projects.get_client_projects(client_id)


@router.get("/{project_id}", response_model=ClientProject, summary="Get one client project")
def get_project(
    project_id: str,
    current_admin: UserProfile = Depends(admin_only),
    projects: ProjectService = Depends(get_project_service),
):
    return projects.require_project(project_id)


@router.post("", response_model=ClientProject, status_code=201, summary="Create a client project")
def create_project(
    payload: ClientProjectCreate,
    current_admin: UserProfile = Depends(admin_only),
    projects: ProjectService = Depends(get_project_service),
):
    project_id = projects.create_client_project(
        payload.client_id,
        payload.client_project_name,
        payload.credentials,
    )
    return projects.require_project(project_id)


@router.patch("/{project_id}", response_model=ClientProject, summary="Update a client project")
def update_project(
    project_id: str,
    payload: ClientProjectUpdate,
    current_admin: UserProfile = Depends(admin_only),
    projects: ProjectService = Depends(get_project_service),
):
    return projects.update_client_project(project_id, payload)


# -----------------------------------------------------
# DELETE: removes the project's staff assignments first
# -----------------------------------------------------
@router.delete("/{project_id}", summary="Delete a client project")
def delete_project(
    project_id: str,
    current_admin: UserProfile = Depends(admin_only),
    assignments: AssignmentManager = Depends(get_assignment_manager),
):
    assignments.delete_client_project(project_id)
    return {"success": True, "client_project_id": project_id}
