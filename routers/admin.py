# routers/admin.py

from typing import List, Optional

from fastapi import APIRouter, Depends

from core.logging_config import logger
from dependencies.auth import requires_role
from dependencies.services import (
    get_lead_service,
    get_project_service,
    get_user_service,
)
from models.enums import Role
from models.user import UserCreate, UserCreated, UserProfile, UserUpdate
from services.dashboard import AdminStats, admin_stats
from services.leads import LeadService
from services.projects import ProjectService
from services.users import UserService


router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
)

admin_only = requires_role([Role.ADMIN])


# -----------------------------------------------------
# DASHBOARD
# -----------------------------------------------------
@router.get("/dashboard", response_model=AdminStats, summary="Admin dashboard counters")
def dashboard(
    current_admin: UserProfile = Depends(admin_only),
    leads: LeadService = Depends(get_lead_service),
    users: UserService = Depends(get_user_service),
    projects: ProjectService = Depends(get_project_service),
):
    return admin_stats(leads, users, projects)


# -----------------------------------------------------
# LIST USERS
# -----------------------------------------------------
@router.get("/users", response_model=List[UserProfile], summary="List user profiles")
def list_users(
    role: Optional[Role] = None,
    current_admin: UserProfile = Depends(admin_only),
    users: UserService = Depends(get_user_service),
):
    if role:
        return users.get_users_by_role(role)
    return users.get_users()


@router.get("/users/{user_id}", response_model=UserProfile, summary="Get one user profile")
def get_user(
    user_id: str,
    current_admin: UserProfile = Depends(admin_only),
    users: UserService = Depends(get_user_service),
):
    return users.require_user(user_id)


# -----------------------------------------------------
# CREATE USER (identity + pending profile + setup email)
# -----------------------------------------------------
@router.post("/users", response_model=UserCreated, status_code=201, summary="Create a user account")
def create_user(
    payload: UserCreate,
    current_admin: UserProfile = Depends(admin_only),
    users: UserService = Depends(get_user_service),
):
    email = payload.email.strip().lower()
    user_id = users.create_user(email, payload.role, payload.display_name)
    logger.info(f"Admin {current_admin.user_id} created {payload.role} user {user_id}")
    return UserCreated(user_id=user_id, email=email, role=payload.role)


# -----------------------------------------------------
# UPDATE / DELETE USER
# -----------------------------------------------------
@router.patch("/users/{user_id}", response_model=UserProfile, summary="Update role, status or name")
def update_user(
    user_id: str,
    payload: UserUpdate,
    current_admin: UserProfile = Depends(admin_only),
    users: UserService = Depends(get_user_service),
):
    users.require_user(user_id)
    return users.update_user(user_id, payload)


@router.delete("/users/{user_id}", summary="Delete a user profile")
def delete_user(
    user_id: str,
    current_admin: UserProfile = Depends(admin_only),
    users: UserService = Depends(get_user_service),
):
    users.delete_user(user_id)
    return {"success": True, "user_id": user_id}
