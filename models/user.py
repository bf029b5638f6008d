# models/user.py

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr, field_validator

from models.base import materialize_timestamp
from models.enums import Role, UserStatus


# ===============================================================
# PROFILE (users table): one per identity, keyed by identity id
# ===============================================================

class UserProfile(BaseModel):
    user_id: str
    email: str
    display_name: Optional[str] = None
    role: Role
    status: UserStatus
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def normalize_timestamps(cls, v):
        return materialize_timestamp(v)

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.active


class UserCreate(BaseModel):
    """
    Used when an admin creates an account directly.
    The temporary password is generated server-side and never returned.
    """
    email: EmailStr
    role: Role
    display_name: Optional[str] = None


class UserUpdate(BaseModel):
    """
    Partial update to a profile (admin only).
    Role changes reach the affected user on their next profile refresh.
    """
    display_name: Optional[str] = None
    role: Optional[Role] = None
    status: Optional[UserStatus] = None


class UserCreated(BaseModel):
    user_id: str
    email: str
    role: Role
    status: UserStatus = UserStatus.pending
