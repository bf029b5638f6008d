# models/project.py

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from models.base import materialize_timestamp
from models.enums import ProjectStatus


REQUIRED_CREDENTIAL_FIELDS = (
    "api_key",
    "auth_domain",
    "project_id",
    "storage_bucket",
    "messaging_sender_id",
    "app_id",
)


class ExternalCredentials(BaseModel):
    """
    Connection bundle for a client's own backend project.
    Created empty at promotion time and filled in later by an admin.
    """
    api_key: str = ""
    auth_domain: str = ""
    project_id: str = ""
    storage_bucket: str = ""
    messaging_sender_id: str = ""
    app_id: str = ""
    measurement_id: Optional[str] = None

    def is_configured(self) -> bool:
        for name in REQUIRED_CREDENTIAL_FIELDS:
            value = getattr(self, name)
            if not value or "YOUR_" in value:
                return False
        return True


class ClientProject(BaseModel):
    client_project_id: str
    client_id: str
    client_project_name: str
    credentials: ExternalCredentials = Field(default_factory=ExternalCredentials)
    status: ProjectStatus = ProjectStatus.setup
    created_at: datetime
    updated_at: datetime

    @field_validator("credentials", mode="before")
    @classmethod
    def default_credentials(cls, v):
        return v or {}

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def normalize_timestamps(cls, v):
        return materialize_timestamp(v)

    @property
    def credentials_configured(self) -> bool:
        return self.credentials.is_configured()


class ClientProjectCreate(BaseModel):
    client_id: str
    client_project_name: str = Field(..., min_length=1)
    credentials: Optional[ExternalCredentials] = None


class ClientProjectUpdate(BaseModel):
    client_project_name: Optional[str] = None
    credentials: Optional[ExternalCredentials] = None
    status: Optional[ProjectStatus] = None
