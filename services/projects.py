# services/projects.py

import uuid
from typing import List, Optional

from core.collections import COLLECTION_CLIENT_PROJECTS
from core.document_store import SERVER_TIMESTAMP, DocumentStore
from core.errors import InvalidReference, NotFound
from core.logging_config import logger
from models.enums import ProjectStatus, Role
from models.project import ClientProject, ClientProjectUpdate, ExternalCredentials
from services.users import UserService


def project_from_document(doc: dict) -> ClientProject:
    data = dict(doc)
    data["client_project_id"] = data.get("client_project_id") or data.get("id")
    return ClientProject.model_validate(data)


def default_project_name(clinic_name: str) -> str:
    return f"{clinic_name} Project"


class ProjectService:
    def __init__(self, store: DocumentStore, users: UserService):
        self.store = store
        self.users = users

    def get_client_projects(self, client_id: Optional[str] = None) -> List[ClientProject]:
        filters = {"client_id": client_id} if client_id else None
        docs = self.store.query(COLLECTION_CLIENT_PROJECTS, filters, order_by="created_at")
        return [project_from_document(d) for d in docs]

    def get_client_project_by_id(self, project_id: str) -> Optional[ClientProject]:
        doc = self.store.get(COLLECTION_CLIENT_PROJECTS, project_id)
        return project_from_document(doc) if doc else None

    def require_project(self, project_id: str) -> ClientProject:
        project = self.get_client_project_by_id(project_id)
        if project is None:
            raise NotFound("Client project", project_id)
        return project

    def create_client_project(
        self,
        client_id: str,
        project_name: str,
        credentials: Optional[ExternalCredentials] = None,
    ) -> str:
        """
        New project in `setup` status. The owner must be a CLIENT profile;
        the credential bundle defaults to an empty placeholder.
        """
        owner = self.users.require_user(client_id)
        if owner.role != Role.CLIENT:
            raise InvalidReference(f"User {client_id} is {owner.role}, not {Role.CLIENT}")

        project_id = str(uuid.uuid4())
        self.store.set(
            COLLECTION_CLIENT_PROJECTS,
            project_id,
            {
                "client_project_id": project_id,
                "client_id": client_id,
                "client_project_name": project_name,
                "credentials": (credentials or ExternalCredentials()).model_dump(),
                "status": ProjectStatus.setup.value,
                "created_at": SERVER_TIMESTAMP,
                "updated_at": SERVER_TIMESTAMP,
            },
        )
        logger.info(f"Created client project {project_id} ('{project_name}') for {client_id}")
        return project_id

    def update_client_project(self, project_id: str, updates: ClientProjectUpdate) -> ClientProject:
        fields = updates.model_dump(exclude_none=True, mode="json")
        fields["updated_at"] = SERVER_TIMESTAMP
        self.store.update(COLLECTION_CLIENT_PROJECTS, project_id, fields)
        return self.require_project(project_id)
