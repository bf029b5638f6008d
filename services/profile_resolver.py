# services/profile_resolver.py

from typing import Optional

from core.collections import COLLECTION_USERS
from core.document_store import SERVER_TIMESTAMP, DocumentStore
from core.logging_config import logger
from models.auth import Identity
from models.enums import Role, UserStatus
from models.user import UserProfile


def default_display_name(email: str) -> str:
    return email.split("@")[0]


def profile_from_document(doc: dict, identity: Optional[Identity] = None) -> UserProfile:
    """
    Materialize a users document. The identity, when given, fills
    the email and display name the document does not carry.
    """
    data = dict(doc)
    data["user_id"] = data.get("user_id") or data.get("id")
    if identity is not None:
        data["email"] = identity.email or data.get("email") or ""
        data["display_name"] = data.get("display_name") or identity.display_name
    return UserProfile.model_validate(data)


class ProfileResolver:
    """Finds (and for first-time federated users, creates) the profile of an identity."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def fetch(self, identity: Identity) -> Optional[UserProfile]:
        doc = self.store.get(COLLECTION_USERS, identity.id)
        if doc is None:
            return None
        return profile_from_document(doc, identity)

    def ensure_profile(self, identity: Identity, role: Role = Role.LEAD) -> UserProfile:
        """
        Return the identity's profile, creating a pending one with `role`
        when none exists yet.
        """
        existing = self.fetch(identity)
        if existing is not None:
            return existing

        email = identity.email or ""
        self.store.set(
            COLLECTION_USERS,
            identity.id,
            {
                "user_id": identity.id,
                "email": email,
                "display_name": identity.display_name or default_display_name(email),
                "role": role.value,
                "status": UserStatus.pending.value,
                "created_at": SERVER_TIMESTAMP,
                "updated_at": SERVER_TIMESTAMP,
            },
        )
        logger.info(f"Created {role.value} profile for first-time identity {identity.id}")
        return self.fetch(identity)
