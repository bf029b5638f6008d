# services/users.py

import secrets
import string
from typing import List, Optional

from core.auth_errors import GatewayError, translate_gateway_error
from core.collections import COLLECTION_USERS
from core.config import CompensationPolicy
from core.document_store import SERVER_TIMESTAMP, DocumentStore
from core.errors import NotFound, StoreUnavailable
from core.identity_gateway import IdentityGateway
from core.logging_config import logger
from models.enums import Role, UserStatus
from models.user import UserProfile, UserUpdate
from services.profile_resolver import default_display_name, profile_from_document


TEMP_PASSWORD_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZabcdefghjkmnpqrstuvwxyz23456789!@#$%"
TEMP_PASSWORD_LENGTH = 12

_CHARACTER_CLASSES = (
    "ABCDEFGHJKLMNPQRSTUVWXYZ",
    "abcdefghjkmnpqrstuvwxyz",
    "23456789",
    "!@#$%",
)


def generate_temp_password(length: int = TEMP_PASSWORD_LENGTH) -> str:
    """
    Random throwaway password with at least one upper, lower, digit and
    symbol character. Nobody ever types it: a setup e-mail follows.
    """
    if length < len(_CHARACTER_CLASSES):
        raise ValueError(f"length must be at least {len(_CHARACTER_CLASSES)}")

    chars = [secrets.choice(group) for group in _CHARACTER_CLASSES]
    chars += [secrets.choice(TEMP_PASSWORD_ALPHABET) for _ in range(length - len(chars))]
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)


class UserService:
    """
    Profile reads/writes plus account provisioning.

    Provisioning creates the identity first and the profile second. When
    the profile write fails, `compensation_policy` decides what happens to
    the identity that now has no profile:

        manual               leave it, log it for manual cleanup
        delete_identity      delete the identity again
        retry_profile_write  retry the write `profile_write_retries` times
    """

    def __init__(
        self,
        store: DocumentStore,
        gateway: IdentityGateway,
        compensation_policy: CompensationPolicy = "manual",
        profile_write_retries: int = 2,
    ):
        self.store = store
        self.gateway = gateway
        self.compensation_policy = compensation_policy
        self.profile_write_retries = profile_write_retries

    # ----------------------------------------------------------
    # Reads
    # ----------------------------------------------------------
    def get_users(self) -> List[UserProfile]:
        docs = self.store.query(COLLECTION_USERS, order_by="created_at")
        return [profile_from_document(d) for d in docs]

    def get_users_by_role(self, role: Role) -> List[UserProfile]:
        docs = self.store.query(COLLECTION_USERS, {"role": role.value}, order_by="created_at")
        return [profile_from_document(d) for d in docs]

    def get_user_by_id(self, user_id: str) -> Optional[UserProfile]:
        doc = self.store.get(COLLECTION_USERS, user_id)
        return profile_from_document(doc) if doc else None

    def require_user(self, user_id: str) -> UserProfile:
        profile = self.get_user_by_id(user_id)
        if profile is None:
            raise NotFound("User", user_id)
        return profile

    def get_user_by_email(self, email: str) -> Optional[UserProfile]:
        docs = self.store.query(COLLECTION_USERS, {"email": email})
        return profile_from_document(docs[0]) if docs else None

    # ----------------------------------------------------------
    # Provisioning
    # ----------------------------------------------------------
    def create_account(self, email: str, role: Role, display_name: Optional[str] = None) -> str:
        """
        Create the identity (with a temporary password) and its pending
        profile. Fails with AuthFailure if the e-mail is already registered.
        """
        try:
            user_id = self.gateway.create_account_with_password(
                email, generate_temp_password(), display_name
            )
        except GatewayError as e:
            logger.warning(f"Identity creation failed for {email}: {e.code}")
            raise translate_gateway_error(e) from None

        fields = {
            "user_id": user_id,
            "email": email,
            "display_name": display_name or default_display_name(email),
            "role": role.value,
            "status": UserStatus.pending.value,
            "created_at": SERVER_TIMESTAMP,
            "updated_at": SERVER_TIMESTAMP,
        }
        self._write_profile(user_id, fields)

        logger.info(f"Created {role.value} account {user_id} for {email}")
        return user_id

    def _write_profile(self, user_id: str, fields: dict):
        attempts = 1
        if self.compensation_policy == "retry_profile_write":
            attempts += self.profile_write_retries

        last_error = None
        for attempt in range(1, attempts + 1):
            try:
                self.store.set(COLLECTION_USERS, user_id, fields)
                return
            except StoreUnavailable as e:
                logger.warning(f"Profile write for {user_id} failed (attempt {attempt}/{attempts}): {e.message}")
                last_error = e

        if self.compensation_policy == "delete_identity":
            try:
                self.gateway.delete_account(user_id)
                logger.info(f"Deleted orphaned identity {user_id} after failed profile write")
            except GatewayError as e:
                logger.error(f"Could not delete orphaned identity {user_id}: {e.message}")
        else:
            logger.error(f"Identity {user_id} has no profile and needs manual cleanup")

        raise last_error

    def send_setup_email(self, email: str):
        try:
            self.gateway.send_password_reset_email(email)
        except GatewayError as e:
            logger.warning(f"Setup e-mail failed for {email}: {e.code}")
            raise translate_gateway_error(e) from None

    def create_user(self, email: str, role: Role, display_name: Optional[str] = None) -> str:
        user_id = self.create_account(email, role, display_name)
        self.send_setup_email(email)
        return user_id

    # ----------------------------------------------------------
    # Admin mutations
    # ----------------------------------------------------------
    def update_user(self, user_id: str, updates: UserUpdate) -> UserProfile:
        fields = updates.model_dump(exclude_none=True, mode="json")
        fields["updated_at"] = SERVER_TIMESTAMP
        self.store.update(COLLECTION_USERS, user_id, fields)
        return self.require_user(user_id)

    def delete_user(self, user_id: str):
        """Removes the profile only; projects and assignments are left as they are."""
        self.store.delete(COLLECTION_USERS, user_id)
        logger.info(f"Deleted profile {user_id}")
