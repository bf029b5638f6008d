# services/access_guard.py

from typing import Iterable, Optional, Union

from pydantic import BaseModel, ConfigDict

from models.enums import BaseStrEnum, Role, UserStatus
from services.session import SessionState


LOGIN_PATH = "/login"
UNAUTHORIZED_PATH = "/unauthorized"

NO_PROFILE_MESSAGE = "Your account is pending approval. Please contact an administrator."
PENDING_MESSAGE = "Your account is pending approval. Please wait for an administrator to activate it."
DISABLED_MESSAGE = "Your account has been disabled. Please contact an administrator."


class Decision(BaseStrEnum):
    PENDING = "PENDING"
    ALLOW = "ALLOW"
    DENY_REDIRECT = "DENY_REDIRECT"
    BLOCK_MESSAGE = "BLOCK_MESSAGE"


class AccessDecision(BaseModel):
    model_config = ConfigDict(frozen=True)

    decision: Decision
    target: Optional[str] = None
    from_path: Optional[str] = None
    message: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.decision == Decision.ALLOW


def status_message(status: Union[UserStatus, str]) -> str:
    """Pending accounts wait for activation; every other inactive status reads as disabled."""
    if status == UserStatus.pending:
        return PENDING_MESSAGE
    return DISABLED_MESSAGE


def decide_access(
    state: SessionState,
    required_roles: Union[Role, str, Iterable[Union[Role, str]]],
    current_path: Optional[str] = None,
    fallback_path: str = UNAUTHORIZED_PATH,
) -> AccessDecision:
    """
    Classify a resolved session against the roles a route requires.
    Pure: no I/O, never raises.
    """
    if state.loading:
        return AccessDecision(decision=Decision.PENDING)

    if state.identity is None:
        return AccessDecision(
            decision=Decision.DENY_REDIRECT,
            target=LOGIN_PATH,
            from_path=current_path,
        )

    profile = state.profile
    if profile is None:
        return AccessDecision(decision=Decision.BLOCK_MESSAGE, message=NO_PROFILE_MESSAGE)

    if profile.status != UserStatus.active:
        return AccessDecision(decision=Decision.BLOCK_MESSAGE, message=status_message(profile.status))

    if isinstance(required_roles, str):
        required_roles = [required_roles]
    allowed = {str(role) for role in required_roles}
    if profile.role.value not in allowed:
        return AccessDecision(decision=Decision.DENY_REDIRECT, target=fallback_path)

    return AccessDecision(decision=Decision.ALLOW)
