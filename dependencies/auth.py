from typing import Iterable, Optional, Union
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt

from core.config import settings
from core.errors import AccountDisabledOrPending, ProfileNotFound, StoreUnavailable
from core.identity_gateway import IdentityGateway
from core.local_storage import EMAIL_FOR_SIGN_IN, MemoryStorage
from core.logging_config import logger
from dependencies.services import get_identity_gateway, get_profile_resolver
from models.auth import Identity
from models.enums import Role
from models.user import UserProfile
from services.access_guard import LOGIN_PATH, AccessDecision, Decision, decide_access
from services.profile_resolver import ProfileResolver
from services.session import (
    PROFILE_NOT_FOUND_MESSAGE,
    AuthSession,
    SessionState,
    resolve_session_state,
)


bearer_scheme = HTTPBearer(auto_error=False)

JWT_ALGORITHMS = ["HS256"]
JWT_AUDIENCE = "authenticated"


def _unauthorized(detail: str = "Invalid or expired authentication token") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


# ============================================================
# TOKEN DECODING (local JWT check, or Supabase GoTrue)
# ============================================================
def decode_access_token(token: str, secret: str) -> Identity:
    """
    Verify a Supabase access token locally.
    Raises JWTError for a bad signature, wrong audience or expired token.
    """
    claims = jwt.decode(token, secret, algorithms=JWT_ALGORITHMS, audience=JWT_AUDIENCE)

    subject = claims.get("sub")
    if not subject:
        raise JWTError("Token has no subject")

    metadata = claims.get("user_metadata") or {}
    return Identity(
        id=subject,
        email=claims.get("email"),
        display_name=metadata.get("full_name") or metadata.get("name"),
    )


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    return credentials.credentials if credentials else None


def get_request_identity(
    token: Optional[str] = Depends(get_bearer_token),
    gateway: IdentityGateway = Depends(get_identity_gateway),
) -> Optional[Identity]:
    """
    Identity behind the bearer token, or None when no token was sent.
    A token that is sent but invalid is a 401.
    """
    if not token:
        return None

    if settings.SUPABASE_JWT_SECRET:
        try:
            return decode_access_token(token, settings.SUPABASE_JWT_SECRET)
        except JWTError as e:
            logger.info(f"Rejected access token: {e}")
            raise _unauthorized()

    identity = gateway.get_identity(token)
    if identity is None:
        raise _unauthorized()
    return identity


# ============================================================
# SESSION STATE (per request)
# ============================================================
def get_session_state(
    identity: Optional[Identity] = Depends(get_request_identity),
    resolver: ProfileResolver = Depends(get_profile_resolver),
) -> SessionState:
    return resolve_session_state(identity, resolver)


def get_auth_session(
    request: Request,
    gateway: IdentityGateway = Depends(get_identity_gateway),
    resolver: ProfileResolver = Depends(get_profile_resolver),
):
    """
    AuthSession for one sign-in flow. The emailForSignIn value rides in a
    cookie and is staged into the session storage for the request.
    """
    storage = MemoryStorage({EMAIL_FOR_SIGN_IN: request.cookies.get(EMAIL_FOR_SIGN_IN)})
    session = AuthSession(
        gateway,
        resolver,
        storage=storage,
        email_link_return_url=settings.email_link_return_url,
    )
    with session:
        yield session


# ============================================================
# ACCESS DECISION → HTTP
# ============================================================
def raise_for_decision(decision: AccessDecision, state: SessionState):
    if decision.decision == Decision.ALLOW:
        return

    if decision.decision == Decision.PENDING:
        raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, "Session is still loading")

    if decision.decision == Decision.DENY_REDIRECT:
        if decision.target == LOGIN_PATH:
            raise _unauthorized("Not authenticated")
        raise HTTPException(status.HTTP_403_FORBIDDEN, "You do not have access to this page")

    # BLOCK_MESSAGE. A failed profile lookup is reported as an outage,
    # not as a missing profile.
    if state.profile is None:
        if state.error and state.error != PROFILE_NOT_FOUND_MESSAGE:
            raise StoreUnavailable(state.error)
        raise ProfileNotFound(decision.message)
    raise AccountDisabledOrPending(decision.message)


# ============================================================
# ROLE CHECKER
# ============================================================
def requires_role(allowed_roles: Iterable[Union[Role, str]]):
    allowed_roles = list(allowed_roles)

    def checker(request: Request, state: SessionState = Depends(get_session_state)) -> UserProfile:
        decision = decide_access(state, allowed_roles, current_path=request.url.path)
        raise_for_decision(decision, state)
        return state.profile

    return checker
