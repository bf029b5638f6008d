from fastapi import APIRouter, Depends, Request, Response
from typing import Optional

from core.config import settings
from core.local_storage import EMAIL_FOR_SIGN_IN
from core.logging_config import logger
from core.rate_limiter import RateLimiter, get_rate_limit_identifier
from dependencies.auth import get_auth_session, get_bearer_token, get_session_state
from dependencies.services import get_rate_limiter
from models.auth import (
    AuthTokens,
    EmailLinkCheckRequest,
    EmailLinkCompleteRequest,
    EmailRequest,
    FederatedCompleteRequest,
    LoginRequest,
    SignInResponse,
)
from services.access_guard import status_message
from services.navigation import dashboard_path, navigation_for
from services.session import AuthSession, SessionState


router = APIRouter(
    prefix="/auth",
    tags=["Auth"],
)

EMAIL_COOKIE_MAX_AGE = 60 * 60 * 24


def sign_in_response(tokens: AuthTokens, state: SessionState) -> SignInResponse:
    """Tokens plus where the caller should go next."""
    profile = state.profile
    message = state.error
    if profile is not None and not profile.is_active:
        message = status_message(profile.status)

    return SignInResponse(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        expires_in=tokens.expires_in,
        token_type=tokens.token_type,
        session_status=state.status.value,
        profile=profile,
        redirect_to=dashboard_path(state),
        message=message,
    )


# ============================================================
# LOGIN (email + password)
# ============================================================
@router.post("/login", response_model=SignInResponse, summary="Authenticate user")
def login(
    payload: LoginRequest,
    request: Request,
    session: AuthSession = Depends(get_auth_session),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    email = payload.email.strip().lower()
    limiter.require(request, get_rate_limit_identifier(request, scope="login"))

    tokens = session.sign_in_with_password(email, payload.password)
    logger.info(f"Password sign-in for {email}: {session.state.status}")
    return sign_in_response(tokens, session.state)


# ============================================================
# FEDERATED SIGN-IN
# ============================================================
@router.get("/federated/start", summary="Provider URL for federated sign-in")
def federated_start(
    redirect_to: Optional[str] = None,
    session: AuthSession = Depends(get_auth_session),
):
    url = session.begin_federated_sign_in(redirect_to or settings.FRONTEND_URL)
    return {"url": url}


@router.post("/federated/complete", response_model=SignInResponse, summary="Finish federated sign-in")
def federated_complete(
    payload: FederatedCompleteRequest,
    session: AuthSession = Depends(get_auth_session),
):
    """
    First-time identities get a pending LEAD profile and are told to wait
    for an administrator.
    """
    tokens = session.sign_in_with_federated_provider(
        payload.access_token or "",
        payload.refresh_token or "",
        payload.error_code,
    )
    return sign_in_response(tokens, session.state)


# ============================================================
# LOGOUT
# ============================================================
@router.post("/logout", summary="Revoke the current session")
def logout(
    token: Optional[str] = Depends(get_bearer_token),
    session: AuthSession = Depends(get_auth_session),
):
    session.sign_out(token)
    return {"success": True}


# ============================================================
# CURRENT SESSION
# ============================================================
@router.get("/me", summary="Session state for the bearer token")
def read_me(state: SessionState = Depends(get_session_state)):
    return {
        "status": state.status.value,
        "identity": state.identity,
        "profile": state.profile,
        "error": state.error,
        "dashboard": dashboard_path(state),
        "navigation": navigation_for(state),
    }


# ============================================================
# PASSWORD RESET / SETUP LINK
# ============================================================
@router.post("/password-reset", summary="Send a password reset email")
def password_reset(
    payload: EmailRequest,
    request: Request,
    session: AuthSession = Depends(get_auth_session),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    email = payload.email.strip().lower()
    limiter.require(request, get_rate_limit_identifier(request, scope="password-reset"))

    session.send_password_reset(email)
    logger.info(f"Password reset email sent: email={email}")
    return {"success": True, "message": "Password reset email sent."}


@router.post("/setup-link", summary="Send a passwordless setup link")
def setup_link(
    payload: EmailRequest,
    request: Request,
    response: Response,
    session: AuthSession = Depends(get_auth_session),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    email = payload.email.strip().lower()
    limiter.require(request, get_rate_limit_identifier(request, scope="setup-link"))

    session.send_password_setup_link(email)
    response.set_cookie(
        EMAIL_FOR_SIGN_IN,
        session.storage.get(EMAIL_FOR_SIGN_IN),
        max_age=EMAIL_COOKIE_MAX_AGE,
        httponly=True,
        samesite="lax",
    )
    logger.info(f"Setup link sent: email={email}")
    return {"success": True, "message": "Sign-in link sent. Check your email."}


@router.post("/email-link/check", summary="Is this URL a sign-in link?")
def email_link_check(payload: EmailLinkCheckRequest, session: AuthSession = Depends(get_auth_session)):
    return {"is_email_link": session.is_pending_email_link_completion(payload.url)}


@router.post("/email-link/complete", response_model=SignInResponse, summary="Redeem a sign-in link")
def email_link_complete(
    payload: EmailLinkCompleteRequest,
    response: Response,
    session: AuthSession = Depends(get_auth_session),
):
    tokens = session.complete_email_link_sign_in(payload.url, payload.email)
    response.delete_cookie(EMAIL_FOR_SIGN_IN)
    return sign_in_response(tokens, session.state)
