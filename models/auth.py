from typing import Optional
from pydantic import BaseModel, EmailStr

from models.user import UserProfile


# -----------------------------------------------------
# IDENTITY (Supabase Auth principal, read-only here)
# -----------------------------------------------------
class Identity(BaseModel):
    id: str
    email: Optional[str] = None
    display_name: Optional[str] = None


# -----------------------------------------------------
# SIGN-IN RESULT (identity + Supabase session tokens)
# -----------------------------------------------------
class AuthTokens(BaseModel):
    identity: Identity
    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    token_type: str = "bearer"


# -----------------------------------------------------
# REQUEST BODIES
# -----------------------------------------------------
class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class EmailRequest(BaseModel):
    email: EmailStr


class FederatedCompleteRequest(BaseModel):
    """Tokens (or the provider error) handed back by the browser-side redirect."""
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    error_code: Optional[str] = None


class EmailLinkCompleteRequest(BaseModel):
    url: str
    email: Optional[EmailStr] = None


class EmailLinkCheckRequest(BaseModel):
    url: str


# -----------------------------------------------------
# SIGN-IN RESPONSE
# -----------------------------------------------------
class SignInResponse(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    token_type: str = "bearer"
    session_status: str
    profile: Optional[UserProfile] = None
    redirect_to: Optional[str] = None
    message: Optional[str] = None
