# core/auth_errors.py

from typing import Optional

from core.errors import AuthFailure
from models.enums import BaseStrEnum


class AuthErrorCode(BaseStrEnum):
    """Provider-neutral identity error codes. Adapters map their own codes onto these."""

    invalid_email = "auth/invalid-email"
    user_disabled = "auth/user-disabled"
    user_not_found = "auth/user-not-found"
    wrong_password = "auth/wrong-password"
    email_already_in_use = "auth/email-already-in-use"
    weak_password = "auth/weak-password"
    too_many_requests = "auth/too-many-requests"
    popup_closed = "auth/popup-closed-by-user"
    operation_not_allowed = "auth/operation-not-allowed"
    unknown = "auth/unknown"


# ============================================================
# CODE → USER-FACING MESSAGE
# ============================================================
AUTH_ERROR_MESSAGES = {
    AuthErrorCode.invalid_email: "Invalid email address format.",
    AuthErrorCode.user_disabled: "This account has been disabled.",
    AuthErrorCode.user_not_found: "No account found with this email.",
    AuthErrorCode.wrong_password: "Incorrect password.",
    AuthErrorCode.email_already_in_use: "An account with this email already exists.",
    AuthErrorCode.weak_password: "Password should be at least 6 characters.",
    AuthErrorCode.too_many_requests: "Too many failed attempts. Please try again later.",
    AuthErrorCode.popup_closed: "Sign-in popup was closed before completing.",
    AuthErrorCode.operation_not_allowed: "This sign-in method is not enabled.",
}

DEFAULT_AUTH_ERROR_MESSAGE = "An error occurred. Please try again."


class GatewayError(Exception):
    """
    Raised by identity gateway adapters.
    Only `code` is meaningful to callers; `message` is for logs.
    """

    def __init__(self, code: AuthErrorCode, message: str = ""):
        super().__init__(message or str(code))
        self.code = code
        self.message = message


def get_auth_error_message(code: Optional[str]) -> str:
    try:
        return AUTH_ERROR_MESSAGES.get(AuthErrorCode(code), DEFAULT_AUTH_ERROR_MESSAGE)
    except ValueError:
        return DEFAULT_AUTH_ERROR_MESSAGE


def translate_gateway_error(error: GatewayError) -> AuthFailure:
    """The raw provider code stops here; only the translated message travels on."""
    return AuthFailure(get_auth_error_message(error.code))
