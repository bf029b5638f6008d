# core/errors.py

from typing import Optional


def extract_supabase_error(error: Exception) -> str:
    """
    Safely extract readable details from Supabase Python client errors.
    Handles:
      • PostgREST errors
      • Auth (GoTrue) errors
      • Generic Python exceptions
    """

    # Case 1: Supabase Auth / PostgREST errors expose .message
    message = getattr(error, "message", None)
    if message:
        return str(message)

    # Case 2: errors with args (common)
    if error.args:
        return str(error.args[0])

    # Case 3: plain string fallback
    return str(error) or error.__class__.__name__


# ============================================================
# Domain error kinds
# ============================================================
class AppError(Exception):
    """
    Base class for errors that are rendered to API callers.

    `kind` is the stable, machine-readable name of the error and
    `status_code` the HTTP status the exception handler uses.
    """

    kind = "app_error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"detail": self.message, "error": self.kind}


class AuthFailure(AppError):
    """Translated identity-provider failure. Recoverable by retrying with corrected input."""

    kind = "auth_failure"
    status_code = 400


class ProfileNotFound(AppError):
    """Signed-in identity without a profile document. Blocks access; the session stays valid."""

    kind = "profile_not_found"
    status_code = 403


class AccountDisabledOrPending(AppError):
    """Profile exists but is not active."""

    kind = "account_disabled_or_pending"
    status_code = 403


class NotFound(AppError):
    kind = "not_found"
    status_code = 404

    def __init__(self, resource: str, resource_id: str):
        super().__init__(f"{resource} {resource_id} not found")
        self.resource = resource
        self.resource_id = resource_id


class InvalidTransition(AppError):
    kind = "invalid_transition"
    status_code = 409


class InvalidReference(AppError):
    kind = "invalid_reference"
    status_code = 400


class StoreUnavailable(AppError):
    """Transient document store failure. Callers retry with backoff; nothing here retries."""

    kind = "store_unavailable"
    status_code = 503


class PromotionFailed(AppError):
    """
    A lead promotion step failed.

    `step` names the step that failed and `user_id` is set once an
    account exists, so an operator knows what was left behind.
    """

    kind = "promotion_failed"
    status_code = 502

    def __init__(self, step: str, message: str, user_id: Optional[str] = None):
        super().__init__(f"Lead promotion failed at step '{step}': {message}")
        self.step = step
        self.user_id = user_id

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["step"] = self.step
        if self.user_id:
            data["user_id"] = self.user_id
        return data
