# core/identity_gateway.py

from typing import Callable, Optional, Protocol
from urllib.parse import parse_qs, urlparse

from supabase import Client

from core.auth_errors import AuthErrorCode, GatewayError
from core.errors import extract_supabase_error
from core.logging_config import logger
from models.auth import AuthTokens, Identity


SessionCallback = Callable[[Optional[Identity]], None]
Unsubscribe = Callable[[], None]


# ============================================================
# Gateway interface
# ============================================================
class IdentityGateway(Protocol):
    """
    Capability interface over the hosted identity provider.
    Every failure is raised as GatewayError with a provider-neutral code.
    """

    def sign_in_with_password(self, email: str, password: str) -> AuthTokens: ...

    def start_federated_sign_in(self, redirect_to: str) -> str: ...

    def complete_federated_sign_in(
        self,
        access_token: str,
        refresh_token: str,
        error_code: Optional[str] = None,
    ) -> AuthTokens: ...

    def sign_out(self, access_token: Optional[str] = None) -> None: ...

    def send_password_reset_email(self, email: str, redirect_to: Optional[str] = None) -> None: ...

    def send_sign_in_link_to_email(self, email: str, return_url: str) -> None: ...

    def is_sign_in_with_email_link(self, url: str) -> bool: ...

    def sign_in_with_email_link(self, email: str, url: str) -> AuthTokens: ...

    def create_account_with_password(self, email: str, password: str, display_name: Optional[str] = None) -> str: ...

    def delete_account(self, identity_id: str) -> None: ...

    def get_identity(self, access_token: str) -> Optional[Identity]: ...

    def on_session_change(self, callback: SessionCallback) -> Unsubscribe: ...


# ============================================================
# Supabase error code → gateway code
# ============================================================
SUPABASE_ERROR_CODES = {
    "email_address_invalid": AuthErrorCode.invalid_email,
    "user_banned": AuthErrorCode.user_disabled,
    "user_not_found": AuthErrorCode.user_not_found,
    "invalid_credentials": AuthErrorCode.wrong_password,
    "email_exists": AuthErrorCode.email_already_in_use,
    "user_already_exists": AuthErrorCode.email_already_in_use,
    "weak_password": AuthErrorCode.weak_password,
    "over_request_rate_limit": AuthErrorCode.too_many_requests,
    "over_email_send_rate_limit": AuthErrorCode.too_many_requests,
    "access_denied": AuthErrorCode.popup_closed,
    "provider_disabled": AuthErrorCode.operation_not_allowed,
    "email_provider_disabled": AuthErrorCode.operation_not_allowed,
    "otp_disabled": AuthErrorCode.operation_not_allowed,
    "signup_disabled": AuthErrorCode.operation_not_allowed,
}

EMAIL_LINK_TYPES = {"email", "magiclink"}


def map_supabase_error(error: Exception) -> GatewayError:
    code = getattr(error, "code", None)
    status = getattr(error, "status", None)

    mapped = SUPABASE_ERROR_CODES.get(code) if code else None
    if mapped is None and status == 429:
        mapped = AuthErrorCode.too_many_requests
    if mapped is None:
        mapped = AuthErrorCode.unknown

    return GatewayError(mapped, extract_supabase_error(error))


def identity_from_user(user) -> Identity:
    metadata = getattr(user, "user_metadata", None) or {}
    return Identity(
        id=user.id,
        email=getattr(user, "email", None),
        display_name=metadata.get("full_name") or metadata.get("name"),
    )


def tokens_from_response(response) -> AuthTokens:
    session = getattr(response, "session", None)
    if not session or not session.access_token or not session.user:
        raise GatewayError(AuthErrorCode.unknown, "Provider returned no session")
    return AuthTokens(
        identity=identity_from_user(session.user),
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        expires_in=session.expires_in,
    )


# ============================================================
# Supabase Auth implementation
# ============================================================
class SupabaseIdentityGateway:
    """
    IdentityGateway over Supabase Auth.

    `client` carries the end-user session (anon key). `admin_client`
    holds the service role key and is used for account creation,
    deletion and token revocation, so creating an account never signs
    the calling admin in as the new user.
    """

    def __init__(self, client: Optional[Client], admin_client: Optional[Client] = None, provider: str = "google"):
        self._client = client
        self._admin_client = admin_client or client
        self._provider = provider

    def _auth(self):
        if self._client is None:
            raise GatewayError(AuthErrorCode.unknown, "Supabase auth client not configured")
        return self._client.auth

    def _admin(self):
        if self._admin_client is None:
            raise GatewayError(AuthErrorCode.unknown, "Supabase admin client not configured")
        return self._admin_client.auth.admin

    # ----------------------------------------------------------
    # Sign-in flows
    # ----------------------------------------------------------
    def sign_in_with_password(self, email, password):
        try:
            response = self._auth().sign_in_with_password(
                {"email": email, "password": password}
            )
        except GatewayError:
            raise
        except Exception as e:
            raise map_supabase_error(e) from e
        return tokens_from_response(response)

    def start_federated_sign_in(self, redirect_to):
        try:
            response = self._auth().sign_in_with_oauth(
                {"provider": self._provider, "options": {"redirect_to": redirect_to}}
            )
        except GatewayError:
            raise
        except Exception as e:
            raise map_supabase_error(e) from e
        return response.url

    def complete_federated_sign_in(self, access_token, refresh_token, error_code=None):
        # The provider handshake itself runs in the browser; it hands back
        # either a session or the provider's error code.
        if error_code:
            raise GatewayError(
                SUPABASE_ERROR_CODES.get(error_code, AuthErrorCode.unknown),
                f"Federated sign-in failed: {error_code}",
            )
        try:
            response = self._auth().set_session(access_token, refresh_token)
        except GatewayError:
            raise
        except Exception as e:
            raise map_supabase_error(e) from e
        return tokens_from_response(response)

    def sign_out(self, access_token=None):
        try:
            if access_token:
                self._admin().sign_out(access_token)
            self._auth().sign_out()
        except GatewayError:
            raise
        except Exception as e:
            raise map_supabase_error(e) from e

    # ----------------------------------------------------------
    # E-mail flows
    # ----------------------------------------------------------
    def send_password_reset_email(self, email, redirect_to=None):
        options = {"redirect_to": redirect_to} if redirect_to else {}
        try:
            self._auth().reset_password_for_email(email, options)
        except GatewayError:
            raise
        except Exception as e:
            raise map_supabase_error(e) from e

    def send_sign_in_link_to_email(self, email, return_url):
        try:
            self._auth().sign_in_with_otp(
                {
                    "email": email,
                    "options": {
                        "email_redirect_to": return_url,
                        # Setup links are for accounts an admin already created
                        "should_create_user": False,
                    },
                }
            )
        except GatewayError:
            raise
        except Exception as e:
            raise map_supabase_error(e) from e

    def is_sign_in_with_email_link(self, url):
        params = parse_qs(urlparse(url).query)
        link_type = (params.get("type") or [""])[0]
        return bool(params.get("token_hash")) and link_type in EMAIL_LINK_TYPES

    def sign_in_with_email_link(self, email, url):
        if not self.is_sign_in_with_email_link(url):
            raise GatewayError(AuthErrorCode.unknown, "URL is not a sign-in link")

        params = parse_qs(urlparse(url).query)
        try:
            response = self._auth().verify_otp(
                {"token_hash": params["token_hash"][0], "type": "email"}
            )
        except GatewayError:
            raise
        except Exception as e:
            raise map_supabase_error(e) from e

        tokens = tokens_from_response(response)
        if tokens.identity.email and tokens.identity.email.lower() != email.lower():
            logger.warning(f"Email link for {tokens.identity.email} completed with {email}")
            raise GatewayError(AuthErrorCode.invalid_email, "Email does not match the sign-in link")
        return tokens

    # ----------------------------------------------------------
    # Account administration
    # ----------------------------------------------------------
    def create_account_with_password(self, email, password, display_name=None):
        try:
            response = self._admin().create_user(
                {
                    "email": email,
                    "password": password,
                    "email_confirm": True,
                    "user_metadata": {"full_name": display_name} if display_name else {},
                }
            )
        except GatewayError:
            raise
        except Exception as e:
            raise map_supabase_error(e) from e
        return response.user.id

    def delete_account(self, identity_id):
        try:
            self._admin().delete_user(identity_id)
        except GatewayError:
            raise
        except Exception as e:
            raise map_supabase_error(e) from e

    def get_identity(self, access_token):
        try:
            response = self._auth().get_user(access_token)
        except GatewayError:
            raise
        except Exception as e:
            logger.info(f"Access token rejected by Supabase: {type(e).__name__}")
            return None
        if not response or not response.user:
            return None
        return identity_from_user(response.user)

    # ----------------------------------------------------------
    # Session change stream
    # ----------------------------------------------------------
    def on_session_change(self, callback):
        auth = self._auth()

        def listener(event, session):
            user = getattr(session, "user", None) if session else None
            callback(identity_from_user(user) if user else None)

        subscription = auth.on_auth_state_change(listener)

        # Deliver the session the client already holds, like an initial event
        current = auth.get_session()
        listener("INITIAL_SESSION", current)

        return subscription.unsubscribe
