# services/session.py

"""
Authentication session state machine.

An AuthSession owns the (identity, profile, loading, error) tuple for one
signed-in principal. It is driven only by the identity gateway's session
change stream, which it subscribes to when first acquired and releases
when the last holder lets go.

    INITIALIZING ──event──▶ UNAUTHENTICATED
                      └──▶ AUTHENTICATED_NO_PROFILE
                      └──▶ AUTHENTICATED_WITH_PROFILE

Every profile fetch is tagged with a sequence number; a result whose tag
is no longer current is discarded, so a slow fetch for a previous
identity can never overwrite newer state.
"""

from threading import RLock
from typing import Callable, Iterable, List, Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError

from core.auth_errors import GatewayError, translate_gateway_error
from core.errors import AuthFailure, StoreUnavailable
from core.identity_gateway import IdentityGateway
from core.local_storage import EMAIL_FOR_SIGN_IN, MemoryStorage
from core.logging_config import logger
from models.auth import AuthTokens, Identity
from models.enums import BaseStrEnum, Role
from models.user import UserProfile
from services.profile_resolver import ProfileResolver


PROFILE_NOT_FOUND_MESSAGE = "User profile not found"

RoleQuery = Union[Role, str, Iterable[Union[Role, str]]]


class SessionStatus(BaseStrEnum):
    INITIALIZING = "INITIALIZING"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    AUTHENTICATED_NO_PROFILE = "AUTHENTICATED_NO_PROFILE"
    AUTHENTICATED_WITH_PROFILE = "AUTHENTICATED_WITH_PROFILE"


class SessionState(BaseModel):
    model_config = ConfigDict(frozen=True)

    identity: Optional[Identity] = None
    profile: Optional[UserProfile] = None
    loading: bool = True
    error: Optional[str] = None

    @classmethod
    def initializing(cls) -> "SessionState":
        return cls(loading=True)

    @classmethod
    def signed_out(cls) -> "SessionState":
        return cls(loading=False)

    @property
    def status(self) -> SessionStatus:
        if self.identity is None:
            return SessionStatus.INITIALIZING if self.loading else SessionStatus.UNAUTHENTICATED
        if self.profile is None:
            return SessionStatus.AUTHENTICATED_NO_PROFILE
        return SessionStatus.AUTHENTICATED_WITH_PROFILE

    def has_role(self, roles: RoleQuery) -> bool:
        if self.profile is None:
            return False
        if isinstance(roles, str):
            roles = [roles]
        return self.profile.role.value in {str(r) for r in roles}


def resolve_session_state(identity: Optional[Identity], resolver: ProfileResolver) -> SessionState:
    """
    Classify an identity into a settled session state.
    Profile lookup failures are recorded on the state, never raised.
    """
    if identity is None:
        return SessionState.signed_out()

    try:
        profile = resolver.fetch(identity)
    except StoreUnavailable as e:
        logger.warning(f"Profile lookup failed for {identity.id}: {e.message}")
        return SessionState(identity=identity, loading=False, error=e.message)
    except ValidationError as e:
        logger.error(f"Malformed profile document for {identity.id}: {e}")
        return SessionState(identity=identity, loading=False, error="User profile is malformed")

    if profile is None:
        return SessionState(identity=identity, loading=False, error=PROFILE_NOT_FOUND_MESSAGE)

    return SessionState(identity=identity, profile=profile, loading=False)


StateListener = Callable[[SessionState], None]


class AuthSession:
    """
    Reference-counted session object passed explicitly to whoever needs it.

    Usage:
        with AuthSession(gateway, resolver) as session:
            session.sign_in_with_password(email, password)
            session.state.profile
    """

    def __init__(
        self,
        gateway: IdentityGateway,
        resolver: ProfileResolver,
        storage=None,
        email_link_return_url: str = "",
    ):
        self._gateway = gateway
        self._resolver = resolver
        self._storage = storage if storage is not None else MemoryStorage()
        self._email_link_return_url = email_link_return_url

        self._lock = RLock()
        self._state = SessionState.initializing()
        self._sequence = 0
        self._refs = 0
        self._unsubscribe = None
        self._listeners: List[StateListener] = []

    # ----------------------------------------------------------
    # Lifecycle
    # ----------------------------------------------------------
    def acquire(self) -> "AuthSession":
        with self._lock:
            self._refs += 1
            first = self._refs == 1
        if first:
            unsubscribe = self._gateway.on_session_change(self._on_session_change)
            with self._lock:
                self._unsubscribe = unsubscribe
            logger.debug("Auth session subscribed to gateway")
        return self

    def release(self):
        with self._lock:
            if self._refs == 0:
                raise RuntimeError("AuthSession released more times than acquired")
            self._refs -= 1
            if self._refs > 0:
                return
            unsubscribe, self._unsubscribe = self._unsubscribe, None
        if unsubscribe is not None:
            unsubscribe()
            logger.debug("Auth session unsubscribed from gateway")

    @property
    def is_open(self) -> bool:
        return self._refs > 0

    def __enter__(self):
        return self.acquire()

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False

    # ----------------------------------------------------------
    # State
    # ----------------------------------------------------------
    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def storage(self):
        return self._storage

    def add_listener(self, listener: StateListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def remove():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return remove

    def _publish(self, state: SessionState):
        with self._lock:
            self._state = state
            listeners = list(self._listeners)
        logger.debug(f"Session state → {state.status}")
        for listener in listeners:
            listener(state)

    def _next_sequence(self) -> int:
        with self._lock:
            self._sequence += 1
            return self._sequence

    def _publish_if_current(self, sequence: int, state: SessionState) -> bool:
        with self._lock:
            if sequence != self._sequence:
                logger.debug(f"Discarding stale profile fetch #{sequence} (current #{self._sequence})")
                return False
            self._publish(state)
        return True

    def _on_session_change(self, identity: Optional[Identity]):
        sequence = self._next_sequence()

        if identity is None:
            self._publish(SessionState.signed_out())
            return

        self._publish(SessionState(identity=identity, loading=True))
        self._publish_if_current(sequence, resolve_session_state(identity, self._resolver))

    def _require_open(self):
        if not self.is_open:
            raise RuntimeError("AuthSession must be acquired before signing in")

    def _fail(self, error: GatewayError) -> AuthFailure:
        failure = translate_gateway_error(error)
        with self._lock:
            current = self._state
        self._publish(current.model_copy(update={"loading": False, "error": failure.message}))
        return failure

    # ----------------------------------------------------------
    # Sign-in / sign-out
    # ----------------------------------------------------------
    def sign_in_with_password(self, email: str, password: str) -> AuthTokens:
        self._require_open()
        self._publish(self._state.model_copy(update={"loading": True, "error": None}))
        try:
            return self._gateway.sign_in_with_password(email, password)
        except GatewayError as e:
            raise self._fail(e) from None

    def begin_federated_sign_in(self, redirect_to: str) -> str:
        try:
            return self._gateway.start_federated_sign_in(redirect_to)
        except GatewayError as e:
            raise translate_gateway_error(e) from None

    def sign_in_with_federated_provider(
        self,
        access_token: str,
        refresh_token: str,
        error_code: Optional[str] = None,
    ) -> AuthTokens:
        """
        Finish a federated sign-in. A first-time identity gets a pending
        LEAD profile, after which the session profile is re-read.
        """
        self._require_open()
        self._publish(self._state.model_copy(update={"loading": True, "error": None}))
        try:
            tokens = self._gateway.complete_federated_sign_in(access_token, refresh_token, error_code)
        except GatewayError as e:
            raise self._fail(e) from None

        try:
            self._resolver.ensure_profile(tokens.identity, Role.LEAD)
        except StoreUnavailable as e:
            logger.warning(f"Could not create profile for {tokens.identity.id}: {e.message}")
            failed = SessionState(identity=tokens.identity, loading=False, error=e.message)
            self._publish_if_current(self._next_sequence(), failed)
            return tokens

        self.refresh_profile()
        return tokens

    def sign_out(self, access_token: Optional[str] = None):
        try:
            self._gateway.sign_out(access_token)
        except GatewayError as e:
            logger.error(f"Sign out error: {e.message}")
            raise translate_gateway_error(e) from None

    # ----------------------------------------------------------
    # Password and e-mail link flows
    # ----------------------------------------------------------
    def send_password_reset(self, email: str):
        try:
            self._gateway.send_password_reset_email(email)
        except GatewayError as e:
            raise translate_gateway_error(e) from None

    def send_password_setup_link(self, email: str):
        try:
            self._gateway.send_sign_in_link_to_email(email, self._email_link_return_url)
        except GatewayError as e:
            raise translate_gateway_error(e) from None
        self._storage.set(EMAIL_FOR_SIGN_IN, email)

    def is_pending_email_link_completion(self, url: str) -> bool:
        return self._gateway.is_sign_in_with_email_link(url)

    def complete_email_link_sign_in(self, url: str, email: Optional[str] = None) -> AuthTokens:
        self._require_open()
        email = email or self._storage.get(EMAIL_FOR_SIGN_IN)
        if not email:
            raise AuthFailure("Please confirm the email address the sign-in link was sent to.")

        try:
            tokens = self._gateway.sign_in_with_email_link(email, url)
        except GatewayError as e:
            raise translate_gateway_error(e) from None

        self._storage.remove(EMAIL_FOR_SIGN_IN)
        return tokens

    # ----------------------------------------------------------
    # Profile
    # ----------------------------------------------------------
    def refresh_profile(self) -> SessionState:
        """Re-read the current identity's profile without waiting for a gateway event."""
        identity = self._state.identity
        if identity is None:
            return self._state

        sequence = self._next_sequence()
        self._publish_if_current(sequence, resolve_session_state(identity, self._resolver))
        return self._state

    def has_role(self, roles: RoleQuery) -> bool:
        return self._state.has_role(roles)
