# dependencies/services.py

"""
FastAPI providers for the two external collaborators and the services
built on them. Tests swap the collaborators through
`app.dependency_overrides[get_document_store]` and
`app.dependency_overrides[get_identity_gateway]`.
"""

from fastapi import Depends

from core.config import settings
from core.document_store import DocumentStore, SupabaseDocumentStore
from core.identity_gateway import IdentityGateway, SupabaseIdentityGateway
from core.rate_limiter import RateLimiter
from core.supabase_client import get_auth_client, get_supabase_client
from services.assignments import AssignmentManager
from services.leads import LeadService
from services.profile_resolver import ProfileResolver
from services.projects import ProjectService
from services.promotion import LeadPromotionWorkflow
from services.users import UserService


# ============================================================
# External collaborators
# ============================================================
def get_document_store() -> DocumentStore:
    return SupabaseDocumentStore(get_supabase_client())


def get_identity_gateway() -> IdentityGateway:
    """
    Fresh gateway per request: the auth client holds one end-user
    session, the service client handles account administration.
    """
    return SupabaseIdentityGateway(
        get_auth_client(),
        admin_client=get_supabase_client(),
        provider=settings.FEDERATED_PROVIDER,
    )


# ============================================================
# Services
# ============================================================
def get_profile_resolver(store: DocumentStore = Depends(get_document_store)) -> ProfileResolver:
    return ProfileResolver(store)


def get_user_service(
    store: DocumentStore = Depends(get_document_store),
    gateway: IdentityGateway = Depends(get_identity_gateway),
) -> UserService:
    return UserService(
        store,
        gateway,
        compensation_policy=settings.PROMOTION_COMPENSATION_POLICY,
        profile_write_retries=settings.PROFILE_WRITE_RETRIES,
    )


def get_lead_service(store: DocumentStore = Depends(get_document_store)) -> LeadService:
    return LeadService(store)


def get_project_service(
    store: DocumentStore = Depends(get_document_store),
    users: UserService = Depends(get_user_service),
) -> ProjectService:
    return ProjectService(store, users)


def get_assignment_manager(
    store: DocumentStore = Depends(get_document_store),
    users: UserService = Depends(get_user_service),
    projects: ProjectService = Depends(get_project_service),
) -> AssignmentManager:
    return AssignmentManager(
        store,
        users,
        projects,
        removal_retries=settings.ASSIGNMENT_REMOVAL_RETRIES,
    )


def get_promotion_workflow(
    leads: LeadService = Depends(get_lead_service),
    users: UserService = Depends(get_user_service),
    projects: ProjectService = Depends(get_project_service),
) -> LeadPromotionWorkflow:
    return LeadPromotionWorkflow(leads, users, projects)


# ============================================================
# Rate limiting (one window shared by the auth endpoints)
# ============================================================
auth_rate_limiter = RateLimiter(
    max_requests=settings.AUTH_RATE_LIMIT_MAX,
    window_seconds=settings.AUTH_RATE_LIMIT_WINDOW_SECONDS,
)


def get_rate_limiter() -> RateLimiter:
    return auth_rate_limiter
