# services/promotion.py

from typing import Optional

from pydantic import BaseModel

from core.errors import AppError, InvalidTransition, PromotionFailed
from core.logging_config import logger
from models.enums import BaseStrEnum, Role, UserStatus
from models.lead import Lead
from services.leads import PROMOTABLE_STATUSES, LeadService
from services.projects import ProjectService, default_project_name
from services.users import UserService


class PromotionStep(BaseStrEnum):
    """Steps in execution order. The lead stores the last one that completed."""

    create_account = "create_account"
    send_setup_email = "send_setup_email"
    create_project = "create_project"
    mark_approved = "mark_approved"


STEP_ORDER = list(PromotionStep)


class PromotionResult(BaseModel):
    lead_id: str
    user_id: str
    project_id: Optional[str] = None
    resumed_from: Optional[PromotionStep] = None


def _completed(lead: Lead, step: PromotionStep) -> bool:
    if not lead.promotion_step:
        return False
    return STEP_ORDER.index(PromotionStep(lead.promotion_step)) >= STEP_ORDER.index(step)


class LeadPromotionWorkflow:
    """
    Lead → CLIENT account → client project → approved lead.

    Steps run strictly in order. The account is created before the project
    and before the lead is approved, so a late failure leaves an account
    without a project rather than an approved lead without an account.
    After each step the lead records `promotion_step` (and the new
    `promoted_user_id`), and a re-run continues after the recorded step.
    """

    def __init__(self, leads: LeadService, users: UserService, projects: ProjectService):
        self.leads = leads
        self.users = users
        self.projects = projects

    def approve_lead(self, lead_id: str) -> PromotionResult:
        lead = self.leads.require_lead(lead_id)

        if lead.status not in PROMOTABLE_STATUSES:
            raise InvalidTransition(f"Lead {lead_id} is '{lead.status}' and cannot be approved")

        resumed_from = PromotionStep(lead.promotion_step) if lead.promotion_step else None
        if resumed_from:
            logger.info(f"Resuming promotion of lead {lead_id} after step '{resumed_from}'")

        user_id = lead.promoted_user_id
        project_id = lead.promoted_project_id

        # 1. Identity + pending CLIENT profile
        if not _completed(lead, PromotionStep.create_account):
            user_id = self._run(
                PromotionStep.create_account,
                lead_id,
                None,
                lambda: self._create_or_adopt_account(lead),
            )
            self._checkpoint(lead_id, PromotionStep.create_account, user_id)

        # 2. Setup e-mail so the temporary password is never used
        if not _completed(lead, PromotionStep.send_setup_email):
            self._run(
                PromotionStep.send_setup_email,
                lead_id,
                user_id,
                lambda: self.users.send_setup_email(lead.email),
            )
            self._checkpoint(lead_id, PromotionStep.send_setup_email, user_id)

        # 3. Exactly one project for the new client
        if not _completed(lead, PromotionStep.create_project):
            project_id = self._run(
                PromotionStep.create_project,
                lead_id,
                user_id,
                lambda: self._create_or_reuse_project(lead, user_id),
            )
            self._checkpoint(lead_id, PromotionStep.create_project, user_id, project_id)
        elif project_id is None:
            existing = self.projects.get_client_projects(user_id)
            project_id = existing[0].client_project_id if existing else None

        # 4. Lead becomes approved
        self._run(
            PromotionStep.mark_approved,
            lead_id,
            user_id,
            lambda: self.leads.mark_approved(lead_id),
        )

        logger.info(f"Lead {lead_id} promoted to client {user_id} (project {project_id})")
        return PromotionResult(
            lead_id=lead_id,
            user_id=user_id,
            project_id=project_id,
            resumed_from=resumed_from,
        )

    def _run(self, step: PromotionStep, lead_id: str, user_id: Optional[str], action):
        logger.debug(f"Lead {lead_id}: running promotion step '{step}'")
        try:
            return action()
        except AppError as e:
            logger.error(f"Lead {lead_id}: promotion step '{step}' failed: {e.message}")
            raise PromotionFailed(step.value, e.message, user_id=user_id) from e

    def _checkpoint(
        self,
        lead_id: str,
        step: PromotionStep,
        user_id: Optional[str],
        project_id: Optional[str] = None,
    ):
        try:
            self.leads.record_promotion_step(lead_id, step.value, user_id, project_id)
        except AppError as e:
            logger.error(f"Lead {lead_id}: could not record step '{step}': {e.message}")
            raise PromotionFailed(step.value, f"Step completed but not recorded: {e.message}", user_id=user_id) from e

    def _create_or_adopt_account(self, lead: Lead) -> str:
        """
        A pending CLIENT profile for the lead's e-mail means an earlier run
        created the account but lost its checkpoint; that account is reused.
        """
        existing = self.users.get_user_by_email(lead.email)
        if existing is not None and existing.role == Role.CLIENT and existing.status == UserStatus.pending:
            logger.warning(f"Lead {lead.id}: adopting unrecorded account {existing.user_id}")
            return existing.user_id
        return self.users.create_account(lead.email, Role.CLIENT, lead.name)

    def _create_or_reuse_project(self, lead: Lead, user_id: str) -> str:
        existing = self.projects.get_client_projects(user_id)
        if existing:
            logger.warning(f"Lead {lead.id}: reusing unrecorded project {existing[0].client_project_id}")
            return existing[0].client_project_id
        return self.projects.create_client_project(user_id, default_project_name(lead.clinic_name))
