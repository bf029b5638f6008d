# routers/leads.py

from typing import List, Optional

from fastapi import APIRouter, Depends

from core.logging_config import logger
from dependencies.auth import requires_role
from dependencies.services import get_lead_service, get_promotion_workflow
from models.enums import LeadStatus, Role
from models.lead import Lead, LeadStatusUpdate
from models.user import UserProfile
from services.leads import LeadService
from services.promotion import LeadPromotionWorkflow, PromotionResult


router = APIRouter(
    prefix="/admin/leads",
    tags=["Leads"],
)

admin_only = requires_role([Role.ADMIN])


@router.get("", response_model=List[Lead], summary="List leads")
def list_leads(
    status: Optional[LeadStatus] = None,
    current_admin: UserProfile = Depends(admin_only),
    leads: LeadService = Depends(get_lead_service),
):
    return leads.get_leads(status)


@router.get("/{lead_id}", response_model=Lead, summary="Get one lead")
def get_lead(
    lead_id: str,
    current_admin: UserProfile = Depends(admin_only),
    leads: LeadService = Depends(get_lead_service),
):
    return leads.require_lead(lead_id)


@router.patch("/{lead_id}/status", response_model=Lead, summary="Move a lead to contacted or rejected")
def update_lead_status(
    lead_id: str,
    payload: LeadStatusUpdate,
    current_admin: UserProfile = Depends(admin_only),
    leads: LeadService = Depends(get_lead_service),
):
    return leads.update_lead_status(lead_id, payload.status)


@router.post("/{lead_id}/reject", response_model=Lead, summary="Reject a lead")
def reject_lead(
    lead_id: str,
    current_admin: UserProfile = Depends(admin_only),
    leads: LeadService = Depends(get_lead_service),
):
    return leads.reject_lead(lead_id)


# -----------------------------------------------------
# APPROVE: lead → CLIENT account + project
# -----------------------------------------------------
@router.post("/{lead_id}/approve", response_model=PromotionResult, summary="Approve a lead")
def approve_lead(
    lead_id: str,
    current_admin: UserProfile = Depends(admin_only),
    workflow: LeadPromotionWorkflow = Depends(get_promotion_workflow),
):
    """
    Creates the CLIENT account, sends its setup email, creates the
    client project and marks the lead approved. A failed step is
    reported with its name; calling again resumes after the last
    completed step.
    """
    result = workflow.approve_lead(lead_id)
    logger.info(f"Admin {current_admin.user_id} approved lead {lead_id}")
    return result
