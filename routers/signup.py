# routers/signup.py

from fastapi import APIRouter, BackgroundTasks, Depends

from core.notifications import notify_new_lead
from dependencies.services import get_lead_service
from models.lead import LeadCreate
from services.leads import LeadService


router = APIRouter(
    prefix="/signup",
    tags=["Signup"],
)


# -----------------------------------------------------
# PUBLIC: Submit a lead (contact form)
# -----------------------------------------------------
@router.post("/request", summary="Public: Submit signup request", status_code=201)
def request_access(
    payload: LeadCreate,
    background_tasks: BackgroundTasks,
    leads: LeadService = Depends(get_lead_service),
):
    lead_id = leads.create_lead(payload)
    lead = leads.require_lead(lead_id)

    # Admin e-mail + webhook run after the response; failures are only logged
    background_tasks.add_task(notify_new_lead, lead)

    return {"status": "success", "lead_id": lead_id}
