# services/leads.py

import uuid
from typing import List, Optional

from core.collections import COLLECTION_LEADS
from core.document_store import SERVER_TIMESTAMP, DocumentStore
from core.errors import InvalidTransition, NotFound
from core.logging_config import logger
from models.enums import LeadStatus
from models.lead import Lead, LeadCreate


# -----------------------------------------------------
# Legal status changes made by an admin.
# `approved` is absent on purpose: only promotion sets it.
# -----------------------------------------------------
LEAD_TRANSITIONS = {
    LeadStatus.new: {LeadStatus.contacted, LeadStatus.rejected},
    LeadStatus.contacted: {LeadStatus.rejected},
    LeadStatus.approved: set(),
    LeadStatus.rejected: set(),
}

PROMOTABLE_STATUSES = {LeadStatus.new, LeadStatus.contacted}


def lead_from_document(doc: dict) -> Lead:
    return Lead.model_validate(doc)


class LeadService:
    def __init__(self, store: DocumentStore):
        self.store = store

    def create_lead(self, payload: LeadCreate) -> str:
        """Public submission. Every new lead starts at `new`."""
        lead_id = str(uuid.uuid4())
        fields = payload.model_dump(mode="json")
        fields.update(
            {
                "status": LeadStatus.new.value,
                "created_at": SERVER_TIMESTAMP,
                "updated_at": SERVER_TIMESTAMP,
            }
        )
        self.store.set(COLLECTION_LEADS, lead_id, fields)
        logger.info(f"New lead {lead_id} from {payload.email}")
        return lead_id

    def get_leads(self, status: Optional[LeadStatus] = None) -> List[Lead]:
        filters = {"status": status.value} if status else None
        docs = self.store.query(COLLECTION_LEADS, filters, order_by="created_at")
        return [lead_from_document(d) for d in docs]

    def get_lead_by_id(self, lead_id: str) -> Optional[Lead]:
        doc = self.store.get(COLLECTION_LEADS, lead_id)
        return lead_from_document(doc) if doc else None

    def require_lead(self, lead_id: str) -> Lead:
        lead = self.get_lead_by_id(lead_id)
        if lead is None:
            raise NotFound("Lead", lead_id)
        return lead

    def update_lead_status(self, lead_id: str, status: LeadStatus) -> Lead:
        lead = self.require_lead(lead_id)

        if status == lead.status:
            return lead

        if status == LeadStatus.approved:
            raise InvalidTransition("Leads are approved through the approval workflow only")

        if status not in LEAD_TRANSITIONS[lead.status]:
            raise InvalidTransition(f"Cannot move lead from '{lead.status}' to '{status}'")

        self.store.update(
            COLLECTION_LEADS,
            lead_id,
            {"status": status.value, "updated_at": SERVER_TIMESTAMP},
        )
        logger.info(f"Lead {lead_id}: {lead.status} → {status}")
        return self.require_lead(lead_id)

    def reject_lead(self, lead_id: str) -> Lead:
        return self.update_lead_status(lead_id, LeadStatus.rejected)

    # ----------------------------------------------------------
    # Promotion bookkeeping
    # ----------------------------------------------------------
    def record_promotion_step(
        self,
        lead_id: str,
        step: str,
        user_id: Optional[str] = None,
        project_id: Optional[str] = None,
    ):
        fields = {"promotion_step": step, "updated_at": SERVER_TIMESTAMP}
        if user_id:
            fields["promoted_user_id"] = user_id
        if project_id:
            fields["promoted_project_id"] = project_id
        self.store.update(COLLECTION_LEADS, lead_id, fields)

    def mark_approved(self, lead_id: str):
        """Final promotion step; the status and the step marker land in one write."""
        self.store.update(
            COLLECTION_LEADS,
            lead_id,
            {
                "status": LeadStatus.approved.value,
                "promotion_step": "mark_approved",
                "updated_at": SERVER_TIMESTAMP,
            },
        )
