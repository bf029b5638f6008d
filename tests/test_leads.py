# tests/test_leads.py

"""
Tests for lead submission and status changes.
"""

from datetime import datetime

import pytest
from pydantic import ValidationError

from core.errors import InvalidTransition, NotFound
from models.enums import LeadStatus
from models.lead import LeadCreate


SUBMISSION = {
    "name": "  Jane Doe ",
    "email": "jane@clinic.com",
    "mobile": "555-0100",
    "clinic_name": "Doe Clinic",
    "reason_for_contact": "pricing",
    "survey_responses": {"interested_in_chatbot": True, "additional_notes": "evenings only"},
}


def test_new_lead_round_trips(leads):
    lead_id = leads.create_lead(LeadCreate(**SUBMISSION))

    lead = leads.get_lead_by_id(lead_id)
    again = leads.get_lead_by_id(lead_id)

    assert lead.status == LeadStatus.new
    assert lead.name == "Jane Doe"
    assert lead.clinic_name == "Doe Clinic"
    assert lead.address == ""
    assert lead.survey_responses.interested_in_chatbot is True
    assert lead.survey_responses.additional_notes == "evenings only"
    assert isinstance(lead.created_at, datetime)
    assert isinstance(lead.updated_at, datetime)
    assert lead == again


@pytest.mark.parametrize("missing", ["name", "mobile", "clinic_name", "reason_for_contact"])
def test_required_fields(missing):
    data = dict(SUBMISSION)
    data[missing] = "   "
    with pytest.raises(ValidationError):
        LeadCreate(**data)


def test_email_must_be_valid():
    with pytest.raises(ValidationError):
        LeadCreate(**{**SUBMISSION, "email": "not-an-email"})


def test_status_filter(leads):
    first = leads.create_lead(LeadCreate(**SUBMISSION))
    leads.create_lead(LeadCreate(**{**SUBMISSION, "email": "john@clinic.com"}))
    leads.reject_lead(first)

    assert [l.id for l in leads.get_leads(LeadStatus.rejected)] == [first]
    assert len(leads.get_leads(LeadStatus.new)) == 1
    assert len(leads.get_leads()) == 2


def test_allowed_transitions(leads):
    lead_id = leads.create_lead(LeadCreate(**SUBMISSION))

    assert leads.update_lead_status(lead_id, LeadStatus.contacted).status == LeadStatus.contacted
    assert leads.update_lead_status(lead_id, LeadStatus.rejected).status == LeadStatus.rejected


def test_same_status_is_a_no_op(leads):
    lead_id = leads.create_lead(LeadCreate(**SUBMISSION))
    assert leads.update_lead_status(lead_id, LeadStatus.new).status == LeadStatus.new


def test_approved_only_through_promotion(leads):
    lead_id = leads.create_lead(LeadCreate(**SUBMISSION))
    with pytest.raises(InvalidTransition):
        leads.update_lead_status(lead_id, LeadStatus.approved)


@pytest.mark.parametrize("target", [LeadStatus.new, LeadStatus.contacted])
def test_rejected_is_terminal(leads, target):
    lead_id = leads.create_lead(LeadCreate(**SUBMISSION))
    leads.reject_lead(lead_id)

    with pytest.raises(InvalidTransition):
        leads.update_lead_status(lead_id, target)


def test_contacted_cannot_go_back_to_new(leads):
    lead_id = leads.create_lead(LeadCreate(**SUBMISSION))
    leads.update_lead_status(lead_id, LeadStatus.contacted)

    with pytest.raises(InvalidTransition):
        leads.update_lead_status(lead_id, LeadStatus.new)


def test_unknown_lead(leads):
    with pytest.raises(NotFound):
        leads.update_lead_status("missing", LeadStatus.contacted)
