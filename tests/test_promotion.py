# tests/test_promotion.py

"""
Tests for lead → client promotion.
"""

import pytest

from core.auth_errors import AuthErrorCode
from core.collections import COLLECTION_CLIENT_PROJECTS, COLLECTION_USERS
from core.errors import InvalidTransition, NotFound, PromotionFailed
from models.enums import LeadStatus, ProjectStatus, Role, UserStatus
from models.lead import LeadCreate
from services.promotion import PromotionStep


JANE = {
    "name": "Jane Doe",
    "email": "jane@clinic.com",
    "mobile": "555-0100",
    "clinic_name": "Doe Clinic",
    "reason_for_contact": "pricing",
}


@pytest.fixture
def lead_id(leads):
    return leads.create_lead(LeadCreate(**JANE))


def test_approve_lead_end_to_end(workflow, leads, users, projects, gateway, lead_id):
    assert leads.require_lead(lead_id).status == LeadStatus.new

    result = workflow.approve_lead(lead_id)

    lead = leads.require_lead(lead_id)
    assert lead.status == LeadStatus.approved
    assert lead.promoted_user_id == result.user_id

    profile = users.require_user(result.user_id)
    assert profile.email == "jane@clinic.com"
    assert profile.role == Role.CLIENT
    assert profile.status == UserStatus.pending
    assert profile.display_name == "Jane Doe"

    client_projects = projects.get_client_projects(result.user_id)
    assert len(client_projects) == 1
    project = client_projects[0]
    assert project.client_project_name == "Doe Clinic Project"
    assert project.client_id == result.user_id
    assert project.client_project_id == result.project_id
    assert project.status == ProjectStatus.setup
    assert not project.credentials_configured

    # The temporary password is replaced through the setup email
    assert gateway.reset_emails == ["jane@clinic.com"]


def test_missing_lead_is_not_found(workflow, gateway):
    with pytest.raises(NotFound):
        workflow.approve_lead("does-not-exist")
    assert gateway.accounts == {}


@pytest.mark.parametrize("status", [LeadStatus.rejected, LeadStatus.approved])
def test_closed_leads_cannot_be_approved(workflow, leads, store, lead_id, status):
    store.update("leads", lead_id, {"status": status.value})

    with pytest.raises(InvalidTransition):
        workflow.approve_lead(lead_id)


def test_contacted_lead_can_be_approved(workflow, leads, lead_id):
    leads.update_lead_status(lead_id, LeadStatus.contacted)
    workflow.approve_lead(lead_id)
    assert leads.require_lead(lead_id).status == LeadStatus.approved


def test_existing_account_fails_first_step_and_leaves_lead_untouched(workflow, leads, store, gateway, lead_id):
    gateway.add_account("jane@clinic.com")

    with pytest.raises(PromotionFailed) as exc:
        workflow.approve_lead(lead_id)

    assert exc.value.step == PromotionStep.create_account.value
    assert exc.value.user_id is None
    assert "already exists" in exc.value.message

    lead = leads.require_lead(lead_id)
    assert lead.status == LeadStatus.new
    assert lead.promotion_step is None
    assert store.all(COLLECTION_USERS) == []
    assert store.all(COLLECTION_CLIENT_PROJECTS) == []


def test_setup_email_failure_reports_account_and_resumes(workflow, leads, gateway, projects, lead_id):
    gateway.fail_next("send_password_reset_email", AuthErrorCode.too_many_requests)

    with pytest.raises(PromotionFailed) as exc:
        workflow.approve_lead(lead_id)

    assert exc.value.step == PromotionStep.send_setup_email.value
    user_id = exc.value.user_id
    assert user_id is not None

    lead = leads.require_lead(lead_id)
    assert lead.status == LeadStatus.new
    assert lead.promotion_step == PromotionStep.create_account.value
    assert lead.promoted_user_id == user_id

    # Second run continues with the same account
    result = workflow.approve_lead(lead_id)

    assert result.user_id == user_id
    assert result.resumed_from == PromotionStep.create_account
    assert len(gateway.accounts) == 1
    assert gateway.reset_emails == ["jane@clinic.com"]
    assert len(projects.get_client_projects(user_id)) == 1
    assert leads.require_lead(lead_id).status == LeadStatus.approved


def test_project_failure_leaves_account_without_project(workflow, leads, users, projects, store, lead_id):
    store.fail("set", COLLECTION_CLIENT_PROJECTS)

    with pytest.raises(PromotionFailed) as exc:
        workflow.approve_lead(lead_id)

    assert exc.value.step == PromotionStep.create_project.value
    user_id = exc.value.user_id
    assert users.require_user(user_id).role == Role.CLIENT
    assert projects.get_client_projects(user_id) == []
    assert leads.require_lead(lead_id).status == LeadStatus.new

    result = workflow.approve_lead(lead_id)
    assert result.resumed_from == PromotionStep.send_setup_email
    assert len(projects.get_client_projects(user_id)) == 1


def test_profile_write_failure_with_manual_policy(workflow, leads, store, gateway, lead_id):
    store.fail("set", COLLECTION_USERS)

    with pytest.raises(PromotionFailed) as exc:
        workflow.approve_lead(lead_id)

    assert exc.value.step == PromotionStep.create_account.value
    # Identity is left for manual cleanup
    assert "jane@clinic.com" in gateway.accounts
    assert leads.require_lead(lead_id).status == LeadStatus.new


def test_promotion_failed_payload_names_the_step(workflow, gateway, lead_id):
    gateway.fail_next("send_password_reset_email")

    with pytest.raises(PromotionFailed) as exc:
        workflow.approve_lead(lead_id)

    payload = exc.value.to_dict()
    assert payload["error"] == "promotion_failed"
    assert payload["step"] == "send_setup_email"
    assert payload["user_id"] == exc.value.user_id


def test_lost_project_checkpoint_does_not_create_second_project(workflow, leads, projects, store, lead_id):
    store.fail("update", "leads", fields={"promotion_step": PromotionStep.create_project.value})

    with pytest.raises(PromotionFailed) as exc:
        workflow.approve_lead(lead_id)

    assert exc.value.step == PromotionStep.create_project.value
    user_id = exc.value.user_id
    assert len(projects.get_client_projects(user_id)) == 1

    result = workflow.approve_lead(lead_id)

    client_projects = projects.get_client_projects(user_id)
    assert [p.client_project_id for p in client_projects] == [result.project_id]
    lead = leads.require_lead(lead_id)
    assert lead.status == LeadStatus.approved
    assert lead.promoted_project_id == result.project_id


def test_lost_account_checkpoint_adopts_created_account(workflow, leads, projects, store, gateway, lead_id):
    store.fail("update", "leads", fields={"promotion_step": PromotionStep.create_account.value})

    with pytest.raises(PromotionFailed) as exc:
        workflow.approve_lead(lead_id)

    assert exc.value.step == PromotionStep.create_account.value
    assert leads.require_lead(lead_id).promoted_user_id is None

    result = workflow.approve_lead(lead_id)

    assert len(gateway.accounts) == 1
    assert result.user_id == gateway.accounts["jane@clinic.com"]["id"]
    assert len(store.all(COLLECTION_USERS)) == 1
    assert len(projects.get_client_projects(result.user_id)) == 1
    assert leads.require_lead(lead_id).status == LeadStatus.approved


def test_active_profile_with_lead_email_is_not_adopted(workflow, make_user, lead_id):
    make_user("jane@clinic.com", Role.CLIENT, UserStatus.active)

    with pytest.raises(PromotionFailed) as exc:
        workflow.approve_lead(lead_id)

    assert exc.value.step == PromotionStep.create_account.value
    assert "already exists" in exc.value.message
