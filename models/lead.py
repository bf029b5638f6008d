# models/lead.py

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field, field_validator

from models.base import materialize_timestamp
from models.enums import LeadStatus


class SurveyResponses(BaseModel):
    interested_in_website: bool = False
    interested_in_chatbot: bool = False
    interested_in_ai_agent: bool = False
    interested_in_receptionist: bool = False
    additional_notes: Optional[str] = None


# --------------------------------------------------------------------
# PUBLIC REQUEST BODY: what the public signup form sends
# --------------------------------------------------------------------
class LeadCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    mobile: str = Field(..., min_length=1)
    clinic_name: str = Field(..., min_length=1)
    address: str = ""
    reason_for_contact: str = Field(..., min_length=1)
    referral_source: str = ""
    survey_responses: SurveyResponses = Field(default_factory=SurveyResponses)

    @field_validator("name", "mobile", "clinic_name", "address", "reason_for_contact", "referral_source", mode="before")
    @classmethod
    def strip_text(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v


# --------------------------------------------------------------------
# STORED LEAD → API RESPONSE
# --------------------------------------------------------------------
class Lead(BaseModel):
    id: str
    name: str
    email: str
    mobile: str
    clinic_name: str
    address: str = ""
    reason_for_contact: str
    referral_source: str = ""
    survey_responses: SurveyResponses = Field(default_factory=SurveyResponses)

    status: LeadStatus = LeadStatus.new

    # Promotion progress marker (set by the approval workflow)
    promotion_step: Optional[str] = None
    promoted_user_id: Optional[str] = None
    promoted_project_id: Optional[str] = None

    created_at: datetime
    updated_at: datetime

    @field_validator("survey_responses", mode="before")
    @classmethod
    def default_survey(cls, v):
        return v or {}

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def normalize_timestamps(cls, v):
        return materialize_timestamp(v)


class LeadStatusUpdate(BaseModel):
    status: LeadStatus
