"""
Application schemas for request validation.
Covers submission, status changes, bulk status changes, interview scheduling
and employer feedback.
"""
from datetime import date, datetime, time
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator, ConfigDict

from app.models.application_status import ApplicationStatus


APPLICATION_STATUSES = ApplicationStatus.all()


def _validate_status(v: Optional[str]) -> Optional[str]:
    if v is not None and v not in APPLICATION_STATUSES:
        raise ValueError(f"Status must be one of: {', '.join(APPLICATION_STATUSES)}")
    return v


# ==================== Request Schemas ====================

class ApplicationCreateSchema(BaseModel):
    """Schema for submitting an application to a job."""

    job_posting_id: int = Field(..., description="ID of the job posting")

    # Resume: the profile resume or a fresh upload reference
    use_profile_resume: bool = Field(default=True)
    resume_reference: Optional[str] = Field(None, max_length=500)
    profile_resume_reference: Optional[str] = Field(None, max_length=500)

    # Cover letter: text or uploaded document, not both
    cover_letter_text: Optional[str] = None
    cover_letter_document: Optional[str] = Field(None, max_length=500)

    model_config = ConfigDict(from_attributes=True)

    @model_validator(mode='after')
    def validate_documents(self) -> 'ApplicationCreateSchema':
        if self.cover_letter_text and self.cover_letter_text.strip() and self.cover_letter_document:
            raise ValueError("Provide the cover letter either as text or as a document, not both")
        if not self.use_profile_resume and not self.resume_reference:
            raise ValueError("Please select a resume file to upload")
        return self


class ApplicationStatusUpdateSchema(BaseModel):
    """Schema for changing the status of one application."""

    status: str = Field(..., max_length=20)

    model_config = ConfigDict(from_attributes=True)

    @field_validator('status')
    @classmethod
    def validate_status(cls, v: str) -> str:
        return _validate_status(v)


class BulkStatusUpdateSchema(BaseModel):
    """Schema for changing the status of several applications at once."""

    application_ids: List[int] = Field(..., min_length=1)
    status: str = Field(..., max_length=20)

    model_config = ConfigDict(from_attributes=True)

    @field_validator('status')
    @classmethod
    def validate_status(cls, v: str) -> str:
        return _validate_status(v)


class InterviewScheduleSchema(BaseModel):
    """
    Schema for scheduling an interview.

    Accepts either a single `scheduled_at` timestamp or separate
    `scheduled_date` and `scheduled_time` fields.
    """

    scheduled_at: Optional[datetime] = Field(None, description="Interview date and time")
    scheduled_date: Optional[date] = None
    scheduled_time: Optional[time] = None
    location: Optional[str] = Field(None, max_length=500)
    meeting_link: Optional[str] = Field(None, max_length=1000)
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    @model_validator(mode='after')
    def combine_date_and_time(self) -> 'InterviewScheduleSchema':
        if self.scheduled_at is None and self.scheduled_date and self.scheduled_time:
            self.scheduled_at = datetime.combine(self.scheduled_date, self.scheduled_time)
        if self.scheduled_at is None:
            raise ValueError("Interview date and time are required")
        return self


class FeedbackCreateSchema(BaseModel):
    """Schema for employer feedback on an application."""

    message: str = Field(..., min_length=1, description="Feedback text")
    category: Optional[str] = Field(None, max_length=100)

    model_config = ConfigDict(from_attributes=True)

    @field_validator('message')
    @classmethod
    def validate_message(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Feedback message is required")
        return v.strip()


class ApplicationFilterSchema(BaseModel):
    """Schema for filtering application lists."""

    status: Optional[str] = None
    job_posting_id: Optional[int] = None

    # Pagination
    page: int = Field(default=1, ge=1)
    per_page: int = Field(default=20, ge=1, le=100)

    model_config = ConfigDict(from_attributes=True)

    @field_validator('status')
    @classmethod
    def validate_status(cls, v: Optional[str]) -> Optional[str]:
        if v == 'all':
            return None
        return _validate_status(v)
