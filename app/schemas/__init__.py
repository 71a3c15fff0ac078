"""Pydantic schemas for request/response validation."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class ErrorResponseSchema(BaseModel):
    """Schema for error responses."""
    
    error: str
    message: str
    status: int
    details: Optional[dict] = None


class HealthCheckSchema(BaseModel):
    """Schema for health check response."""
    
    status: str
    timestamp: datetime
    environment: str
    redis: str
    event_bus: str


class AppInfoSchema(BaseModel):
    """Schema for app info response."""
    
    name: str
    version: str
    environment: str
    debug: bool
    timestamp: datetime


from app.schemas.application_schema import (
    ApplicationCreateSchema,
    ApplicationStatusUpdateSchema,
    BulkStatusUpdateSchema,
    InterviewScheduleSchema,
    FeedbackCreateSchema,
    ApplicationFilterSchema,
)

__all__ = [
    "ErrorResponseSchema",
    "HealthCheckSchema",
    "AppInfoSchema",
    "ApplicationCreateSchema",
    "ApplicationStatusUpdateSchema",
    "BulkStatusUpdateSchema",
    "InterviewScheduleSchema",
    "FeedbackCreateSchema",
    "ApplicationFilterSchema",
]
