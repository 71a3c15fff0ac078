"""
Inngest Functions Registry
All background job functions are registered here
"""
from .application_events import (
    freeze_applications_for_removed_job_workflow,
)

# List of all Inngest functions to be registered
INNGEST_FUNCTIONS = [
    # Job lifecycle
    freeze_applications_for_removed_job_workflow,
]

__all__ = [
    "INNGEST_FUNCTIONS",
    "freeze_applications_for_removed_job_workflow",
]
