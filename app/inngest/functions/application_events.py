"""
Application Events
Reacts to job-side events that affect existing applications
"""
import logging
from datetime import datetime, timezone

import inngest

from app.inngest import inngest_client

logger = logging.getLogger(__name__)


@inngest_client.create_function(
    fn_id="freeze-applications-for-removed-job",
    trigger=inngest.TriggerEvent(event="jobs/removed"),
    name="Freeze Applications For Removed Job",
    retries=3,
)
async def freeze_applications_for_removed_job_workflow(ctx: inngest.Context) -> dict:
    """
    Detach every application from a job that was removed by its employer.

    Event data:
        job_posting_id: ID of the removed job
    """
    job_posting_id = ctx.event.data.get("job_posting_id")
    if job_posting_id is None:
        logger.warning("[INNGEST] jobs/removed event without job_posting_id, skipping")
        return {"status": "skipped", "reason": "missing job_posting_id"}

    logger.info(f"[INNGEST] Freezing applications for removed job {job_posting_id}")

    frozen = await ctx.step.run(
        "detach-applications",
        lambda: detach_applications_step(int(job_posting_id)),
    )

    return {
        "status": "completed",
        "job_posting_id": job_posting_id,
        "applications_frozen": frozen,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# Step Functions

def detach_applications_step(job_posting_id: int) -> int:
    """Freeze the job's applications; they stay readable but accept no mutations."""
    from app import create_app
    app = create_app()
    with app.app_context():
        from app.services.application_lifecycle_service import ApplicationLifecycleService
        return ApplicationLifecycleService().handle_job_removed(job_posting_id)
