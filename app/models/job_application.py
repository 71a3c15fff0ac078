"""
Job Application Model
An applicant's submission against one job posting, with its lifecycle status,
the embedded interview sub-record and the single employer feedback record.
"""
from datetime import datetime
from sqlalchemy import String, Integer, Text, DateTime, ForeignKey, Index
from app import db
from app.models.application_status import ApplicationStatus, InterviewStatus


FROZEN_MESSAGE = "This job is no longer available; the employer has been removed"


class JobApplication(db.Model):
    """
    Tracks an applicant's application to a job posting.
    
    The job reference is nulled (never cascaded) when the posting is removed;
    such an application is frozen and kept as a historical record. The
    employer id is copied from the job at creation time and retained.
    
    `version` is bumped on every write and is what the store's
    compare-and-set checks against, together with the expected status.
    """
    __tablename__ = 'job_applications'
    
    id = db.Column(Integer, primary_key=True)
    
    # References
    job_posting_id = db.Column(
        Integer,
        ForeignKey('job_postings.id', ondelete='SET NULL'),
        nullable=True,
        index=True
    )
    applicant_id = db.Column(Integer, nullable=False, index=True)
    employer_id = db.Column(Integer, nullable=False, index=True)
    
    # Status Tracking
    status = db.Column(
        String(20),
        nullable=False,
        default=ApplicationStatus.PENDING.value,
        index=True
    )
    version = db.Column(Integer, nullable=False, default=1)
    status_changed_at = db.Column(DateTime)
    status_changed_by_id = db.Column(Integer)
    
    # Submission Details (immutable after creation)
    applied_at = db.Column(DateTime, default=datetime.utcnow, nullable=False)
    cover_letter_text = db.Column(Text)
    cover_letter_document = db.Column(String(500))  # Storage reference of an uploaded letter
    resume_reference = db.Column(String(500))
    
    # Interview sub-record
    interview_status = db.Column(
        String(20),
        nullable=False,
        default=InterviewStatus.UNSCHEDULED.value
    )
    interview_scheduled_at = db.Column(DateTime)
    interview_location = db.Column(String(500))
    interview_meeting_link = db.Column(String(1000))
    interview_notes = db.Column(Text)
    
    # Feedback record (overwritten in place, no history)
    feedback_message = db.Column(Text)
    feedback_category = db.Column(String(100))
    feedback_provided_at = db.Column(DateTime)
    
    # Timestamps
    created_at = db.Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    
    # Relationships
    job_posting = db.relationship('JobPosting', back_populates='applications')
    
    __table_args__ = (
        Index('idx_job_application_unique', 'applicant_id', 'job_posting_id', unique=True),
        Index('idx_job_application_applicant_status', 'applicant_id', 'status'),
        Index('idx_job_application_employer_status', 'employer_id', 'status'),
        Index('idx_job_application_applied_at', 'applied_at'),
    )
    
    def __repr__(self):
        return f'<JobApplication {self.id} applicant={self.applicant_id} job={self.job_posting_id} status={self.status}>'
    
    @property
    def is_frozen(self) -> bool:
        """The referenced job no longer exists; the record is read-only."""
        return self.job_posting_id is None
    
    @property
    def is_terminal(self) -> bool:
        return self.status in ApplicationStatus.terminal()
    
    @property
    def days_since_applied(self) -> int | None:
        if self.applied_at:
            return (datetime.utcnow() - self.applied_at).days
        return None
    
    @property
    def interview(self) -> dict | None:
        """Embedded interview record, or None if never scheduled."""
        if self.interview_status == InterviewStatus.UNSCHEDULED.value:
            return None
        return {
            'status': self.interview_status,
            'scheduled_at': self.interview_scheduled_at.isoformat() if self.interview_scheduled_at else None,
            'location': self.interview_location,
            'meeting_link': self.interview_meeting_link,
            'notes': self.interview_notes,
        }
    
    @property
    def feedback(self) -> dict | None:
        """Embedded feedback record, or None if never written."""
        if self.feedback_message is None:
            return None
        return {
            'message': self.feedback_message,
            'category': self.feedback_category,
            'provided_at': self.feedback_provided_at.isoformat() if self.feedback_provided_at else None,
        }
    
    def to_dict(self, include_job: bool = False) -> dict:
        """Convert application to dictionary."""
        result = {
            'id': self.id,
            'job_posting_id': self.job_posting_id,
            'applicant_id': self.applicant_id,
            'employer_id': self.employer_id,
            'status': self.status,
            'version': self.version,
            'status_changed_at': self.status_changed_at.isoformat() if self.status_changed_at else None,
            'applied_at': self.applied_at.isoformat() if self.applied_at else None,
            'cover_letter_text': self.cover_letter_text,
            'cover_letter_document': self.cover_letter_document,
            'resume_reference': self.resume_reference,
            'interview': self.interview,
            'feedback': self.feedback,
            'is_terminal': self.is_terminal,
            'is_frozen': self.is_frozen,
            'employer_removed': self.is_frozen,
            'days_since_applied': self.days_since_applied,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
        
        if self.is_frozen:
            result['availability_message'] = FROZEN_MESSAGE
        
        if include_job:
            result['job'] = self.job_posting.to_dict() if self.job_posting else None
        
        return result
