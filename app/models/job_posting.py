"""
Job Posting Model
Minimal job record that applications point at. Postings themselves are
managed elsewhere; this table only lets an application resolve its job
and the employer that owns it.
"""
from datetime import datetime
from sqlalchemy import String, Integer, Boolean, DateTime, Index
from app import db


class JobPosting(db.Model):
    """A job posting owned by an employer."""
    __tablename__ = 'job_postings'
    
    id = db.Column(Integer, primary_key=True)
    employer_id = db.Column(Integer, nullable=False, index=True)
    title = db.Column(String(255), nullable=False)
    company = db.Column(String(255))
    location = db.Column(String(255))
    is_active = db.Column(Boolean, default=True, nullable=False)
    
    created_at = db.Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    
    applications = db.relationship('JobApplication', back_populates='job_posting', passive_deletes=True)
    
    __table_args__ = (
        Index('idx_job_posting_employer_active', 'employer_id', 'is_active'),
    )
    
    def __repr__(self):
        return f'<JobPosting {self.id} employer={self.employer_id} title={self.title}>'
    
    def to_dict(self) -> dict:
        """Convert job posting to dictionary."""
        return {
            'id': self.id,
            'employer_id': self.employer_id,
            'title': self.title,
            'company': self.company,
            'location': self.location,
            'is_active': self.is_active,
        }
