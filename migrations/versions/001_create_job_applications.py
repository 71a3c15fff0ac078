"""Create job postings and job applications

Revision ID: 001
Revises: 
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    """Create job_postings and job_applications tables"""

    op.create_table(
        'job_postings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('employer_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('company', sa.String(255), nullable=True),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_job_postings_employer_id', 'job_postings', ['employer_id'])
    op.create_index('idx_job_posting_employer_active', 'job_postings', ['employer_id', 'is_active'])

    op.create_table(
        'job_applications',
        sa.Column('id', sa.Integer(), primary_key=True),

        # References; the job reference is nulled when the posting is removed
        sa.Column('job_posting_id', sa.Integer(), sa.ForeignKey('job_postings.id', ondelete='SET NULL'), nullable=True),
        sa.Column('applicant_id', sa.Integer(), nullable=False),
        sa.Column('employer_id', sa.Integer(), nullable=False),

        # Status tracking
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('status_changed_at', sa.DateTime(), nullable=True),
        sa.Column('status_changed_by_id', sa.Integer(), nullable=True),

        # Submission details
        sa.Column('applied_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('cover_letter_text', sa.Text(), nullable=True),
        sa.Column('cover_letter_document', sa.String(500), nullable=True),
        sa.Column('resume_reference', sa.String(500), nullable=True),

        # Interview
        sa.Column('interview_status', sa.String(20), nullable=False, server_default='unscheduled'),
        sa.Column('interview_scheduled_at', sa.DateTime(), nullable=True),
        sa.Column('interview_location', sa.String(500), nullable=True),
        sa.Column('interview_meeting_link', sa.String(1000), nullable=True),
        sa.Column('interview_notes', sa.Text(), nullable=True),

        # Feedback
        sa.Column('feedback_message', sa.Text(), nullable=True),
        sa.Column('feedback_category', sa.String(100), nullable=True),
        sa.Column('feedback_provided_at', sa.DateTime(), nullable=True),

        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    op.create_index('ix_job_applications_job_posting_id', 'job_applications', ['job_posting_id'])
    op.create_index('ix_job_applications_applicant_id', 'job_applications', ['applicant_id'])
    op.create_index('ix_job_applications_employer_id', 'job_applications', ['employer_id'])
    op.create_index('ix_job_applications_status', 'job_applications', ['status'])
    op.create_index('idx_job_application_unique', 'job_applications', ['applicant_id', 'job_posting_id'], unique=True)
    op.create_index('idx_job_application_applicant_status', 'job_applications', ['applicant_id', 'status'])
    op.create_index('idx_job_application_employer_status', 'job_applications', ['employer_id', 'status'])
    op.create_index('idx_job_application_applied_at', 'job_applications', ['applied_at'])


def downgrade():
    """Drop job_applications and job_postings tables"""
    op.drop_table('job_applications')
    op.drop_table('job_postings')
