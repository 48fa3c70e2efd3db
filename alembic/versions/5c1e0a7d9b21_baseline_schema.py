"""baseline_schema

Revision ID: 5c1e0a7d9b21
Revises: 
Create Date: 2026-10-19 09:12:44.118204

Identities, profiles, jobs, applications, saved jobs, notifications,
analytics events and rate-limit hits. Tables that already exist are skipped.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision: str = '5c1e0a7d9b21'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def table_exists(table_name: str) -> bool:
    """Check if a table exists in the database."""
    bind = op.get_bind()
    inspector = inspect(bind)
    return table_name in inspector.get_table_names()


def upgrade() -> None:
    if not table_exists('identities'):
        op.create_table('identities',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('email', sa.String(length=255), nullable=False),
            sa.Column('password_hash', sa.String(), nullable=False),
            sa.Column('role', sa.String(length=20), nullable=False),
            sa.Column('is_active', sa.Boolean(), nullable=False),
            sa.Column('email_verified', sa.Boolean(), nullable=False),
            sa.Column('last_login_at', sa.DateTime(), nullable=True),
            sa.Column('reset_token_hash', sa.String(length=64), nullable=True),
            sa.Column('reset_token_expires_at', sa.DateTime(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_identities_id'), 'identities', ['id'], unique=False)
        op.create_index(op.f('ix_identities_email'), 'identities', ['email'], unique=True)
        op.create_index(op.f('ix_identities_role'), 'identities', ['role'], unique=False)
        op.create_index(op.f('ix_identities_reset_token_hash'), 'identities', ['reset_token_hash'], unique=False)

    if not table_exists('jobseeker_profiles'):
        op.create_table('jobseeker_profiles',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('identity_id', sa.Integer(), nullable=False),
            sa.Column('first_name', sa.String(length=100), nullable=False),
            sa.Column('last_name', sa.String(length=100), nullable=False),
            sa.Column('phone', sa.String(length=50), nullable=True),
            sa.Column('location', sa.String(length=255), nullable=True),
            sa.Column('bio', sa.Text(), nullable=True),
            sa.Column('skills', sa.JSON(), nullable=False),
            sa.Column('social_links', sa.JSON(), nullable=False),
            sa.Column('preferences', sa.JSON(), nullable=False),
            sa.Column('resume_ref', sa.String(), nullable=True),
            sa.Column('resume_filename', sa.String(), nullable=True),
            sa.Column('resume_uploaded_at', sa.DateTime(), nullable=True),
            sa.Column('picture_ref', sa.String(), nullable=True),
            sa.Column('picture_filename', sa.String(), nullable=True),
            sa.Column('picture_uploaded_at', sa.DateTime(), nullable=True),
            sa.Column('profile_views', sa.Integer(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['identity_id'], ['identities.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_jobseeker_profiles_id'), 'jobseeker_profiles', ['id'], unique=False)
        op.create_index(op.f('ix_jobseeker_profiles_identity_id'), 'jobseeker_profiles', ['identity_id'], unique=True)

    for table, columns in (
        ('jobseeker_experience', [
            sa.Column('position', sa.String(length=255), nullable=False),
            sa.Column('company', sa.String(length=255), nullable=False),
            sa.Column('start_date', sa.Date(), nullable=False),
            sa.Column('end_date', sa.Date(), nullable=True),
            sa.Column('is_current_job', sa.Boolean(), nullable=False),
            sa.Column('description', sa.Text(), nullable=True),
        ]),
        ('jobseeker_education', [
            sa.Column('degree', sa.String(length=255), nullable=False),
            sa.Column('institution', sa.String(length=255), nullable=False),
            sa.Column('start_date', sa.Date(), nullable=False),
            sa.Column('end_date', sa.Date(), nullable=True),
            sa.Column('is_current_study', sa.Boolean(), nullable=False),
            sa.Column('gpa', sa.String(length=20), nullable=True),
        ]),
        ('jobseeker_certifications', [
            sa.Column('name', sa.String(length=255), nullable=False),
            sa.Column('issuer', sa.String(length=255), nullable=True),
            sa.Column('issue_date', sa.Date(), nullable=True),
            sa.Column('expiry_date', sa.Date(), nullable=True),
            sa.Column('credential_id', sa.String(length=255), nullable=True),
        ]),
    ):
        if not table_exists(table):
            op.create_table(table,
                sa.Column('id', sa.Integer(), nullable=False),
                sa.Column('profile_id', sa.Integer(), nullable=False),
                *columns,
                sa.ForeignKeyConstraint(['profile_id'], ['jobseeker_profiles.id'], ondelete='CASCADE'),
                sa.PrimaryKeyConstraint('id')
            )
            op.create_index(op.f(f'ix_{table}_id'), table, ['id'], unique=False)
            op.create_index(op.f(f'ix_{table}_profile_id'), table, ['profile_id'], unique=False)

    if not table_exists('company_profiles'):
        op.create_table('company_profiles',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('identity_id', sa.Integer(), nullable=False),
            sa.Column('company_name', sa.String(length=255), nullable=False),
            sa.Column('industry', sa.String(length=255), nullable=False),
            sa.Column('company_size', sa.String(length=20), nullable=False),
            sa.Column('founded_year', sa.Integer(), nullable=True),
            sa.Column('website', sa.String(), nullable=True),
            sa.Column('phone', sa.String(length=50), nullable=True),
            sa.Column('location', sa.JSON(), nullable=False),
            sa.Column('description', sa.Text(), nullable=True),
            sa.Column('culture', sa.JSON(), nullable=False),
            sa.Column('benefits', sa.JSON(), nullable=False),
            sa.Column('social_links', sa.JSON(), nullable=False),
            sa.Column('logo_ref', sa.String(), nullable=True),
            sa.Column('logo_filename', sa.String(), nullable=True),
            sa.Column('logo_uploaded_at', sa.DateTime(), nullable=True),
            sa.Column('verification_status', sa.String(length=20), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['identity_id'], ['identities.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_company_profiles_id'), 'company_profiles', ['id'], unique=False)
        op.create_index(op.f('ix_company_profiles_identity_id'), 'company_profiles', ['identity_id'], unique=True)
        op.create_index(op.f('ix_company_profiles_company_name'), 'company_profiles', ['company_name'], unique=False)

    if not table_exists('company_offices'):
        op.create_table('company_offices',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('company_id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=255), nullable=False),
            sa.Column('address', sa.String(length=500), nullable=False),
            sa.Column('type', sa.String(length=20), nullable=False),
            sa.ForeignKeyConstraint(['company_id'], ['company_profiles.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_company_offices_id'), 'company_offices', ['id'], unique=False)
        op.create_index(op.f('ix_company_offices_company_id'), 'company_offices', ['company_id'], unique=False)

    if not table_exists('jobs'):
        op.create_table('jobs',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('employer_id', sa.Integer(), nullable=False),
            sa.Column('title', sa.String(length=255), nullable=False),
            sa.Column('department', sa.String(length=255), nullable=False),
            sa.Column('description', sa.Text(), nullable=False),
            sa.Column('requirements', sa.JSON(), nullable=False),
            sa.Column('responsibilities', sa.JSON(), nullable=False),
            sa.Column('location', sa.String(length=255), nullable=False),
            sa.Column('job_type', sa.String(length=20), nullable=False),
            sa.Column('experience_level', sa.String(length=20), nullable=False),
            sa.Column('salary_min', sa.Integer(), nullable=True),
            sa.Column('salary_max', sa.Integer(), nullable=True),
            sa.Column('salary_currency', sa.String(length=10), nullable=False),
            sa.Column('salary_negotiable', sa.Boolean(), nullable=False),
            sa.Column('skills', sa.JSON(), nullable=False),
            sa.Column('benefits', sa.JSON(), nullable=False),
            sa.Column('application_deadline', sa.DateTime(), nullable=True),
            sa.Column('status', sa.String(length=20), nullable=False),
            sa.Column('views', sa.Integer(), nullable=False),
            sa.Column('applications_count', sa.Integer(), nullable=False),
            sa.Column('featured', sa.Boolean(), nullable=False),
            sa.Column('urgent_hiring', sa.Boolean(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['employer_id'], ['company_profiles.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('idx_jobs_employer_status', 'jobs', ['employer_id', 'status'], unique=False)
        op.create_index(op.f('ix_jobs_id'), 'jobs', ['id'], unique=False)
        op.create_index(op.f('ix_jobs_employer_id'), 'jobs', ['employer_id'], unique=False)
        op.create_index(op.f('ix_jobs_title'), 'jobs', ['title'], unique=False)
        op.create_index(op.f('ix_jobs_department'), 'jobs', ['department'], unique=False)
        op.create_index(op.f('ix_jobs_location'), 'jobs', ['location'], unique=False)
        op.create_index(op.f('ix_jobs_status'), 'jobs', ['status'], unique=False)
        op.create_index(op.f('ix_jobs_created_at'), 'jobs', ['created_at'], unique=False)

    if not table_exists('applications'):
        op.create_table('applications',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('job_id', sa.Integer(), nullable=False),
            sa.Column('job_seeker_id', sa.Integer(), nullable=False),
            sa.Column('employer_id', sa.Integer(), nullable=False),
            sa.Column('status', sa.String(length=30), nullable=False),
            sa.Column('cover_letter', sa.Text(), nullable=True),
            sa.Column('resume_ref', sa.String(), nullable=True),
            sa.Column('resume_filename', sa.String(), nullable=True),
            sa.Column('custom_answers', sa.JSON(), nullable=False),
            sa.Column('interview_details', sa.JSON(), nullable=True),
            sa.Column('rating', sa.Integer(), nullable=True),
            sa.Column('employer_notes', sa.Text(), nullable=True),
            sa.Column('rejection_reason', sa.Text(), nullable=True),
            sa.Column('applied_at', sa.DateTime(), nullable=False),
            sa.Column('last_status_update', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['job_id'], ['jobs.id'], ondelete='CASCADE'),
            sa.ForeignKeyConstraint(['job_seeker_id'], ['jobseeker_profiles.id'], ),
            sa.ForeignKeyConstraint(['employer_id'], ['company_profiles.id'], ),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('job_id', 'job_seeker_id', name='uq_applications_job_seeker')
        )
        op.create_index('idx_applications_employer_status', 'applications', ['employer_id', 'status'], unique=False)
        op.create_index(op.f('ix_applications_id'), 'applications', ['id'], unique=False)
        op.create_index(op.f('ix_applications_job_id'), 'applications', ['job_id'], unique=False)
        op.create_index(op.f('ix_applications_job_seeker_id'), 'applications', ['job_seeker_id'], unique=False)
        op.create_index(op.f('ix_applications_employer_id'), 'applications', ['employer_id'], unique=False)
        op.create_index(op.f('ix_applications_status'), 'applications', ['status'], unique=False)
        op.create_index(op.f('ix_applications_applied_at'), 'applications', ['applied_at'], unique=False)

    if not table_exists('saved_jobs'):
        op.create_table('saved_jobs',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('job_seeker_id', sa.Integer(), nullable=False),
            sa.Column('job_id', sa.Integer(), nullable=False),
            sa.Column('saved_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['job_seeker_id'], ['jobseeker_profiles.id'], ),
            sa.ForeignKeyConstraint(['job_id'], ['jobs.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('job_seeker_id', 'job_id', name='uq_saved_jobs_seeker_job')
        )
        op.create_index(op.f('ix_saved_jobs_id'), 'saved_jobs', ['id'], unique=False)
        op.create_index(op.f('ix_saved_jobs_job_seeker_id'), 'saved_jobs', ['job_seeker_id'], unique=False)
        op.create_index(op.f('ix_saved_jobs_job_id'), 'saved_jobs', ['job_id'], unique=False)

    if not table_exists('notifications'):
        op.create_table('notifications',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('identity_id', sa.Integer(), nullable=False),
            sa.Column('type', sa.String(length=40), nullable=False),
            sa.Column('title', sa.String(length=255), nullable=False),
            sa.Column('message', sa.Text(), nullable=False),
            sa.Column('data', sa.JSON(), nullable=True),
            sa.Column('is_read', sa.Boolean(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['identity_id'], ['identities.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('idx_notifications_identity_read', 'notifications', ['identity_id', 'is_read'], unique=False)
        op.create_index(op.f('ix_notifications_id'), 'notifications', ['id'], unique=False)
        op.create_index(op.f('ix_notifications_identity_id'), 'notifications', ['identity_id'], unique=False)
        op.create_index(op.f('ix_notifications_created_at'), 'notifications', ['created_at'], unique=False)

    if not table_exists('analytics_events'):
        op.create_table('analytics_events',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('entity_type', sa.String(length=20), nullable=False),
            sa.Column('entity_id', sa.Integer(), nullable=False),
            sa.Column('event_type', sa.String(length=20), nullable=False),
            sa.Column('metadata', sa.JSON(), nullable=True),
            sa.Column('user_agent', sa.String(), nullable=True),
            sa.Column('ip_address', sa.String(length=64), nullable=True),
            sa.Column('timestamp', sa.DateTime(), nullable=False),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('idx_analytics_entity_event', 'analytics_events', ['entity_type', 'entity_id', 'event_type'], unique=False)
        op.create_index(op.f('ix_analytics_events_id'), 'analytics_events', ['id'], unique=False)
        op.create_index(op.f('ix_analytics_events_timestamp'), 'analytics_events', ['timestamp'], unique=False)

    if not table_exists('rate_limit_hits'):
        op.create_table('rate_limit_hits',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('operation', sa.String(length=40), nullable=False),
            sa.Column('client_key', sa.String(length=128), nullable=False),
            sa.Column('hit_at', sa.Float(), nullable=False),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('idx_rate_limit_lookup', 'rate_limit_hits', ['operation', 'client_key', 'hit_at'], unique=False)


def downgrade() -> None:
    for table in (
        'rate_limit_hits',
        'analytics_events',
        'notifications',
        'saved_jobs',
        'applications',
        'jobs',
        'company_offices',
        'company_profiles',
        'jobseeker_certifications',
        'jobseeker_education',
        'jobseeker_experience',
        'jobseeker_profiles',
        'identities',
    ):
        if table_exists(table):
            op.drop_table(table)
