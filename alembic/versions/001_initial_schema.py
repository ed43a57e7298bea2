"""Initial job board schema

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None

user_role = postgresql.ENUM('job_seeker', 'recruiter', 'admin', name='user_role', create_type=False)
job_status = postgresql.ENUM('open', 'closed', 'paused', name='job_status', create_type=False)
application_status = postgresql.ENUM(
    'applied', 'viewed', 'shortlisted', 'rejected', 'hired',
    name='application_status',
    create_type=False,
)


def _timestamp(name: str) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())


def upgrade() -> None:
    """Create enums, tables, constraints and indexes."""
    bind = op.get_bind()
    user_role.create(bind, checkfirst=True)
    job_status.create(bind, checkfirst=True)
    application_status.create(bind, checkfirst=True)

    op.create_table(
        'identities',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('raw_user_meta_data', sa.JSON(), nullable=True),
        _timestamp('created_at'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email', name='uq_identities_email'),
    )

    op.create_table(
        'profiles',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('full_name', sa.Text(), nullable=False),
        sa.Column('role', user_role, nullable=False, server_default='job_seeker'),
        sa.Column('phone', sa.Text(), nullable=True),
        sa.Column('location', sa.Text(), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('company_name', sa.Text(), nullable=True),
        sa.Column('resume_url', sa.Text(), nullable=True),
        sa.Column('profile_image_url', sa.Text(), nullable=True),
        sa.Column('skills', postgresql.ARRAY(sa.Text()), nullable=True),
        sa.Column('experience_years', sa.Integer(), nullable=True),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        sa.ForeignKeyConstraint(['id'], ['identities.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'jobs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('recruiter_id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('company_name', sa.Text(), nullable=False),
        sa.Column('location', sa.Text(), nullable=False),
        sa.Column('job_type', sa.Text(), nullable=False),
        sa.Column('salary_min', sa.Integer(), nullable=True),
        sa.Column('salary_max', sa.Integer(), nullable=True),
        sa.Column('required_skills', postgresql.ARRAY(sa.Text()), nullable=False),
        sa.Column('experience_required', sa.Integer(), nullable=True),
        sa.Column('status', job_status, nullable=False, server_default='open'),
        sa.Column('views_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('applications_count', sa.Integer(), nullable=False, server_default='0'),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        sa.ForeignKeyConstraint(['recruiter_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_jobs_recruiter_id', 'jobs', ['recruiter_id'])
    op.create_index('idx_jobs_status', 'jobs', ['status'])

    op.create_table(
        'applications',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('job_id', sa.Uuid(), nullable=False),
        sa.Column('applicant_id', sa.Uuid(), nullable=False),
        sa.Column('status', application_status, nullable=False, server_default='applied'),
        sa.Column('cover_letter', sa.Text(), nullable=True),
        sa.Column('resume_url', sa.Text(), nullable=True),
        _timestamp('applied_at'),
        _timestamp('updated_at'),
        sa.ForeignKeyConstraint(['job_id'], ['jobs.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['applicant_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('job_id', 'applicant_id', name='uq_applications_job_applicant'),
    )
    op.create_index('idx_applications_job_id', 'applications', ['job_id'])
    op.create_index('idx_applications_applicant_id', 'applications', ['applicant_id'])

    op.create_table(
        'saved_jobs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('job_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        _timestamp('saved_at'),
        sa.ForeignKeyConstraint(['job_id'], ['jobs.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('job_id', 'user_id', name='uq_saved_jobs_job_user'),
    )
    op.create_index('idx_saved_jobs_user_id', 'saved_jobs', ['user_id'])


def downgrade() -> None:
    """Drop tables, then enums."""
    op.drop_index('idx_saved_jobs_user_id', table_name='saved_jobs')
    op.drop_table('saved_jobs')
    op.drop_index('idx_applications_applicant_id', table_name='applications')
    op.drop_index('idx_applications_job_id', table_name='applications')
    op.drop_table('applications')
    op.drop_index('idx_jobs_status', table_name='jobs')
    op.drop_index('idx_jobs_recruiter_id', table_name='jobs')
    op.drop_table('jobs')
    op.drop_table('profiles')
    op.drop_table('identities')

    bind = op.get_bind()
    application_status.drop(bind, checkfirst=True)
    job_status.drop(bind, checkfirst=True)
    user_role.drop(bind, checkfirst=True)
