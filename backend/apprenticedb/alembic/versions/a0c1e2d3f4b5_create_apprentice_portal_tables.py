"""create apprentice portal tables

Revision ID: a0c1e2d3f4b5
Revises:
Create Date: 2026-10-19 09:12:04.118532

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a0c1e2d3f4b5'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


profile_role_enum = sa.Enum('apprentice', 'mentor', 'manager', 'god', name='profile_role_enum')
apprentice_status_enum = sa.Enum('active', 'inactive', 'completed', name='apprentice_status_enum')
curriculum_progress_status_enum = sa.Enum(
    'not_started', 'in_progress', 'completed', 'reviewed', name='curriculum_progress_status_enum'
)
logbook_entry_status_enum = sa.Enum('draft', 'submitted', 'approved', 'rejected', name='logbook_entry_status_enum')
weekly_submission_status_enum = sa.Enum('submitted', name='weekly_submission_status_enum')


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'profiles',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=True),
        sa.Column('avatar_url', sa.String(length=1024), nullable=True),
        sa.Column('role', profile_role_enum, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_profiles_email', 'profiles', ['email'], unique=True)
    op.create_index('ix_profiles_role', 'profiles', ['role'], unique=False)
    op.create_index('idx_profiles_role_active', 'profiles', ['role', 'is_active'], unique=False)

    op.create_table(
        'apprentices',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('mentor_id', sa.String(length=36), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('status', apprentice_status_enum, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['mentor_id'], ['profiles.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_apprentices_user_id', 'apprentices', ['user_id'], unique=True)
    op.create_index('ix_apprentices_mentor_id', 'apprentices', ['mentor_id'], unique=False)
    op.create_index('ix_apprentices_status', 'apprentices', ['status'], unique=False)
    op.create_index('idx_apprentices_mentor_status', 'apprentices', ['mentor_id', 'status'], unique=False)

    op.create_table(
        'curriculum_items',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(length=128), nullable=True),
        sa.Column('difficulty', sa.String(length=32), nullable=True),
        sa.Column('estimated_hours', sa.Numeric(6, 2), nullable=True),
        sa.Column('order_index', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_curriculum_items_category', 'curriculum_items', ['category'], unique=False)
    op.create_index('idx_curriculum_items_active_order', 'curriculum_items', ['is_active', 'order_index'], unique=False)

    op.create_table(
        'apprentice_progress',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('apprentice_id', sa.String(length=36), nullable=False),
        sa.Column('curriculum_item_id', sa.String(length=36), nullable=False),
        sa.Column('status', curriculum_progress_status_enum, nullable=False),
        sa.Column('hours_spent', sa.Numeric(7, 2), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['apprentice_id'], ['apprentices.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['curriculum_item_id'], ['curriculum_items.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('apprentice_id', 'curriculum_item_id', name='uq_apprentice_progress_item'),
    )
    op.create_index('ix_apprentice_progress_apprentice_id', 'apprentice_progress', ['apprentice_id'], unique=False)
    op.create_index(
        'ix_apprentice_progress_curriculum_item_id', 'apprentice_progress', ['curriculum_item_id'], unique=False
    )

    op.create_table(
        'logbook_entries',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('apprentice_id', sa.String(length=36), nullable=False),
        sa.Column('entry_date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=True),
        sa.Column('end_time', sa.Time(), nullable=True),
        sa.Column('hours_worked', sa.Numeric(5, 2), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('ata_chapter_code', sa.String(length=8), nullable=True),
        sa.Column('skills_practiced', sa.JSON(), nullable=True),
        sa.Column('status', logbook_entry_status_enum, nullable=False),
        sa.Column('approved_by', sa.String(length=36), nullable=True),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('rejected_by', sa.String(length=36), nullable=True),
        sa.Column('rejected_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['apprentice_id'], ['apprentices.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['approved_by'], ['profiles.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['rejected_by'], ['profiles.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_logbook_entries_apprentice_id', 'logbook_entries', ['apprentice_id'], unique=False)
    op.create_index('ix_logbook_entries_ata_chapter_code', 'logbook_entries', ['ata_chapter_code'], unique=False)
    op.create_index('ix_logbook_entries_status', 'logbook_entries', ['status'], unique=False)
    op.create_index(
        'idx_logbook_entries_apprentice_date', 'logbook_entries', ['apprentice_id', 'entry_date'], unique=False
    )
    op.create_index(
        'idx_logbook_entries_apprentice_status', 'logbook_entries', ['apprentice_id', 'status'], unique=False
    )

    op.create_table(
        'weekly_submissions',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('apprentice_id', sa.String(length=36), nullable=False),
        sa.Column('week_number', sa.Integer(), nullable=False),
        sa.Column('curriculum_item_id', sa.String(length=36), nullable=True),
        sa.Column('reflection_text', sa.Text(), nullable=False),
        sa.Column('status', weekly_submission_status_enum, nullable=False),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['apprentice_id'], ['apprentices.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['curriculum_item_id'], ['curriculum_items.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('apprentice_id', 'week_number', name='uq_weekly_submissions_apprentice_week'),
    )
    op.create_index('ix_weekly_submissions_apprentice_id', 'weekly_submissions', ['apprentice_id'], unique=False)

    op.create_table(
        'weekly_submission_files',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('submission_id', sa.String(length=36), nullable=False),
        sa.Column('file_url', sa.String(length=2048), nullable=False),
        sa.Column('file_name', sa.String(length=255), nullable=False),
        sa.Column('file_size', sa.BigInteger(), nullable=False),
        sa.Column('file_type', sa.String(length=128), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['submission_id'], ['weekly_submissions.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'ix_weekly_submission_files_submission_id', 'weekly_submission_files', ['submission_id'], unique=False
    )

    op.create_table(
        'audit_events',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('entity_type', sa.String(length=64), nullable=False),
        sa.Column('entity_id', sa.String(length=64), nullable=False),
        sa.Column('action', sa.String(length=64), nullable=False),
        sa.Column('actor_user_id', sa.String(length=36), nullable=True),
        sa.Column('occurred_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('before', sa.JSON(), nullable=True),
        sa.Column('after', sa.JSON(), nullable=True),
        sa.Column('correlation_id', sa.String(length=64), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.ForeignKeyConstraint(['actor_user_id'], ['profiles.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_audit_events_id', 'audit_events', ['id'], unique=False)
    op.create_index('ix_audit_events_entity_type', 'audit_events', ['entity_type'], unique=False)
    op.create_index('ix_audit_events_entity_id', 'audit_events', ['entity_id'], unique=False)
    op.create_index('ix_audit_events_action', 'audit_events', ['action'], unique=False)
    op.create_index('ix_audit_events_actor_user_id', 'audit_events', ['actor_user_id'], unique=False)
    op.create_index('ix_audit_events_occurred_at', 'audit_events', ['occurred_at'], unique=False)
    op.create_index('ix_audit_events_correlation_id', 'audit_events', ['correlation_id'], unique=False)
    op.create_index('ix_audit_events_entity', 'audit_events', ['entity_type', 'entity_id'], unique=False)
    op.create_index('ix_audit_events_time_desc', 'audit_events', [sa.text('occurred_at DESC')], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('audit_events')
    op.drop_table('weekly_submission_files')
    op.drop_table('weekly_submissions')
    op.drop_table('logbook_entries')
    op.drop_table('apprentice_progress')
    op.drop_table('curriculum_items')
    op.drop_table('apprentices')
    op.drop_table('profiles')

    bind = op.get_bind()
    for enum_type in (
        weekly_submission_status_enum,
        logbook_entry_status_enum,
        curriculum_progress_status_enum,
        apprentice_status_enum,
        profile_role_enum,
    ):
        enum_type.drop(bind, checkfirst=True)
