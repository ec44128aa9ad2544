"""Create live_sessions, session_participants and session_feedback tables

Revision ID: ls001_create_live_session_tables
Revises:
Create Date: 2026-10-17

Adds the live session aggregate: sessions with a hard participant capacity
and optimistic version counter, their registrations with attendance state,
and one feedback entry per attendee.
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'ls001_create_live_session_tables'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'live_sessions',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(32), nullable=False),
        sa.Column('language', sa.String(8), nullable=False, server_default='en'),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('instructor_id', sa.String(), nullable=False),
        sa.Column('related_course_id', sa.String(), nullable=True),
        sa.Column('related_museum_id', sa.String(), nullable=True),
        sa.Column('scheduled_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False),
        sa.Column('max_participants', sa.Integer(), nullable=False, server_default='50'),
        sa.Column('participant_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', sa.String(20), nullable=False, server_default='scheduled'),
        sa.Column('meeting_link', sa.String(), nullable=True),
        sa.Column('recording_url', sa.String(), nullable=True),
        sa.Column('average_rating', sa.Float(), nullable=False, server_default=sa.text('0')),
        sa.Column('is_recorded', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('chat_enabled', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('requires_registration', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('ended_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('NOW()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('NOW()')),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.CheckConstraint('duration_minutes >= 15 AND duration_minutes <= 300', name='check_duration_range'),
        sa.CheckConstraint('max_participants >= 1 AND max_participants <= 1000', name='check_capacity_range'),
        sa.CheckConstraint('participant_count >= 0', name='check_participant_count_positive'),
        sa.CheckConstraint('participant_count <= max_participants', name='check_participants_lte_capacity'),
        sa.CheckConstraint('average_rating >= 0 AND average_rating <= 5', name='check_average_rating_range'),
    )
    op.create_index('ix_live_sessions_category', 'live_sessions', ['category'])
    op.create_index('ix_live_sessions_instructor_id', 'live_sessions', ['instructor_id'])
    op.create_index('ix_live_sessions_status_scheduled', 'live_sessions', ['status', 'scheduled_at'])

    op.create_table(
        'session_participants',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('session_id', sa.String(), sa.ForeignKey('live_sessions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='registered'),
        sa.Column('registered_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('NOW()')),
        sa.Column('joined_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('left_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('session_id', 'user_id', name='unique_session_participant_user'),
    )
    op.create_index('ix_session_participants_user_id', 'session_participants', ['user_id'])
    op.create_index(
        'ix_session_participants_session_status',
        'session_participants',
        ['session_id', 'status'],
    )

    op.create_table(
        'session_feedback',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('session_id', sa.String(), sa.ForeignKey('live_sessions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('comment', sa.Text(), nullable=True),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('NOW()')),
        sa.UniqueConstraint('session_id', 'user_id', name='unique_session_feedback_user'),
        sa.CheckConstraint('rating >= 1 AND rating <= 5', name='check_feedback_rating_range'),
    )
    op.create_index('ix_session_feedback_session_id', 'session_feedback', ['session_id'])


def downgrade() -> None:
    op.drop_index('ix_session_feedback_session_id', table_name='session_feedback')
    op.drop_table('session_feedback')
    op.drop_index('ix_session_participants_session_status', table_name='session_participants')
    op.drop_index('ix_session_participants_user_id', table_name='session_participants')
    op.drop_table('session_participants')
    op.drop_index('ix_live_sessions_status_scheduled', table_name='live_sessions')
    op.drop_index('ix_live_sessions_instructor_id', table_name='live_sessions')
    op.drop_index('ix_live_sessions_category', table_name='live_sessions')
    op.drop_table('live_sessions')
