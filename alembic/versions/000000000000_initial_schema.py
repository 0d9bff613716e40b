"""initial_schema

Revision ID: 000000000000
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '000000000000'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSON_TYPE = sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), 'postgresql')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False, comment='Timestamp when record was created'),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False, comment='Timestamp when record was last updated'),
    ]


def upgrade() -> None:
    # Create users table
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False, comment='Login identifier, stored lowercase'),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('phone', sa.String(length=30), nullable=True),
        sa.Column('profile_image', sa.String(length=500), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
        sa.CheckConstraint("role IN ('admin', 'agent', 'property_owner', 'client')", name='check_user_role'),
        sa.CheckConstraint("status IN ('active', 'inactive', 'suspended')", name='check_user_status'),
    )

    # Create agents table
    op.create_table(
        'agents',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('license_number', sa.String(length=100), nullable=True),
        sa.Column('specializations', JSON_TYPE, nullable=False),
        sa.Column('areas_served', JSON_TYPE, nullable=False),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('profile_image', sa.String(length=500), nullable=True),
        sa.Column('performance_metrics', JSON_TYPE, nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('user_id'),
        sa.UniqueConstraint('license_number'),
        sa.CheckConstraint("status IN ('active', 'inactive', 'suspended')", name='check_agent_status'),
    )

    # Create properties table
    op.create_table(
        'properties',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('owner_id', sa.Integer(), nullable=False, comment='User who listed the property'),
        sa.Column('owner_name', sa.String(length=200), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=30), nullable=True),
        sa.Column('title_number', sa.String(length=100), nullable=True, comment='Land title number'),
        sa.Column('survey_plan_number', sa.String(length=100), nullable=True, comment='Survey plan number'),
        sa.Column('address', sa.String(length=255), nullable=False),
        sa.Column('latitude', sa.Numeric(precision=10, scale=7), nullable=True, comment='Latitude'),
        sa.Column('longitude', sa.Numeric(precision=10, scale=7), nullable=True, comment='Longitude'),
        sa.Column('property_type', sa.String(length=50), nullable=True),
        sa.Column('size', sa.Float(), nullable=True),
        sa.Column('price', sa.Numeric(precision=14, scale=2), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('images', JSON_TYPE, nullable=False),
        sa.Column('verification_status', sa.String(length=20), nullable=False),
        sa.Column('documents', JSON_TYPE, nullable=False, comment='Ordered embedded documents'),
        sa.Column('history', JSON_TYPE, nullable=False, comment='Append-only activity log'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id']),
        sa.UniqueConstraint('title_number'),
        sa.UniqueConstraint('survey_plan_number'),
        sa.CheckConstraint('latitude >= -90 AND latitude <= 90', name='check_latitude_range'),
        sa.CheckConstraint('longitude >= -180 AND longitude <= 180', name='check_longitude_range'),
        sa.CheckConstraint("verification_status IN ('pending', 'verified', 'rejected', 'flagged')", name='check_verification_status'),
    )
    op.create_index('idx_properties_owner_id', 'properties', ['owner_id'], unique=False)
    op.create_index('idx_properties_verification_status', 'properties', ['verification_status'], unique=False)

    # Create leads table
    op.create_table(
        'leads',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=30), nullable=True),
        sa.Column('source', sa.String(length=20), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('assigned_agent_id', sa.Integer(), nullable=True),
        sa.Column('property_interest', JSON_TYPE, nullable=False),
        sa.Column('requirements', JSON_TYPE, nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('communication_history', JSON_TYPE, nullable=False, comment='Append-only activity log'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['assigned_agent_id'], ['users.id'], ondelete='SET NULL'),
        sa.CheckConstraint("source IN ('website', 'referral', 'social_media', 'direct', 'other')", name='check_lead_source'),
        sa.CheckConstraint("status IN ('new', 'contacted', 'qualified', 'proposal', 'negotiation', 'won', 'lost')", name='check_lead_status'),
    )
    op.create_index('idx_leads_agent_status', 'leads', ['assigned_agent_id', 'status'], unique=False)
    op.create_index('idx_leads_email', 'leads', ['email'], unique=False)

    # Create deals table
    op.create_table(
        'deals',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('property_id', sa.Integer(), nullable=False),
        sa.Column('lead_id', sa.Integer(), nullable=False),
        sa.Column('agent_id', sa.Integer(), nullable=False),
        sa.Column('stage', sa.String(length=30), nullable=False),
        sa.Column('deal_type', sa.String(length=10), nullable=False),
        sa.Column('value', sa.Numeric(precision=14, scale=2), nullable=False),
        sa.Column('commission', sa.Numeric(precision=14, scale=2), nullable=False),
        sa.Column('closing_date', sa.Date(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('documents', JSON_TYPE, nullable=False),
        sa.Column('activity_log', JSON_TYPE, nullable=False, comment='Append-only activity log'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['lead_id'], ['leads.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['agent_id'], ['users.id']),
        sa.CheckConstraint("stage IN ('new', 'contact_made', 'viewing_scheduled', 'negotiation', 'agreement', 'documentation', 'closed', 'cancelled')", name='check_deal_stage'),
        sa.CheckConstraint("deal_type IN ('sale', 'rent', 'lease')", name='check_deal_type'),
        sa.CheckConstraint('value >= 0', name='check_deal_value_positive'),
    )
    op.create_index('idx_deals_agent_stage', 'deals', ['agent_id', 'stage'], unique=False)
    op.create_index('idx_deals_property_id', 'deals', ['property_id'], unique=False)
    op.create_index('idx_deals_lead_id', 'deals', ['lead_id'], unique=False)

    # Create tasks table
    op.create_table(
        'tasks',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('priority', sa.String(length=10), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('assigned_to_id', sa.Integer(), nullable=False),
        sa.Column('assigned_by_id', sa.Integer(), nullable=False),
        sa.Column('related_model', sa.String(length=20), nullable=True, comment='Property, Lead or Deal'),
        sa.Column('related_id', sa.Integer(), nullable=True),
        sa.Column('reminders', JSON_TYPE, nullable=False),
        sa.Column('history', JSON_TYPE, nullable=False, comment='Append-only activity log'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['assigned_to_id'], ['users.id']),
        sa.ForeignKeyConstraint(['assigned_by_id'], ['users.id']),
        sa.CheckConstraint("priority IN ('low', 'medium', 'high')", name='check_task_priority'),
        sa.CheckConstraint("status IN ('pending', 'in_progress', 'completed', 'cancelled')", name='check_task_status'),
    )
    op.create_index('idx_tasks_assignee_status', 'tasks', ['assigned_to_id', 'status'], unique=False)
    op.create_index('idx_tasks_due_date', 'tasks', ['due_date'], unique=False)

    # Create calendar_events table
    op.create_table(
        'calendar_events',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('event_type', sa.String(length=20), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('attendees', JSON_TYPE, nullable=False),
        sa.Column('related_model', sa.String(length=20), nullable=True),
        sa.Column('related_id', sa.Integer(), nullable=True),
        sa.Column('created_by_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['created_by_id'], ['users.id']),
        sa.CheckConstraint("event_type IN ('meeting', 'viewing', 'inspection', 'follow_up', 'other')", name='check_event_type'),
        sa.CheckConstraint("status IN ('scheduled', 'in_progress', 'completed', 'cancelled')", name='check_event_status'),
        sa.CheckConstraint('end_time > start_time', name='check_event_time_order'),
    )
    op.create_index('idx_calendar_events_window', 'calendar_events', ['start_time', 'end_time'], unique=False)
    op.create_index('idx_calendar_events_created_by', 'calendar_events', ['created_by_id'], unique=False)


def downgrade() -> None:
    op.drop_index('idx_calendar_events_created_by', table_name='calendar_events')
    op.drop_index('idx_calendar_events_window', table_name='calendar_events')
    op.drop_table('calendar_events')

    op.drop_index('idx_tasks_due_date', table_name='tasks')
    op.drop_index('idx_tasks_assignee_status', table_name='tasks')
    op.drop_table('tasks')

    op.drop_index('idx_deals_lead_id', table_name='deals')
    op.drop_index('idx_deals_property_id', table_name='deals')
    op.drop_index('idx_deals_agent_stage', table_name='deals')
    op.drop_table('deals')

    op.drop_index('idx_leads_email', table_name='leads')
    op.drop_index('idx_leads_agent_status', table_name='leads')
    op.drop_table('leads')

    op.drop_index('idx_properties_verification_status', table_name='properties')
    op.drop_index('idx_properties_owner_id', table_name='properties')
    op.drop_table('properties')

    op.drop_table('agents')
    op.drop_table('users')
