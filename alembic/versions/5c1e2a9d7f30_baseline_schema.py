"""baseline_schema

Revision ID: 5c1e2a9d7f30
Revises: 
Create Date: 2026-10-18 09:12:44.118203

Production-safe migration: only creates tables that do not exist yet.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision: str = '5c1e2a9d7f30'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def table_exists(table_name: str) -> bool:
    """Check if a table exists in the database."""
    bind = op.get_bind()
    inspector = inspect(bind)
    return table_name in inspector.get_table_names()


def upgrade() -> None:
    if not table_exists('users'):
        op.create_table('users',
            sa.Column('id', sa.String(length=36), nullable=False),
            sa.Column('email', sa.String(), nullable=False),
            sa.Column('name', sa.String(), nullable=False),
            sa.Column('password_hash', sa.String(), nullable=True),
            sa.Column('auth_provider', sa.String(), nullable=False),
            sa.Column('role', sa.String(), nullable=False),
            sa.Column('photo_url', sa.String(), nullable=True),
            sa.Column('title', sa.String(), nullable=True),
            sa.Column('company', sa.String(), nullable=True),
            sa.Column('location', sa.String(), nullable=True),
            sa.Column('about', sa.Text(), nullable=True),
            sa.Column('skills', sa.JSON(), nullable=False),
            sa.Column('onboarding_completed', sa.Boolean(), nullable=False),
            sa.Column('connections', sa.JSON(), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
        op.create_index(op.f('ix_users_role'), 'users', ['role'], unique=False)

    if not table_exists('subscriptions'):
        op.create_table('subscriptions',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.String(length=36), nullable=False),
            sa.Column('status', sa.String(), nullable=False),
            sa.Column('plan', sa.String(), nullable=True),
            sa.Column('trial_ends_at', sa.DateTime(timezone=True), nullable=True),
            sa.Column('events_quota', sa.Integer(), nullable=False),
            sa.Column('events_used', sa.Integer(), nullable=False),
            sa.Column('stripe_customer_id', sa.String(), nullable=True),
            sa.Column('stripe_subscription_id', sa.String(), nullable=True),
            sa.Column('stripe_price_id', sa.String(), nullable=True),
            sa.Column('current_period_start', sa.DateTime(timezone=True), nullable=True),
            sa.Column('current_period_end', sa.DateTime(timezone=True), nullable=True),
            sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('user_id')
        )
        op.create_index(op.f('ix_subscriptions_id'), 'subscriptions', ['id'], unique=False)
        op.create_index(op.f('ix_subscriptions_stripe_customer_id'), 'subscriptions', ['stripe_customer_id'], unique=False)

    if not table_exists('connection_requests'):
        op.create_table('connection_requests',
            sa.Column('id', sa.String(length=36), nullable=False),
            sa.Column('from_user_id', sa.String(length=36), nullable=False),
            sa.Column('to_user_id', sa.String(length=36), nullable=False),
            sa.Column('status', sa.String(), nullable=False),
            sa.Column('message', sa.Text(), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
            sa.ForeignKeyConstraint(['from_user_id'], ['users.id'], ondelete='CASCADE'),
            sa.ForeignKeyConstraint(['to_user_id'], ['users.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_connection_requests_from_user_id'), 'connection_requests', ['from_user_id'], unique=False)
        op.create_index(op.f('ix_connection_requests_to_user_id'), 'connection_requests', ['to_user_id'], unique=False)
        op.create_index(op.f('ix_connection_requests_status'), 'connection_requests', ['status'], unique=False)
        op.create_index('idx_connection_request_pair', 'connection_requests', ['from_user_id', 'to_user_id'], unique=False)

    if not table_exists('notifications'):
        op.create_table('notifications',
            sa.Column('id', sa.String(length=36), nullable=False),
            sa.Column('user_id', sa.String(length=36), nullable=False),
            sa.Column('type', sa.String(), nullable=False),
            sa.Column('title', sa.String(), nullable=False),
            sa.Column('message', sa.Text(), nullable=False),
            sa.Column('related_id', sa.String(), nullable=True),
            sa.Column('read', sa.Boolean(), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_notifications_user_id'), 'notifications', ['user_id'], unique=False)
        op.create_index('idx_notification_user_read', 'notifications', ['user_id', 'read'], unique=False)

    if not table_exists('chats'):
        op.create_table('chats',
            sa.Column('id', sa.String(length=80), nullable=False),
            sa.Column('participants', sa.JSON(), nullable=False),
            sa.Column('user_a_id', sa.String(length=36), nullable=False),
            sa.Column('user_b_id', sa.String(length=36), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
            sa.ForeignKeyConstraint(['user_a_id'], ['users.id'], ondelete='CASCADE'),
            sa.ForeignKeyConstraint(['user_b_id'], ['users.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_chats_user_a_id'), 'chats', ['user_a_id'], unique=False)
        op.create_index(op.f('ix_chats_user_b_id'), 'chats', ['user_b_id'], unique=False)
        op.create_index(op.f('ix_chats_updated_at'), 'chats', ['updated_at'], unique=False)

    if not table_exists('messages'):
        op.create_table('messages',
            sa.Column('id', sa.String(length=36), nullable=False),
            sa.Column('chat_id', sa.String(length=80), nullable=False),
            sa.Column('sender_id', sa.String(length=36), nullable=False),
            sa.Column('receiver_id', sa.String(length=36), nullable=False),
            sa.Column('content', sa.Text(), nullable=False),
            sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
            sa.Column('read', sa.Boolean(), nullable=False),
            sa.ForeignKeyConstraint(['chat_id'], ['chats.id'], ondelete='CASCADE'),
            sa.ForeignKeyConstraint(['sender_id'], ['users.id'], ondelete='CASCADE'),
            sa.ForeignKeyConstraint(['receiver_id'], ['users.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_messages_receiver_id'), 'messages', ['receiver_id'], unique=False)
        op.create_index('idx_message_chat_timestamp', 'messages', ['chat_id', 'timestamp'], unique=False)

    if not table_exists('rooms'):
        op.create_table('rooms',
            sa.Column('id', sa.String(length=36), nullable=False),
            sa.Column('name', sa.String(), nullable=False),
            sa.Column('description', sa.Text(), nullable=False),
            sa.Column('host_id', sa.String(length=36), nullable=False),
            sa.Column('capacity', sa.Integer(), nullable=False),
            sa.Column('current_participants', sa.Integer(), nullable=False),
            sa.Column('status', sa.String(), nullable=False),
            sa.Column('room_type', sa.String(), nullable=False),
            sa.Column('is_private', sa.Boolean(), nullable=False),
            sa.Column('access_code', sa.String(), nullable=True),
            sa.Column('scheduled_start', sa.DateTime(timezone=True), nullable=False),
            sa.Column('scheduled_end', sa.DateTime(timezone=True), nullable=False),
            sa.Column('meeting_link', sa.String(), nullable=True),
            sa.Column('calendar_event_id', sa.String(), nullable=True),
            sa.Column('recording_url', sa.String(), nullable=True),
            sa.Column('tags', sa.JSON(), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
            sa.ForeignKeyConstraint(['host_id'], ['users.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_rooms_host_id'), 'rooms', ['host_id'], unique=False)
        op.create_index(op.f('ix_rooms_status'), 'rooms', ['status'], unique=False)
        op.create_index(op.f('ix_rooms_room_type'), 'rooms', ['room_type'], unique=False)
        op.create_index(op.f('ix_rooms_scheduled_start'), 'rooms', ['scheduled_start'], unique=False)

    if not table_exists('room_registrations'):
        op.create_table('room_registrations',
            sa.Column('id', sa.String(length=36), nullable=False),
            sa.Column('room_id', sa.String(length=36), nullable=False),
            sa.Column('user_id', sa.String(length=36), nullable=False),
            sa.Column('registered_at', sa.DateTime(timezone=True), nullable=False),
            sa.ForeignKeyConstraint(['room_id'], ['rooms.id'], ondelete='CASCADE'),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('room_id', 'user_id', name='uq_room_registration')
        )
        op.create_index(op.f('ix_room_registrations_room_id'), 'room_registrations', ['room_id'], unique=False)
        op.create_index(op.f('ix_room_registrations_user_id'), 'room_registrations', ['user_id'], unique=False)

    if not table_exists('room_participants'):
        op.create_table('room_participants',
            sa.Column('id', sa.String(length=36), nullable=False),
            sa.Column('room_id', sa.String(length=36), nullable=False),
            sa.Column('user_id', sa.String(length=36), nullable=False),
            sa.Column('role', sa.String(), nullable=False),
            sa.Column('joined_at', sa.DateTime(timezone=True), nullable=False),
            sa.Column('left_at', sa.DateTime(timezone=True), nullable=True),
            sa.ForeignKeyConstraint(['room_id'], ['rooms.id'], ondelete='CASCADE'),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('idx_room_participant_active', 'room_participants', ['room_id', 'user_id', 'left_at'], unique=False)


def downgrade() -> None:
    op.drop_table('room_participants')
    op.drop_table('room_registrations')
    op.drop_table('rooms')
    op.drop_table('messages')
    op.drop_table('chats')
    op.drop_table('notifications')
    op.drop_table('connection_requests')
    op.drop_table('subscriptions')
    op.drop_table('users')
