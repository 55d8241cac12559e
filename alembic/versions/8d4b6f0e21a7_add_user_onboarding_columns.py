"""add_user_onboarding_columns

Revision ID: 8d4b6f0e21a7
Revises: 5c1e2a9d7f30
Create Date: 2026-10-18 14:02:17.530912

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8d4b6f0e21a7'
down_revision: Union[str, None] = '5c1e2a9d7f30'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


# (name, type) pairs; all nullable so existing rows stay valid
ONBOARDING_COLUMNS = [
    ('years_experience', sa.Integer()),
    ('experience_level', sa.String()),
    ('industry', sa.String()),
    ('company_size', sa.String()),
    ('specializations', sa.JSON()),
    ('primary_goal', sa.String()),
    ('networking_style', sa.String()),
    ('communication_preference', sa.String()),
    ('interests', sa.JSON()),
    ('event_preferences', sa.JSON()),
    ('availability', sa.String()),
    ('time_zone', sa.String()),
    ('preferred_meeting_times', sa.JSON()),
    ('assigned_role', sa.String()),
    ('onboarding_completed_at', sa.DateTime(timezone=True)),
]


def upgrade() -> None:
    """Add onboarding questionnaire columns to users table."""
    from sqlalchemy import inspect

    # Idempotent: skip columns a create_all already added
    bind = op.get_bind()
    inspector = inspect(bind)
    columns = [col['name'] for col in inspector.get_columns('users')]

    for name, column_type in ONBOARDING_COLUMNS:
        if name not in columns:
            op.add_column('users', sa.Column(name, column_type, nullable=True))


def downgrade() -> None:
    """Remove onboarding questionnaire columns from users table."""
    for name, _ in reversed(ONBOARDING_COLUMNS):
        op.drop_column('users', name)
