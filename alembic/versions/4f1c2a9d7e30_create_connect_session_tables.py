"""create_connect_session_tables

Revision ID: 4f1c2a9d7e30
Revises:
Create Date: 2026-10-18 09:12:41.208114

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '4f1c2a9d7e30'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSON_TYPE = sa.Text().with_variant(postgresql.JSONB(), 'postgresql')


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'integrations',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('account_id', sa.String(100), nullable=False),
        sa.Column('environment_id', sa.String(100), nullable=False),
        sa.Column('unique_key', sa.String(255), nullable=False),
        sa.Column('provider', sa.String(100), nullable=False),
        sa.Column('display_name', sa.String(255), nullable=True),
        sa.Column('deleted', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('config', JSON_TYPE, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_integrations_environment_id', 'integrations', ['environment_id'])
    op.create_index(
        'ix_integration_key',
        'integrations',
        ['environment_id', 'unique_key'],
        unique=True,
        postgresql_where=sa.text('deleted = false'),
        sqlite_where=sa.text('deleted = 0'),
    )

    op.create_table(
        'connect_sessions',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('account_id', sa.String(100), nullable=False),
        sa.Column('environment_id', sa.String(100), nullable=False),
        sa.Column('end_user_id', sa.String(255), nullable=True),
        sa.Column('end_user', JSON_TYPE, nullable=True),
        # NULL grants every integration of the environment
        sa.Column('allowed_integrations', JSON_TYPE, nullable=True),
        sa.Column('integrations_config_defaults', JSON_TYPE, nullable=True),
        sa.Column('overrides', JSON_TYPE, nullable=True),
        sa.Column('operation_id', sa.String(100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_connect_sessions_environment_id', 'connect_sessions', ['environment_id'])
    op.create_index('ix_connect_session_tenant', 'connect_sessions', ['account_id', 'environment_id'])

    op.create_table(
        'private_keys',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('display_name', sa.String(255), nullable=False, server_default=''),
        sa.Column('account_id', sa.String(100), nullable=False),
        sa.Column('environment_id', sa.String(100), nullable=False),
        sa.Column('entity_type', sa.String(50), nullable=False),
        sa.Column('entity_id', sa.String(100), nullable=False),
        sa.Column('hash', sa.String(128), nullable=False, unique=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_access_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_private_keys_expires_at', 'private_keys', ['expires_at'])
    op.create_index('ix_private_key_entity', 'private_keys', ['entity_type', 'entity_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_private_key_entity', table_name='private_keys')
    op.drop_index('ix_private_keys_expires_at', table_name='private_keys')
    op.drop_table('private_keys')

    op.drop_index('ix_connect_session_tenant', table_name='connect_sessions')
    op.drop_index('ix_connect_sessions_environment_id', table_name='connect_sessions')
    op.drop_table('connect_sessions')

    op.drop_index('ix_integration_key', table_name='integrations')
    op.drop_index('ix_integrations_environment_id', table_name='integrations')
    op.drop_table('integrations')
