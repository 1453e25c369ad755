"""initial adgate schema

Revision ID: 4f1d2b7c9a10
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""
import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = '4f1d2b7c9a10'
down_revision = None
branch_labels = None
depends_on = None

subscription_state = sa.Enum(
    'FREE', 'SUBSCRIPTION_ACTIVE', 'LIFETIME', name='enum_subscription_state'
)
refresh_token_status = sa.Enum('LIVE', 'SPENT', 'REVOKED', name='enum_refresh_token_status')
ad_type = sa.Enum('BANNER', 'INTERSTITIAL', name='enum_ad_type')
ad_action = sa.Enum('IMPRESSION', 'CLICK', 'CLOSE', 'ERROR', name='enum_ad_action')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=254), nullable=False),
        sa.Column('nickname', sa.String(length=50), nullable=False),
        sa.Column('password_hash', sa.String(length=254), nullable=True),
        sa.Column('external_identity_id', sa.String(length=255), nullable=True),
        sa.Column('is_verified', sa.Boolean(), nullable=False),
        sa.Column('verification_token', sa.String(length=128), nullable=True),
        sa.Column('subscription_state', subscription_state, nullable=False),
        sa.Column('subscription_expiry', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_users'),
        sa.UniqueConstraint('email', name='uq_users_email'),
        sa.UniqueConstraint('external_identity_id', name='uq_users_external_identity_id'),
    )
    op.create_index('ix_users_email', 'users', ['email'])
    op.create_index('ix_users_verification_token', 'users', ['verification_token'])

    op.create_table(
        'sessions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('chain_id', sa.String(length=32), nullable=False),
        sa.Column('access_token_hash', sa.String(length=64), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ['user_id'], ['users.id'], name='fk_sessions_user_id_users', ondelete='CASCADE'
        ),
        sa.PrimaryKeyConstraint('id', name='pk_sessions'),
        sa.UniqueConstraint('chain_id', name='uq_sessions_chain_id'),
    )
    op.create_index('ix_sessions_user_id', 'sessions', ['user_id'])
    op.create_index('ix_sessions_access_token_hash', 'sessions', ['access_token_hash'])

    op.create_table(
        'refresh_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('token', sa.String(length=128), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('chain_id', sa.String(length=32), nullable=False),
        sa.Column('parent_id', sa.Integer(), nullable=True),
        sa.Column('status', refresh_token_status, nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('spent_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(
            ['user_id'], ['users.id'], name='fk_refresh_tokens_user_id_users', ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(
            ['parent_id'],
            ['refresh_tokens.id'],
            name='fk_refresh_tokens_parent_id_refresh_tokens',
            ondelete='SET NULL',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_refresh_tokens'),
        sa.UniqueConstraint('token', name='uq_refresh_tokens_token'),
    )
    op.create_index('ix_refresh_tokens_user_id_status', 'refresh_tokens', ['user_id', 'status'])
    op.create_index('ix_refresh_tokens_chain_id', 'refresh_tokens', ['chain_id'])

    op.create_table(
        'ad_configs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('ad_type', ad_type, nullable=False),
        sa.Column('ad_network_id', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('display_frequency', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint(
            'display_frequency >= 1', name='ck_ad_configs_display_frequency_positive'
        ),
        sa.PrimaryKeyConstraint('id', name='pk_ad_configs'),
        sa.UniqueConstraint('ad_type', 'ad_network_id', name='uq_ad_configs_type_network'),
    )
    op.create_index('ix_ad_configs_type_active', 'ad_configs', ['ad_type', 'is_active'])

    op.create_table(
        'ad_analytics_events',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('ad_type', ad_type, nullable=False),
        sa.Column('action', ad_action, nullable=False),
        sa.Column('ad_network_id', sa.String(length=255), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(
            ['user_id'], ['users.id'], name='fk_ad_analytics_events_user_id_users', ondelete='SET NULL'
        ),
        sa.PrimaryKeyConstraint('id', name='pk_ad_analytics_events'),
    )
    op.create_index('ix_ad_analytics_events_timestamp', 'ad_analytics_events', ['timestamp'])
    op.create_index(
        'ix_ad_analytics_events_type_action', 'ad_analytics_events', ['ad_type', 'action']
    )


def downgrade():
    op.drop_table('ad_analytics_events')
    op.drop_table('ad_configs')
    op.drop_table('refresh_tokens')
    op.drop_table('sessions')
    op.drop_table('users')
    bind = op.get_bind()
    for enum in (ad_action, ad_type, refresh_token_status, subscription_state):
        enum.drop(bind, checkfirst=True)
