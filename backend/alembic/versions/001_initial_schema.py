"""Initial schema: users, images, pairs, shares

Revision ID: 001
Revises:
Create Date: 2026-10-17 10:00:00

"""
from alembic import op
from photon.core.config import settings
import sqlalchemy as sa

# revision identifiers
revision = '001'
down_revision = None
branch_labels = None
depends_on = None

P = settings.schema_prefix


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('full_name', sa.String(255), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now()),
        schema=settings.DB_SCHEMA
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True, schema=settings.DB_SCHEMA)

    op.create_table(
        'images',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey(f'{P}users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(500), nullable=False),
        sa.Column('mime_type', sa.String(100), nullable=False),
        sa.Column('size_bytes', sa.BigInteger(), nullable=False),
        sa.Column('storage_key', sa.String(1024), nullable=False),
        sa.Column('in_trash', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('favourite', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('archived', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("storage_key <> ''", name='storage_key_not_empty'),
        schema=settings.DB_SCHEMA
    )
    op.create_index('idx_images_user_created', 'images', ['user_id', 'created_at'], schema=settings.DB_SCHEMA)
    op.create_index('idx_images_user_trash', 'images', ['user_id', 'in_trash'], schema=settings.DB_SCHEMA)

    op.create_table(
        'pairs',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('requester_id', sa.Integer(), sa.ForeignKey(f'{P}users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('recipient_id', sa.Integer(), sa.ForeignKey(f'{P}users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_low', sa.Integer(), nullable=False),
        sa.Column('user_high', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('user_low', 'user_high', name='uq_pair_users'),
        sa.CheckConstraint('requester_id <> recipient_id', name='ck_pair_not_self'),
        sa.CheckConstraint('user_low < user_high', name='ck_pair_low_lt_high'),
        sa.CheckConstraint("status IN ('PENDING', 'ACCEPTED')", name='pair_status'),
        schema=settings.DB_SCHEMA
    )
    op.create_index('idx_pairs_requester', 'pairs', ['requester_id'], schema=settings.DB_SCHEMA)
    op.create_index('idx_pairs_recipient', 'pairs', ['recipient_id'], schema=settings.DB_SCHEMA)

    op.create_table(
        'shares',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('image_id', sa.Integer(), sa.ForeignKey(f'{P}images.id', ondelete='CASCADE'), nullable=False),
        sa.Column('owner_id', sa.Integer(), sa.ForeignKey(f'{P}users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('viewer_id', sa.Integer(), sa.ForeignKey(f'{P}users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('image_id', 'owner_id', 'viewer_id', name='uq_share_image_owner_viewer'),
        schema=settings.DB_SCHEMA
    )
    op.create_index('idx_shares_viewer', 'shares', ['viewer_id'], schema=settings.DB_SCHEMA)


def downgrade() -> None:
    op.drop_table('shares', schema=settings.DB_SCHEMA)
    op.drop_table('pairs', schema=settings.DB_SCHEMA)
    op.drop_table('images', schema=settings.DB_SCHEMA)
    op.drop_table('users', schema=settings.DB_SCHEMA)
