"""Initial multi-tenant content schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00.000000

Per-tenant slug uniqueness is enforced by (tenant_id, slug) unique
constraints; the application check before writes only gives a friendlier
error message.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str | None = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def _tenant_fk(table: str) -> sa.ForeignKeyConstraint:
    return sa.ForeignKeyConstraint(
        ['tenant_id'], ['tenants.id'], name=op.f(f'fk_{table}_tenant_id_tenants'), ondelete='CASCADE'
    )


def upgrade() -> None:
    """Apply schema changes."""
    op.create_table(
        'tenants',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=100), nullable=False),
        sa.Column('domain', sa.String(length=255), nullable=True),
        sa.Column('allow_public_read', sa.Boolean(), server_default='true', nullable=False),
        sa.Column('default_locale', sa.String(length=10), server_default='el', nullable=False),
        sa.Column('theme', sa.JSON(), nullable=True),
        sa.Column('settings', sa.JSON(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_tenants')),
        sa.UniqueConstraint('domain', name=op.f('uq_tenants_domain')),
    )
    op.create_index('ix_tenants_slug', 'tenants', ['slug'], unique=True)

    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('roles', sa.JSON(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_users')),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'user_tenants',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('tenant_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('roles', sa.JSON(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name=op.f('fk_user_tenants_user_id_users'), ondelete='CASCADE'),
        _tenant_fk('user_tenants'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_user_tenants')),
        sa.UniqueConstraint('user_id', 'tenant_id', name='uq_user_tenants_user_id_tenant_id'),
    )
    op.create_index('ix_user_tenants_user_id', 'user_tenants', ['user_id'], unique=False)
    op.create_index('ix_user_tenants_tenant_id', 'user_tenants', ['tenant_id'], unique=False)

    op.create_table(
        'page_types',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('tenant_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('fields', sa.JSON(), nullable=True),
        sa.Column('is_default', sa.Boolean(), server_default='false', nullable=False),
        *_timestamps(),
        _tenant_fk('page_types'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_page_types')),
        sa.UniqueConstraint('tenant_id', 'slug', name='uq_page_types_tenant_id_slug'),
    )
    op.create_index('ix_page_types_tenant_id', 'page_types', ['tenant_id'], unique=False)
    op.create_index('ix_page_types_slug', 'page_types', ['slug'], unique=False)

    op.create_table(
        'pages',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('tenant_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('page_type_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('status', sa.String(length=20), server_default='draft', nullable=False),
        sa.Column('summary', sa.JSON(), nullable=True),
        sa.Column('content', sa.JSON(), nullable=True),
        *_timestamps(),
        _tenant_fk('pages'),
        sa.ForeignKeyConstraint(['page_type_id'], ['page_types.id'], name=op.f('fk_pages_page_type_id_page_types'), ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_pages')),
        sa.UniqueConstraint('tenant_id', 'slug', name='uq_pages_tenant_id_slug'),
        sa.CheckConstraint("status IN ('draft', 'published')", name='ck_pages_status'),
    )
    op.create_index('ix_pages_tenant_id', 'pages', ['tenant_id'], unique=False)
    op.create_index('ix_pages_page_type_id', 'pages', ['page_type_id'], unique=False)
    op.create_index('ix_pages_slug', 'pages', ['slug'], unique=False)

    op.create_table(
        'posts',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('tenant_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('status', sa.String(length=20), server_default='draft', nullable=False),
        sa.Column('excerpt', sa.JSON(), nullable=True),
        sa.Column('content', sa.JSON(), nullable=True),
        sa.Column('published_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        _tenant_fk('posts'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_posts')),
        sa.UniqueConstraint('tenant_id', 'slug', name='uq_posts_tenant_id_slug'),
        sa.CheckConstraint("status IN ('draft', 'published')", name='ck_posts_status'),
    )
    op.create_index('ix_posts_tenant_id', 'posts', ['tenant_id'], unique=False)
    op.create_index('ix_posts_slug', 'posts', ['slug'], unique=False)

    op.create_table(
        'media',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('tenant_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('filename', sa.String(length=255), nullable=False),
        sa.Column('alt', sa.Text(), nullable=True),
        sa.Column('mime_type', sa.String(length=100), nullable=True),
        sa.Column('url', sa.Text(), nullable=True),
        sa.Column('filesize', sa.Integer(), nullable=True),
        *_timestamps(),
        _tenant_fk('media'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_media')),
    )
    op.create_index('ix_media_tenant_id', 'media', ['tenant_id'], unique=False)


def downgrade() -> None:
    """Revert schema changes."""
    op.drop_index('ix_media_tenant_id', table_name='media')
    op.drop_table('media')
    op.drop_index('ix_posts_slug', table_name='posts')
    op.drop_index('ix_posts_tenant_id', table_name='posts')
    op.drop_table('posts')
    op.drop_index('ix_pages_slug', table_name='pages')
    op.drop_index('ix_pages_page_type_id', table_name='pages')
    op.drop_index('ix_pages_tenant_id', table_name='pages')
    op.drop_table('pages')
    op.drop_index('ix_page_types_slug', table_name='page_types')
    op.drop_index('ix_page_types_tenant_id', table_name='page_types')
    op.drop_table('page_types')
    op.drop_index('ix_user_tenants_tenant_id', table_name='user_tenants')
    op.drop_index('ix_user_tenants_user_id', table_name='user_tenants')
    op.drop_table('user_tenants')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
    op.drop_index('ix_tenants_slug', table_name='tenants')
    op.drop_table('tenants')
