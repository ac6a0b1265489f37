"""pages and threaded comments

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'pages',
        sa.Column('id', sa.String(length=32), primary_key=True),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('tags_csv', sa.Text(), nullable=False, server_default=''),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_pages_slug', 'pages', ['slug'], unique=True)

    op.create_table(
        'comments',
        sa.Column('legacy_id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('page_id', sa.String(length=32), sa.ForeignKey('pages.id', ondelete='CASCADE'), nullable=False),
        sa.Column('parent_id', sa.String(length=32), nullable=True),
        sa.Column('author', sa.String(length=128), nullable=True),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('origin_address', sa.String(length=128), nullable=True),
        sa.Column('edit_token', sa.String(length=128), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='pending'),
        sa.Column('is_privileged_author', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.CheckConstraint("status IN ('pending', 'approved', 'rejected')", name='ck_comments_status'),
    )
    op.create_index('ix_comments_id', 'comments', ['id'], unique=True)
    op.create_index('ix_comments_page_id', 'comments', ['page_id'])
    op.create_index('ix_comments_parent_id', 'comments', ['parent_id'])
    op.create_index('ix_comments_created_at', 'comments', ['created_at'])
    op.create_index('ix_comments_page_status', 'comments', ['page_id', 'status'])


def downgrade() -> None:
    op.drop_index('ix_comments_page_status', table_name='comments')
    op.drop_index('ix_comments_created_at', table_name='comments')
    op.drop_index('ix_comments_parent_id', table_name='comments')
    op.drop_index('ix_comments_page_id', table_name='comments')
    op.drop_index('ix_comments_id', table_name='comments')
    op.drop_table('comments')
    op.drop_index('ix_pages_slug', table_name='pages')
    op.drop_table('pages')
