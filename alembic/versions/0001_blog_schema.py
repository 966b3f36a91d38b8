"""Blog sample schema: tags, blogs, posts.

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "tags",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(16), nullable=False),
        sa.Column("description", sa.String(64), nullable=True),
        sa.UniqueConstraint("name", name="uq_tags_name"),
    )

    op.create_table(
        "blogs",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("author", sa.Text, nullable=False),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("slug", sa.Text, nullable=False),
        sa.Column("abstract", sa.Text, nullable=False),
        sa.Column("image_url", sa.Text, nullable=False),
        sa.UniqueConstraint("slug", name="uq_blogs_slug"),
    )

    op.create_table(
        "posts",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "blog_id",
            sa.Integer,
            sa.ForeignKey("blogs.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("date_posted", sa.DateTime(timezone=True), nullable=False),
        sa.Column("author", sa.Text, nullable=False),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("abstract", sa.Text, nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("image_url", sa.Text, nullable=False),
        sa.Column("tags", sa.JSON, nullable=False),
    )
    op.create_index("ix_posts_blog_id", "posts", ["blog_id"])


def downgrade() -> None:
    op.drop_index("ix_posts_blog_id", table_name="posts")
    op.drop_table("posts")
    op.drop_table("blogs")
    op.drop_table("tags")
