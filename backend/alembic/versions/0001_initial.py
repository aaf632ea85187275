"""initial schema (users, properties, projects, blog posts, testimonials, moderation logs)

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def _submitted_by() -> sa.Column:
    return sa.Column(
        "submitted_by_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=32), nullable=False, server_default="user"),
        sa.Column("phone", sa.String(length=40), nullable=False, server_default=""),
        sa.Column("specialty", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("profile_picture_url", sa.String(length=1024), nullable=False, server_default=""),
        sa.Column("is_email_verified", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_protected", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("password_reset_token", sa.String(length=64), nullable=True),
        sa.Column("password_reset_expires", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_index("ix_users_email", "users", ["email"])
    op.create_index("ix_users_role", "users", ["role"])
    op.create_index("ix_users_password_reset_token", "users", ["password_reset_token"])

    op.create_table(
        "properties",
        sa.Column("id", sa.Integer(), primary_key=True),
        _submitted_by(),
        sa.Column("address", sa.String(length=512), nullable=False),
        sa.Column("city", sa.String(length=120), nullable=False),
        sa.Column("state", sa.String(length=80), nullable=False, server_default=""),
        sa.Column("zip", sa.String(length=10), nullable=False, server_default=""),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("bedrooms", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("bathrooms", sa.Float(), nullable=False, server_default="0"),
        sa.Column("area_sq_ft", sa.Float(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("images_json", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("property_type", sa.String(length=40), nullable=False),
        sa.Column("year_built", sa.Integer(), nullable=True),
        sa.Column("features_json", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("status", sa.String(length=40), nullable=False, server_default="Pending Approval"),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("approval_status", sa.String(length=20), nullable=False, server_default="Pending"),
        sa.Column("views", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index("ix_properties_submitted_by_id", "properties", ["submitted_by_id"])
    op.create_index("ix_properties_city", "properties", ["city"])
    op.create_index("ix_properties_property_type", "properties", ["property_type"])
    op.create_index("ix_properties_status", "properties", ["status"])
    op.create_index("ix_properties_approval_status", "properties", ["approval_status"])

    op.create_table(
        "projects",
        sa.Column("id", sa.Integer(), primary_key=True),
        _submitted_by(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("location", sa.String(length=255), nullable=False),
        sa.Column("developer", sa.String(length=255), nullable=False),
        sa.Column("image_url", sa.String(length=1024), nullable=False, server_default="https://placehold.co/600x400.png"),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("key_highlights_json", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("amenities_json", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("status", sa.String(length=20), nullable=True),
        sa.Column("timeline", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("learn_more_link", sa.String(length=1024), nullable=False, server_default=""),
        sa.Column("approval_status", sa.String(length=20), nullable=False, server_default="Pending"),
        *_timestamps(),
    )
    op.create_index("ix_projects_submitted_by_id", "projects", ["submitted_by_id"])
    op.create_index("ix_projects_status", "projects", ["status"])
    op.create_index("ix_projects_approval_status", "projects", ["approval_status"])

    op.create_table(
        "blog_posts",
        sa.Column("id", sa.Integer(), primary_key=True),
        _submitted_by(),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=320), nullable=False),
        sa.Column("excerpt", sa.Text(), nullable=False, server_default=""),
        sa.Column("content", sa.Text(), nullable=False, server_default=""),
        sa.Column("image_url", sa.String(length=1024), nullable=False, server_default=""),
        sa.Column("author", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="draft"),
        sa.Column("category", sa.String(length=40), nullable=False),
        sa.Column("tags_json", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("approval_status", sa.String(length=20), nullable=False, server_default="Pending"),
        *_timestamps(),
        sa.UniqueConstraint("slug", name="uq_blog_posts_slug"),
    )
    op.create_index("ix_blog_posts_submitted_by_id", "blog_posts", ["submitted_by_id"])
    op.create_index("ix_blog_posts_slug", "blog_posts", ["slug"])
    op.create_index("ix_blog_posts_status", "blog_posts", ["status"])
    op.create_index("ix_blog_posts_category", "blog_posts", ["category"])
    op.create_index("ix_blog_posts_approval_status", "blog_posts", ["approval_status"])

    op.create_table(
        "testimonials",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=255), nullable=False),
        sa.Column("quote", sa.Text(), nullable=False),
        sa.Column("image_url", sa.String(length=1024), nullable=False, server_default="https://placehold.co/80x80.png"),
        sa.Column("rating", sa.Float(), nullable=False),
        sa.Column("success_tag", sa.String(length=120), nullable=False, server_default=""),
        *_timestamps(),
    )

    op.create_table(
        "moderation_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("actor_user_id", sa.Integer(), nullable=False),
        sa.Column("entity_type", sa.String(length=40), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=False),
        sa.Column("action", sa.String(length=40), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_moderation_logs_actor_user_id", "moderation_logs", ["actor_user_id"])
    op.create_index("ix_moderation_logs_entity_type", "moderation_logs", ["entity_type"])
    op.create_index("ix_moderation_logs_entity_id", "moderation_logs", ["entity_id"])
    op.create_index("ix_moderation_logs_action", "moderation_logs", ["action"])


def downgrade() -> None:
    op.drop_table("moderation_logs")
    op.drop_table("testimonials")
    op.drop_table("blog_posts")
    op.drop_table("projects")
    op.drop_table("properties")
    op.drop_table("users")
