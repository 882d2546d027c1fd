"""Initial schema: users, catalog, progress and module reviews

Revision ID: 202610190001
Revises:
Create Date: 2026-10-19 00:01:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "202610190001"
down_revision = None
branch_labels = None
depends_on = None

user_role_enum = sa.Enum("learner", "instructor", "admin", name="user_role")


def _timestamp(name: str) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("first_name", sa.String(length=50), nullable=True),
        sa.Column("last_name", sa.String(length=50), nullable=True),
        sa.Column("phone_number", sa.String(length=32), nullable=True),
        sa.Column("role", user_role_enum, nullable=False, server_default="learner"),
        sa.Column(
            "is_email_verified", sa.Boolean(), nullable=False, server_default=sa.text("false")
        ),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_index("ix_users_email", "users", ["email"])

    op.create_table(
        "courses",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        _timestamp("created_at"),
    )

    op.create_table(
        "course_enrollments",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "user_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "course_id", sa.String(length=36), sa.ForeignKey("courses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        _timestamp("enrolled_at"),
        sa.UniqueConstraint("user_id", "course_id", name="uq_enrollment"),
    )
    op.create_index("ix_course_enrollments_user_id", "course_enrollments", ["user_id"])

    op.create_table(
        "modules",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "course_id", sa.String(length=36), sa.ForeignKey("courses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("lesson_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("rating", sa.Float(), nullable=False, server_default="0"),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        _timestamp("created_at"),
    )
    op.create_index("ix_modules_course_id", "modules", ["course_id"])

    op.create_table(
        "progress",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "user_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "course_id", sa.String(length=36), sa.ForeignKey("courses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "module_id", sa.String(length=36), sa.ForeignKey("modules.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("completed_lessons", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("completed_quizzes", sa.Integer(), nullable=False, server_default="0"),
        _timestamp("last_accessed"),
        sa.UniqueConstraint("user_id", "course_id", "module_id", name="uq_progress_per_module"),
    )
    op.create_index("ix_progress_user_id", "progress", ["user_id"])

    op.create_table(
        "module_reviews",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "user_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "module_id", sa.String(length=36), sa.ForeignKey("modules.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "course_id", sa.String(length=36), sa.ForeignKey("courses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("feedback", sa.Text(), nullable=True),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.UniqueConstraint("user_id", "module_id", "course_id", name="uq_review_natural_key"),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_module_reviews_rating_range"),
    )
    op.create_index("ix_module_reviews_user_id", "module_reviews", ["user_id"])
    op.create_index("ix_module_reviews_module_id", "module_reviews", ["module_id"])
    op.create_index("ix_module_reviews_course_id", "module_reviews", ["course_id"])
    op.create_index("ix_module_reviews_is_deleted", "module_reviews", ["is_deleted"])


def downgrade() -> None:
    op.drop_table("module_reviews")
    op.drop_table("progress")
    op.drop_table("modules")
    op.drop_table("course_enrollments")
    op.drop_table("courses")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    user_role_enum.drop(op.get_bind(), checkfirst=True)
