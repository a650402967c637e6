"""Initial notice board schema

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-18

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy import inspect

# revision identifiers, used by Alembic.
revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = sa.Enum("admin", "faculty", "student", name="userrole")
notice_category = sa.Enum("academic", "events", "exams", "circulars", name="noticecategory")
notice_priority = sa.Enum("high", "medium", "low", name="noticepriority")
notice_status = sa.Enum("published", "scheduled", "draft", name="noticestatus")
notification_type = sa.Enum(
    "new_notice", "comment", "acknowledgment", "mention", "system", name="notificationtype"
)


def _table_exists(table: str) -> bool:
    bind = op.get_bind()
    insp = inspect(bind)
    return table in insp.get_table_names()


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    """Create users, notices, tracking, comments and notifications."""

    # Users table (provisioned by the identity service)
    if not _table_exists("users"):
        op.create_table(
            "users",
            sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
            sa.Column("name", sa.String(100), nullable=False),
            sa.Column("email", sa.String(255), nullable=False),
            sa.Column("role", user_role, nullable=False),
            sa.Column("department", sa.String(100), nullable=True),
            sa.Column("year", sa.String(20), nullable=True),
            sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
            *_timestamps(),
            sa.PrimaryKeyConstraint("id", name="pk_users"),
        )
        op.create_index("ix_users_email", "users", ["email"], unique=True)
        op.create_index("ix_users_role", "users", ["role"])
        op.create_index("ix_users_department", "users", ["department"])

    # Notices table
    op.create_table(
        "notices",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("category", notice_category, nullable=False),
        sa.Column("department", sa.String(100), nullable=False),
        sa.Column("target_year", sa.String(20), nullable=True),
        sa.Column("author_id", sa.Integer(), nullable=False),
        sa.Column("priority", notice_priority, nullable=False),
        sa.Column("status", notice_status, nullable=False),
        sa.Column("scheduled_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("attachments", sa.JSON(), nullable=False),
        sa.Column("is_pinned", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("is_archived", sa.Boolean(), server_default=sa.false(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_notices"),
        sa.ForeignKeyConstraint(["author_id"], ["users.id"], name="fk_notices_author_id_users"),
    )
    op.create_index("ix_notices_author_id", "notices", ["author_id"])
    op.create_index("ix_notices_category_department_status", "notices", ["category", "department", "status"])

    # View and acknowledgment tracking
    for table, stamp, unique_name in (
        ("notice_views", "viewed_at", "uq_notice_view_user"),
        ("notice_acknowledgments", "acknowledged_at", "uq_notice_ack_user"),
    ):
        op.create_table(
            table,
            sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
            sa.Column("notice_id", sa.Integer(), nullable=False),
            sa.Column("user_id", sa.Integer(), nullable=False),
            sa.Column(stamp, sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.PrimaryKeyConstraint("id", name=f"pk_{table}"),
            sa.ForeignKeyConstraint(
                ["notice_id"], ["notices.id"], name=f"fk_{table}_notice_id_notices", ondelete="CASCADE"
            ),
            sa.ForeignKeyConstraint(
                ["user_id"], ["users.id"], name=f"fk_{table}_user_id_users", ondelete="CASCADE"
            ),
            sa.UniqueConstraint("notice_id", "user_id", name=unique_name),
        )
        op.create_index(f"ix_{table}_notice_id", table, ["notice_id"])

    # Comments table
    op.create_table(
        "comments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("notice_id", sa.Integer(), nullable=False),
        sa.Column("author_id", sa.Integer(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("parent_id", sa.Integer(), nullable=True),
        sa.Column("is_edited", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("edited_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_comments"),
        sa.ForeignKeyConstraint(
            ["notice_id"], ["notices.id"], name="fk_comments_notice_id_notices", ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(["author_id"], ["users.id"], name="fk_comments_author_id_users"),
        sa.ForeignKeyConstraint(
            ["parent_id"], ["comments.id"], name="fk_comments_parent_id_comments", ondelete="CASCADE"
        ),
    )
    op.create_index("ix_comments_parent_id", "comments", ["parent_id"])
    op.create_index("ix_comments_notice_created", "comments", ["notice_id", "created_at"])

    # Notifications table
    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("type", notification_type, nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("related_notice_id", sa.Integer(), nullable=True),
        sa.Column("related_comment_id", sa.Integer(), nullable=True),
        sa.Column("is_read", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_notifications"),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name="fk_notifications_user_id_users", ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["related_notice_id"], ["notices.id"],
            name="fk_notifications_related_notice_id_notices", ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["related_comment_id"], ["comments.id"],
            name="fk_notifications_related_comment_id_comments", ondelete="SET NULL",
        ),
    )
    op.create_index("ix_notifications_related_notice_id", "notifications", ["related_notice_id"])
    op.create_index(
        "ix_notifications_user_read_created", "notifications", ["user_id", "is_read", "created_at"]
    )


def downgrade() -> None:
    """Drop the notice board tables. Users are left in place."""
    op.drop_table("notifications")
    op.drop_table("comments")
    op.drop_table("notice_acknowledgments")
    op.drop_table("notice_views")
    op.drop_table("notices")

    bind = op.get_bind()
    for enum in (notification_type, notice_status, notice_priority, notice_category):
        enum.drop(bind, checkfirst=True)
