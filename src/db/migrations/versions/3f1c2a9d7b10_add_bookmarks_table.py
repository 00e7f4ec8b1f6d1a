"""
Add bookmarks table with row-level security policies.

Owner policies compare `user_id` with the `sub` claim of the request JWT (as exposed
by PostgREST/Supabase through `request.jwt.claims`); shared rows are readable by
everyone. The API itself connects as the table owner and enforces ownership in the
service layer.

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-10-19 10:00:00.000000
"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3f1c2a9d7b10"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

JWT_SUB = "(current_setting('request.jwt.claims', true)::json ->> 'sub')"


def upgrade() -> None:
    """Create the bookmarks table, indexes and policies."""
    op.create_table(
        "bookmarks",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Text(), nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), server_default="", nullable=False),
        sa.Column(
            "tags", postgresql.ARRAY(sa.Text()), server_default="{}", nullable=False,
        ),
        sa.Column("is_shared", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("user_email", sa.String(length=320), nullable=True),
        sa.Column("user_name", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("clock_timestamp()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("clock_timestamp()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_bookmarks_created_at", "bookmarks", ["created_at"])
    op.create_index("ix_bookmarks_user_id_created_at", "bookmarks", ["user_id", "created_at"])
    op.create_index(
        "ix_bookmarks_shared_created_at",
        "bookmarks",
        ["created_at"],
        postgresql_where=sa.text("is_shared"),
    )
    op.create_index("ix_bookmarks_tags", "bookmarks", ["tags"], postgresql_using="gin")

    op.execute("ALTER TABLE bookmarks ENABLE ROW LEVEL SECURITY")
    op.execute(
        "CREATE POLICY bookmarks_select_shared ON bookmarks "
        "FOR SELECT USING (is_shared)",
    )
    op.execute(
        f"CREATE POLICY bookmarks_select_own ON bookmarks "
        f"FOR SELECT USING (user_id = {JWT_SUB})",
    )
    op.execute(
        f"CREATE POLICY bookmarks_insert_own ON bookmarks "
        f"FOR INSERT WITH CHECK (user_id = {JWT_SUB})",
    )
    op.execute(
        f"CREATE POLICY bookmarks_update_own ON bookmarks "
        f"FOR UPDATE USING (user_id = {JWT_SUB}) WITH CHECK (user_id = {JWT_SUB})",
    )
    op.execute(
        f"CREATE POLICY bookmarks_delete_own ON bookmarks "
        f"FOR DELETE USING (user_id = {JWT_SUB})",
    )


def downgrade() -> None:
    """Drop the bookmarks table and its policies."""
    for policy in (
        "bookmarks_delete_own",
        "bookmarks_update_own",
        "bookmarks_insert_own",
        "bookmarks_select_own",
        "bookmarks_select_shared",
    ):
        op.execute(f"DROP POLICY IF EXISTS {policy} ON bookmarks")
    op.drop_index("ix_bookmarks_tags", table_name="bookmarks")
    op.drop_index("ix_bookmarks_shared_created_at", table_name="bookmarks")
    op.drop_index("ix_bookmarks_user_id_created_at", table_name="bookmarks")
    op.drop_index("ix_bookmarks_created_at", table_name="bookmarks")
    op.drop_table("bookmarks")
