"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00.000000

notes, notes_analysis (one row per analyzed note) and learning_todos.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- ENUM types ---
    todo_status_enum = sa.Enum("PENDING", "COMPLETED", name="todo_status_enum")
    todo_status_enum.create(op.get_bind(), checkfirst=True)

    deadline_type_enum = sa.Enum("SHORT_TERM", "LONG_TERM", name="deadline_type_enum")
    deadline_type_enum.create(op.get_bind(), checkfirst=True)

    # --- notes ---
    op.create_table(
        "notes",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(256), nullable=False),
        sa.Column("raw_content", sa.Text(), nullable=False),
        sa.Column("refined_content", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_notes_id", "notes", ["id"])
    op.create_index("ix_notes_user_id", "notes", ["user_id"])
    op.create_index("ix_notes_created_at", "notes", ["created_at"])

    # --- notes_analysis ---
    op.create_table(
        "notes_analysis",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("note_id", sa.Integer(), nullable=False),
        sa.Column("summary_json", sa.JSON(), nullable=True),
        sa.Column("skill_proposal_json", sa.JSON(), nullable=True),
        sa.Column("feedback_json", sa.JSON(), nullable=True),
        sa.Column("suggested_todos_json", sa.JSON(), nullable=True),
        sa.Column("fact_checks_json", sa.JSON(), nullable=True),
        sa.Column("analyzed_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["note_id"], ["notes.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("note_id", name="uq_notes_analysis_note_id"),
    )
    op.create_index("ix_notes_analysis_id", "notes_analysis", ["id"])

    # --- learning_todos ---
    op.create_table(
        "learning_todos",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("note_id", sa.Integer(), nullable=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("status", sa.Enum(
            "PENDING", "COMPLETED", name="todo_status_enum", create_type=False,
        ), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("deadline_type", sa.Enum(
            "SHORT_TERM", "LONG_TERM", name="deadline_type_enum", create_type=False,
        ), nullable=True),
        sa.Column("is_checked", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["note_id"], ["notes.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_learning_todos_id", "learning_todos", ["id"])
    op.create_index("ix_learning_todos_note_id", "learning_todos", ["note_id"])
    op.create_index("ix_learning_todos_user_id", "learning_todos", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_learning_todos_user_id", table_name="learning_todos")
    op.drop_index("ix_learning_todos_note_id", table_name="learning_todos")
    op.drop_index("ix_learning_todos_id", table_name="learning_todos")
    op.drop_table("learning_todos")

    op.drop_index("ix_notes_analysis_id", table_name="notes_analysis")
    op.drop_table("notes_analysis")

    op.drop_index("ix_notes_created_at", table_name="notes")
    op.drop_index("ix_notes_user_id", table_name="notes")
    op.drop_index("ix_notes_id", table_name="notes")
    op.drop_table("notes")

    sa.Enum(name="deadline_type_enum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="todo_status_enum").drop(op.get_bind(), checkfirst=True)
