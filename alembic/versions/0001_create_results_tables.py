"""create results tables

Revision ID: 0001_create_results_tables
Revises:
Create Date: 2026-10-19

Creates the students, marks and admins tables. Administrators are not
seeded here; provision them with scripts/create_admin.py.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001_create_results_tables"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ID_TYPE = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "students",
        sa.Column("id", ID_TYPE, primary_key=True, autoincrement=True),
        sa.Column("seat_number", sa.String(50), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_students_seat_number", "students", ["seat_number"], unique=True)

    op.create_table(
        "marks",
        sa.Column("id", ID_TYPE, primary_key=True, autoincrement=True),
        sa.Column(
            "student_id",
            ID_TYPE,
            sa.ForeignKey("students.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("subject_code", sa.String(10), nullable=False),
        sa.Column("score", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.UniqueConstraint("student_id", "subject_code", name="uq_mark_student_subject"),
        sa.CheckConstraint("score >= 0 AND score <= 100", name="ck_mark_score_range"),
    )
    op.create_index("ix_marks_student_id", "marks", ["student_id"])

    op.create_table(
        "admins",
        sa.Column("id", ID_TYPE, primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_admins_username", "admins", ["username"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_admins_username", table_name="admins")
    op.drop_table("admins")
    op.drop_index("ix_marks_student_id", table_name="marks")
    op.drop_table("marks")
    op.drop_index("ix_students_seat_number", table_name="students")
    op.drop_table("students")
