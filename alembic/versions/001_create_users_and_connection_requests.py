"""Create users and connection_requests tables

Revision ID: 001
Revises: None
Create Date: 2024-06-01 00:00:00.000000+00:00

What:  Initial schema: accounts plus the directed connection-request edges.
How:   Mirrors devconnect/models/user.py and devconnect/models/connection_request.py.

Constraints on connection_requests:
    - uq_connection_requests_pair:     one edge per unordered user pair
    - ck_connection_requests_not_self: no self-directed edges
    - ck_connection_requests_status:   closed status set

Rollback: downgrade() drops both tables (destructive).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("first_name", sa.String(50), nullable=False),
        sa.Column("last_name", sa.String(50), nullable=False, server_default=sa.text("''")),
        sa.Column(
            "email_id",
            sa.String(320),
            nullable=False,
            comment="Lower-cased, trimmed email address",
        ),
        sa.Column(
            "password",
            sa.String(255),
            nullable=False,
            comment="bcrypt hash, never returned by the API",
        ),
        sa.Column("age", sa.Integer(), nullable=False, server_default=sa.text("18")),
        sa.Column("gender", sa.String(1), nullable=False, server_default=sa.text("'M'")),
        sa.Column(
            "photo_url",
            sa.String(2048),
            nullable=False,
            server_default=sa.text("'https://freesvg.org/img/abstract-user-flat-4.png'"),
        ),
        sa.Column("about", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("skills", sa.JSON(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email_id", name="uq_users_email_id"),
    )
    op.create_index("idx_users_created_at", "users", [sa.text("created_at DESC")])
    op.create_index("idx_users_name", "users", ["first_name", "last_name"])

    op.create_table(
        "connection_requests",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("from_user_id", sa.Uuid(), nullable=False),
        sa.Column("to_user_id", sa.Uuid(), nullable=False),
        sa.Column(
            "pair_key",
            sa.String(73),
            nullable=False,
            comment="Canonical unordered pair key: min(from,to):max(from,to)",
        ),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["from_user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["to_user_id"], ["users.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("pair_key", name="uq_connection_requests_pair"),
        sa.CheckConstraint("from_user_id <> to_user_id", name="ck_connection_requests_not_self"),
        sa.CheckConstraint(
            "status IN ('ignore', 'interested', 'accepted', 'rejected')",
            name="ck_connection_requests_status",
        ),
    )
    op.create_index(
        "idx_connection_requests_to_status", "connection_requests", ["to_user_id", "status"]
    )
    op.create_index(
        "idx_connection_requests_from_status", "connection_requests", ["from_user_id", "status"]
    )


def downgrade() -> None:
    op.drop_index("idx_connection_requests_from_status", table_name="connection_requests")
    op.drop_index("idx_connection_requests_to_status", table_name="connection_requests")
    op.drop_table("connection_requests")
    op.drop_index("idx_users_name", table_name="users")
    op.drop_index("idx_users_created_at", table_name="users")
    op.drop_table("users")
