"""Create users, messages and threads tables

Revision ID: 001
Revises: None
Create Date: 2024-09-30 00:00:00.000000+00:00

What:  Initial schema: the three document collections.
How:   Ids are 32-char hex strings generated by the application. Array
       fields (kept_messages, participants, messages) are JSON columns.

Rollback: downgrade() drops all three tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(32), nullable=False),
        sa.Column("name", sa.String(255), nullable=False, server_default=sa.text("''")),
        sa.Column("email", sa.String(255), nullable=False, server_default=sa.text("''")),
        sa.Column(
            "kept_messages",
            sa.JSON(),
            nullable=False,
            comment="Ids of messages this user kept (set semantics)",
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "messages",
        sa.Column("id", sa.String(32), nullable=False),
        sa.Column("sender_id", sa.String(32), nullable=False),
        sa.Column("recipient_id", sa.String(32), nullable=True),
        sa.Column("content", sa.Text(), nullable=False, server_default=sa.text("''")),
        # Seconds since epoch
        sa.Column("timestamp", sa.BigInteger(), nullable=False, server_default=sa.text("0")),
        # NULL until the first response opens a thread
        sa.Column("thread_id", sa.String(32), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_messages_recipient_id", "messages", ["recipient_id"])
    op.create_index("idx_messages_thread_id", "messages", ["thread_id"])

    op.create_table(
        "threads",
        sa.Column("id", sa.String(32), nullable=False),
        sa.Column("participants", sa.JSON(), nullable=False),
        # Conversation order = insertion order
        sa.Column("messages", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    op.drop_table("threads")
    op.drop_index("idx_messages_thread_id", table_name="messages")
    op.drop_index("idx_messages_recipient_id", table_name="messages")
    op.drop_table("messages")
    op.drop_table("users")
