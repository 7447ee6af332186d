"""Initial schema — user profiles, tickets, messages and AI actions.

Revision ID: 001
Revises: None
Create Date: 2026-10-17
"""

from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ARRAY, JSONB, UUID

from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # User profiles
    op.create_table(
        "user_profiles",
        sa.Column("id", UUID(as_uuid=False), primary_key=True),
        sa.Column("full_name", sa.String(200), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="customer"),
        sa.Column("company", sa.String(200), nullable=True),
        sa.Column("ai_preferences", JSONB, nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
    )
    op.create_index("idx_user_profiles_role", "user_profiles", ["role"])

    # Tickets
    op.create_table(
        "tickets",
        sa.Column("id", UUID(as_uuid=False), primary_key=True),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("status", sa.String(30), nullable=False, server_default="new"),
        sa.Column("priority", sa.String(20), nullable=False, server_default="medium"),
        sa.Column("tags", ARRAY(sa.Text), nullable=False, server_default="{}"),
        sa.Column(
            "customer_id", UUID(as_uuid=False), sa.ForeignKey("user_profiles.id"), nullable=False
        ),
        sa.Column(
            "assigned_to", UUID(as_uuid=False), sa.ForeignKey("user_profiles.id"), nullable=True
        ),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.CheckConstraint(
            "status IN ('new', 'open', 'pending_customer', 'pending_internal', 'resolved', 'closed')",
            name="ck_tickets_status",
        ),
        sa.CheckConstraint(
            "priority IN ('low', 'medium', 'high', 'urgent')",
            name="ck_tickets_priority",
        ),
    )
    op.create_index("idx_tickets_customer", "tickets", ["customer_id"])
    op.create_index("idx_tickets_status", "tickets", ["status"])
    op.create_index("idx_tickets_updated_at", "tickets", ["updated_at"])

    # Conversation messages
    op.create_table(
        "ticket_messages",
        sa.Column("id", UUID(as_uuid=False), primary_key=True),
        sa.Column(
            "ticket_id",
            UUID(as_uuid=False),
            sa.ForeignKey("tickets.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "sender_id", UUID(as_uuid=False), sa.ForeignKey("user_profiles.id"), nullable=False
        ),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("is_internal", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
    )
    op.create_index("idx_ticket_messages_ticket", "ticket_messages", ["ticket_id"])

    # AI action audit trail
    op.create_table(
        "ai_actions",
        sa.Column("id", UUID(as_uuid=False), primary_key=True),
        sa.Column(
            "user_id", UUID(as_uuid=False), sa.ForeignKey("user_profiles.id"), nullable=False
        ),
        sa.Column("ticket_id", UUID(as_uuid=False), sa.ForeignKey("tickets.id"), nullable=False),
        sa.Column("input_text", sa.Text, nullable=False),
        sa.Column("action_type", sa.String(30), nullable=False),
        sa.Column("interpreted_action", JSONB, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("requires_approval", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("error_message", sa.Text, nullable=True),
        sa.Column(
            "decided_by", UUID(as_uuid=False), sa.ForeignKey("user_profiles.id"), nullable=True
        ),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.Column("executed_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "status IN ('pending', 'approved', 'rejected', 'executed', 'failed')",
            name="ck_ai_actions_status",
        ),
        sa.CheckConstraint(
            "status <> 'failed' OR error_message IS NOT NULL",
            name="ck_ai_actions_failed_has_message",
        ),
    )
    op.create_index("idx_ai_actions_user_created", "ai_actions", ["user_id", "created_at"])
    op.create_index("idx_ai_actions_ticket", "ai_actions", ["ticket_id"])


def downgrade() -> None:
    op.drop_table("ai_actions")
    op.drop_table("ticket_messages")
    op.drop_table("tickets")
    op.drop_table("user_profiles")
