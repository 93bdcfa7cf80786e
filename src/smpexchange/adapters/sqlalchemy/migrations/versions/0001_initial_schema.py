"""Initial registry schema.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "user_account",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("display_name", sa.String(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_user_account")),
    )
    op.create_table(
        "service_group",
        sa.Column("participant_id", sa.String(), nullable=False),
        sa.Column("owner_id", sa.String(), nullable=False),
        sa.Column("extension", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(
            ["owner_id"],
            ["user_account.id"],
            name=op.f("fk_service_group_owner_id_user_account"),
        ),
        sa.PrimaryKeyConstraint("participant_id", name=op.f("pk_service_group")),
    )
    op.create_table(
        "endpoint",
        sa.Column("participant_id", sa.String(), nullable=False),
        sa.Column("document_type", sa.String(), nullable=False),
        sa.Column("process", sa.String(), nullable=False),
        sa.Column("transport_profile", sa.String(), nullable=False),
        sa.Column("endpoint_url", sa.String(), nullable=False),
        sa.Column("certificate", sa.Text(), nullable=True),
        sa.Column("service_description", sa.Text(), nullable=True),
        sa.Column("technical_contact_url", sa.String(), nullable=True),
        sa.Column("extension", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(
            ["participant_id"],
            ["service_group.participant_id"],
            name=op.f("fk_endpoint_participant_id_service_group"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint(
            "participant_id",
            "document_type",
            "process",
            "transport_profile",
            name=op.f("pk_endpoint"),
        ),
    )
    op.create_table(
        "redirect",
        sa.Column("participant_id", sa.String(), nullable=False),
        sa.Column("document_type", sa.String(), nullable=False),
        sa.Column("target_href", sa.String(), nullable=False),
        sa.Column("subject_unique_identifier", sa.String(), nullable=True),
        sa.Column("certificate", sa.Text(), nullable=True),
        sa.Column("extension", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(
            ["participant_id"],
            ["service_group.participant_id"],
            name=op.f("fk_redirect_participant_id_service_group"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("participant_id", "document_type", name=op.f("pk_redirect")),
    )
    op.create_table(
        "business_card",
        sa.Column("participant_id", sa.String(), nullable=False),
        sa.Column("entities", sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint("participant_id", name=op.f("pk_business_card")),
    )


def downgrade() -> None:
    op.drop_table("business_card")
    op.drop_table("redirect")
    op.drop_table("endpoint")
    op.drop_table("service_group")
    op.drop_table("user_account")
