"""initial schema

Revision ID: 3a1f9c2d7e10
Revises:
Create Date: 2026-10-12 10:04:51.118203

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3a1f9c2d7e10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _entity_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.String(255), primary_key=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        *_entity_columns(),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("role", sa.String(10), nullable=False),
        sa.Column("address", sa.String(255)),
        sa.Column("city", sa.String(100)),
        sa.Column("state", sa.String(100)),
        sa.Column("company_name", sa.String(255)),
        sa.Column("contractor_id", sa.String(255)),
    )
    op.create_table(
        "tickets",
        *_entity_columns(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("priority", sa.String(50)),
        sa.Column("status", sa.String(9), nullable=False),
        sa.Column("submitted_by", sa.String(255), nullable=False, index=True),
        sa.Column("submitted_by_role", sa.String(10), nullable=False),
        sa.Column("assigned_to", sa.String(255), index=True),
        sa.Column("assigned_contractor", sa.String(255)),
        sa.Column("scheduled_date", sa.String(32)),
        sa.Column("completed_date", sa.String(32)),
        sa.Column("rating", sa.Float()),
        sa.Column("ai_diagnosis", sa.Text()),
        sa.Column("photos", sa.JSON(), nullable=False, server_default="[]"),
        sa.Column("messages", sa.JSON(), nullable=False, server_default="[]"),
        sa.Column(
            "viewed_by_landlord", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
    )
    op.create_table(
        "jobs",
        *_entity_columns(),
        sa.Column("ticket_id", sa.String(255), nullable=False, unique=True),
        sa.Column("contractor_id", sa.String(255), nullable=False, index=True),
        sa.Column("property_address", sa.String(255), nullable=False),
        sa.Column("issue_type", sa.String(100), nullable=False),
        sa.Column("date", sa.String(32), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("scheduled_date", sa.String(32)),
        sa.Column("scheduled_time", sa.String(8)),
        sa.Column("completion_notes", sa.Text()),
        sa.Column("completion_photos", sa.JSON(), nullable=False, server_default="[]"),
        sa.Column("rating", sa.Float()),
    )
    op.create_table(
        "contractors",
        *_entity_columns(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("company", sa.String(255), nullable=False, server_default=""),
        sa.Column("email", sa.String(255), index=True),
        sa.Column("city", sa.String(100)),
        sa.Column("state", sa.String(100)),
        sa.Column("specialization", sa.JSON(), nullable=False, server_default="[]"),
        sa.Column("service_areas", sa.JSON(), nullable=False, server_default="{}"),
        sa.Column("rating", sa.Float(), nullable=False, server_default="0"),
        sa.Column("completed_jobs", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("preferred", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_table(
        "connections",
        *_entity_columns(),
        sa.Column("landlord_email", sa.String(255), nullable=False, index=True),
        sa.Column("tenant_email", sa.String(255), nullable=False, index=True),
        sa.Column("status", sa.String(9), nullable=False),
        sa.Column("requested_by", sa.String(255), nullable=False),
        sa.Column("requested_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("confirmed_at", sa.DateTime(timezone=True)),
    )
    op.create_table(
        "job_applications",
        *_entity_columns(),
        sa.Column("ticket_id", sa.String(255), nullable=False, index=True),
        sa.Column("contractor_id", sa.String(255), nullable=False),
        sa.Column("contractor_name", sa.String(255), nullable=False),
        sa.Column("contractor_email", sa.String(255), nullable=False),
        sa.Column("applied_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(8), nullable=False),
        sa.UniqueConstraint(
            "ticket_id", "contractor_id", name="uq_application_per_ticket"
        ),
    )


def downgrade() -> None:
    for table in (
        "job_applications",
        "connections",
        "contractors",
        "jobs",
        "tickets",
        "users",
    ):
        op.drop_table(table)
