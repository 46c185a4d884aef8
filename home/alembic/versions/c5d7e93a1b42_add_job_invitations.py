"""add job invitations

Revision ID: c5d7e93a1b42
Revises: 8c4e21b5f3a7
Create Date: 2026-10-19 09:12:40.305117

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "c5d7e93a1b42"
down_revision: Union[str, Sequence[str], None] = "8c4e21b5f3a7"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

BASE_TABLES = (
    "users",
    "tickets",
    "jobs",
    "contractors",
    "connections",
    "job_applications",
)

APPLY_CHANGES_SQL = """
    CREATE OR REPLACE FUNCTION public.home_apply_changes(changes jsonb)
    RETURNS void
    LANGUAGE plpgsql
    SECURITY DEFINER
    SET search_path = public
    AS $$
    DECLARE
        change jsonb;
        tbl text;
        cols text;
        affected integer;
    BEGIN
        FOR change IN SELECT value FROM jsonb_array_elements(changes) LOOP
            tbl := change->>'table';
            IF tbl NOT IN ({tables}) THEN
                RAISE EXCEPTION 'unknown table %', tbl USING ERRCODE = '22023';
            END IF;

            SELECT string_agg(quote_ident(k), ', ')
              INTO cols
              FROM jsonb_object_keys(change->'row') AS k;

            IF change->>'op' = 'insert' THEN
                EXECUTE format(
                    'INSERT INTO public.%I (%s) SELECT %s FROM jsonb_populate_record(NULL::public.%I, $1)',
                    tbl, cols, cols, tbl
                ) USING change->'row';
            ELSE
                EXECUTE format(
                    'UPDATE public.%I AS t SET (%s) = (SELECT %s FROM jsonb_populate_record(NULL::public.%I, $1)) '
                    'WHERE t.id = $2 AND t.version = $3',
                    tbl, cols, cols, tbl
                ) USING change->'row', change->>'id', (change->>'expected_version')::integer;
                GET DIAGNOSTICS affected = ROW_COUNT;
                IF affected <> 1 THEN
                    RAISE EXCEPTION '% % changed since version %',
                        tbl, change->>'id', change->>'expected_version'
                        USING ERRCODE = '40001';
                END IF;
            END IF;
        END LOOP;
    END;
    $$
"""


def _apply_changes_function(tables: Sequence[str]) -> str:
    return APPLY_CHANGES_SQL.replace("{tables}", ", ".join(f"'{t}'" for t in tables))


def upgrade() -> None:
    op.create_table(
        "job_invitations",
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
        sa.Column("ticket_id", sa.String(255), nullable=False, index=True),
        sa.Column("contractor_id", sa.String(255), nullable=False, index=True),
        sa.Column("contractor_email", sa.String(255), nullable=False),
        sa.Column("landlord_email", sa.String(255), nullable=False, index=True),
        sa.Column("invited_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(8), nullable=False),
        sa.UniqueConstraint(
            "ticket_id", "contractor_id", name="uq_invitation_per_ticket"
        ),
    )
    op.execute(_apply_changes_function(BASE_TABLES + ("job_invitations",)))


def downgrade() -> None:
    op.execute(_apply_changes_function(BASE_TABLES))
    op.drop_table("job_invitations")
