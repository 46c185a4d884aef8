"""add home_apply_changes function

Revision ID: 8c4e21b5f3a7
Revises: 3a1f9c2d7e10
Create Date: 2026-10-12 11:37:02.540913

"""

from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "8c4e21b5f3a7"
down_revision: Union[str, Sequence[str], None] = "3a1f9c2d7e10"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Apply a batch of inserts and version-checked updates in one transaction.

    Each element of `changes` is {"table", "op", "id", "expected_version", "row"}.
    A lost version check raises SQLSTATE 40001 and rolls back the whole batch.
    """
    op.execute("""
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
                IF tbl NOT IN (
                    'users', 'tickets', 'jobs', 'contractors',
                    'connections', 'job_applications'
                ) THEN
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
    """)
    op.execute(
        "REVOKE ALL ON FUNCTION public.home_apply_changes(jsonb) FROM PUBLIC, anon, authenticated"
    )
    op.execute(
        "GRANT EXECUTE ON FUNCTION public.home_apply_changes(jsonb) TO service_role"
    )


def downgrade() -> None:
    op.execute("DROP FUNCTION IF EXISTS public.home_apply_changes(jsonb)")
