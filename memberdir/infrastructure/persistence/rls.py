"""Row-level security DDL shared by migrations and database-backed tests.

Tenant resolution from a LINE user id runs before any tenant context
exists, so it goes through a SECURITY DEFINER function that returns only
the tenant id and nothing else from the participant table.
"""

RLS_TABLES = ("tenant", "participant")

LINE_USER_TENANT_FUNCTION = "memberdir_tenant_for_line_user"

CREATE_LINE_USER_TENANT_FUNCTION = f"""
CREATE OR REPLACE FUNCTION {LINE_USER_TENANT_FUNCTION}(p_line_user_id text)
RETURNS text
LANGUAGE sql
STABLE
SECURITY DEFINER
SET search_path = public
AS $$
    SELECT p.tenant_id
    FROM participant p
    JOIN tenant t ON t.id = p.tenant_id
    WHERE p.line_user_id = p_line_user_id
      AND t.status = 'active'
    ORDER BY p.updated_at DESC
    LIMIT 1
$$
"""

DROP_LINE_USER_TENANT_FUNCTION = (
    f"DROP FUNCTION IF EXISTS {LINE_USER_TENANT_FUNCTION}(text)"
)


def enable_rls_statements() -> list[str]:
    """Statements that enable tenant isolation policies on tenant-scoped tables."""
    statements = [
        "ALTER TABLE tenant ENABLE ROW LEVEL SECURITY",
        "CREATE POLICY tenant_isolation ON tenant "
        "USING (id = current_setting('app.current_tenant_id', true))",
    ]
    for table in RLS_TABLES[1:]:
        statements.append(f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY")
        statements.append(
            f"CREATE POLICY tenant_isolation ON {table} "
            "USING (tenant_id = current_setting('app.current_tenant_id', true))"
        )
    return statements


def disable_rls_statements() -> list[str]:
    statements: list[str] = []
    for table in reversed(RLS_TABLES):
        statements.append(f"DROP POLICY IF EXISTS tenant_isolation ON {table}")
        statements.append(f"ALTER TABLE {table} DISABLE ROW LEVEL SECURITY")
    return statements
