"""Tenant context for row-level security.

Set only from a trusted source: the API tenant dependency (after verifying
the caller's LINE ID token) or the webhook flow (after resolving the LINE
sender). Database sessions read it and run SET LOCAL app.current_tenant_id
so RLS policies only expose that tenant's rows.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

current_tenant_id: ContextVar[str | None] = ContextVar(
    "current_tenant_id", default=None
)


def get_tenant_id() -> str | None:
    """Return the current tenant id if set."""
    return current_tenant_id.get()


@contextmanager
def tenant_scope(tenant_id: str | None) -> Iterator[None]:
    """Run the block with tenant_id as the tenant context, then restore the previous one."""
    token = current_tenant_id.set(tenant_id)
    try:
        yield
    finally:
        current_tenant_id.reset(token)
