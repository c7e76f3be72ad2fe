"""Tenant context for RLS (row-level security).

The API dependency and the event processor set the current tenant_id in
this context variable so that database sessions can run
SET LOCAL app.current_tenant_id. When RLS is enabled in Postgres, only
rows for that tenant are visible.
"""

import re
from contextvars import ContextVar

# Current tenant ID for the request or the event being processed.
current_tenant_id: ContextVar[str | None] = ContextVar(
    "current_tenant_id", default=None
)


def set_tenant_id(tenant_id: str | None) -> None:
    """Set the current tenant ID for this context."""
    current_tenant_id.set(tenant_id)


def get_tenant_id() -> str | None:
    """Return the current tenant ID if set."""
    return current_tenant_id.get()


# Strict format for tenant_id: it is interpolated into SET LOCAL (CUID/UUID-style).
TENANT_ID_MAX_LENGTH = 64
_TENANT_ID_RE = re.compile(r"^[a-zA-Z0-9_-]{1," + str(TENANT_ID_MAX_LENGTH) + r"}$")


def is_valid_tenant_id_format(value: str | None) -> bool:
    """Return True if value is a well-formed tenant id (alphanumeric, hyphen, underscore)."""
    if not value or len(value) > TENANT_ID_MAX_LENGTH:
        return False
    return bool(_TENANT_ID_RE.fullmatch(value))
