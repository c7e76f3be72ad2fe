"""SQLAlchemy mixins for common model patterns.

Provides: CuidMixin, TenantMixin and the status_check helper. Tenants live outside this service,
so tenant_id is a plain indexed column rather than a foreign key.
"""

from sqlalchemy import CheckConstraint, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from operations.shared.utils.generators import generate_cuid


class CuidMixin:
    """Mixin for models using CUID as primary key. Provides id with default generate_cuid."""

    @declared_attr
    def id(cls) -> Mapped[str]:
        return mapped_column(String, primary_key=True, default=generate_cuid)


class TenantMixin:
    """Mixin for multi-tenant models. Provides an indexed tenant_id."""

    @declared_attr
    def tenant_id(cls) -> Mapped[str]:
        return mapped_column(String, nullable=False, index=True)


class MultiTenantModel(CuidMixin, TenantMixin):
    """Combined mixin: CUID + tenant_id."""

    __abstract__ = True


def status_check(column: str, values: list[str], name: str) -> CheckConstraint:
    """CHECK constraint restricting `column` to a closed set of string values."""
    return CheckConstraint(
        "{} IN ({})".format(
            column,
            ", ".join("'{}'".format(v.replace("'", "''")) for v in values),
        ),
        name=name,
    )
