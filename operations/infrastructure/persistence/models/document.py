"""Workflow document and process document ORM models.

Both tables share the lifecycle columns through DocumentLifecycleMixin;
only the owner column differs.
"""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from operations.domain.enums import DocumentStatus
from operations.infrastructure.persistence.database import Base
from operations.infrastructure.persistence.models.mixins import (
    MultiTenantModel,
    status_check,
)


def _document_constraints(prefix: str) -> tuple:
    return (
        status_check("status", DocumentStatus.values(), f"{prefix}_status_check"),
        CheckConstraint(
            "document_id IS NOT NULL OR status IN ('requested', 'waived')",
            name=f"{prefix}_document_id_check",
        ),
    )


class DocumentLifecycleMixin:
    """Columns for the requested/provided/verified/rejected/waived lifecycle."""

    document_definition_id: Mapped[str] = mapped_column(String, nullable=False)
    document_id: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=DocumentStatus.REQUESTED.value
    )
    requested: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    requested_by: Mapped[str] = mapped_column(String, nullable=False)
    provided: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    provided_by: Mapped[str | None] = mapped_column(String)
    verified: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    verified_by: Mapped[str | None] = mapped_column(String)
    rejected: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    rejected_by: Mapped[str | None] = mapped_column(String)
    rejection_reason: Mapped[str | None] = mapped_column(Text)
    waived: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    waived_by: Mapped[str | None] = mapped_column(String)
    waive_reason: Mapped[str | None] = mapped_column(Text)


class WorkflowDocument(DocumentLifecycleMixin, MultiTenantModel, Base):
    """Document attached to a workflow. Table: operations_workflow_documents."""

    __tablename__ = "operations_workflow_documents"

    @declared_attr
    def workflow_id(cls) -> Mapped[str]:
        return mapped_column(
            String,
            ForeignKey("operations_workflows.id", ondelete="CASCADE"),
            nullable=False,
        )

    __table_args__ = (
        Index(
            "ix_operations_workflow_documents_owner",
            "workflow_id",
            "document_definition_id",
        ),
        *_document_constraints("operations_workflow_documents"),
    )


class ProcessDocument(DocumentLifecycleMixin, MultiTenantModel, Base):
    """Document attached to a process. Table: operations_process_documents."""

    __tablename__ = "operations_process_documents"

    process_id: Mapped[str] = mapped_column(String, nullable=False)

    __table_args__ = (
        Index(
            "ix_operations_process_documents_owner",
            "process_id",
            "document_definition_id",
        ),
        *_document_constraints("operations_process_documents"),
    )
