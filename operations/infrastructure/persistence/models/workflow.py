"""Workflow definition, requirement rule and workflow instance ORM models."""

from datetime import datetime

import sqlalchemy as sa
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKeyConstraint,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from operations.domain.enums import ValidityPeriodUnit, WorkflowStatus
from operations.infrastructure.persistence.database import Base
from operations.infrastructure.persistence.models.mixins import (
    MultiTenantModel,
    status_check,
)


class WorkflowDefinition(Base):
    """Versioned workflow definition. Table: operations_workflow_definitions."""

    __tablename__ = "operations_workflow_definitions"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    version: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    engine_id: Mapped[str] = mapped_column(String, nullable=False, index=True)


class WorkflowDefinitionDocumentDefinition(Base):
    """Document requirement rule for a definition version.
    Table: operations_workflow_definition_document_definitions.
    """

    __tablename__ = "operations_workflow_definition_document_definitions"

    workflow_definition_id: Mapped[str] = mapped_column(String, primary_key=True)
    workflow_definition_version: Mapped[int] = mapped_column(Integer, primary_key=True)
    document_definition_id: Mapped[str] = mapped_column(String, primary_key=True)
    required: Mapped[bool] = mapped_column(Boolean, nullable=False)
    singular: Mapped[bool] = mapped_column(Boolean, nullable=False)
    verifiable: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=sa.true()
    )
    internal: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=sa.false()
    )
    validity_period_unit: Mapped[str | None] = mapped_column(String, nullable=True)
    validity_period_amount: Mapped[int | None] = mapped_column(Integer, nullable=True)

    __table_args__ = (
        ForeignKeyConstraint(
            ["workflow_definition_id", "workflow_definition_version"],
            [
                "operations_workflow_definitions.id",
                "operations_workflow_definitions.version",
            ],
            ondelete="CASCADE",
        ),
        CheckConstraint(
            "(validity_period_unit IS NULL) = (validity_period_amount IS NULL)",
            name="operations_wddd_validity_pair_check",
        ),
        CheckConstraint(
            "validity_period_unit IS NULL OR validity_period_unit IN ({})".format(
                ", ".join("'{}'".format(v) for v in ValidityPeriodUnit.values())
            ),
            name="operations_wddd_validity_unit_check",
        ),
        CheckConstraint(
            "validity_period_amount IS NULL OR validity_period_amount >= 1",
            name="operations_wddd_validity_amount_check",
        ),
    )


class Workflow(MultiTenantModel, Base):
    """Workflow instance. Table: operations_workflows."""

    __tablename__ = "operations_workflows"

    definition_id: Mapped[str] = mapped_column(String, nullable=False)
    definition_version: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=WorkflowStatus.INITIATED.value
    )
    engine_instance_id: Mapped[str | None] = mapped_column(String, nullable=True)
    created: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        ForeignKeyConstraint(
            ["definition_id", "definition_version"],
            [
                "operations_workflow_definitions.id",
                "operations_workflow_definitions.version",
            ],
        ),
        Index(
            "ix_operations_workflows_definition", "definition_id", "definition_version"
        ),
        status_check("status", WorkflowStatus.values(), "operations_workflows_status_check"),
    )
