"""create operations tables

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-19

Event queue, workflow definitions with document requirement rules, workflow
instances, and workflow/process documents.
"""

from collections.abc import Sequence
from typing import Union

import sqlalchemy as sa
from alembic import op

revision: str = "a1b2c3d4e5f6"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_EVENT_STATUSES = ("queued", "processed", "failed")
_OBJECT_TYPES = ("workflow", "workflow_document", "process", "process_document", "document")
_EVENT_TYPES = (
    "workflow_created",
    "workflow_status_changed",
    "workflow_document_requested",
    "workflow_document_provided",
    "workflow_document_verified",
    "workflow_document_rejected",
    "workflow_document_waived",
    "process_document_requested",
    "process_document_provided",
    "process_document_verified",
    "process_document_rejected",
    "process_document_waived",
)
_DOCUMENT_STATUSES = ("requested", "provided", "verified", "rejected", "waived")
_WORKFLOW_STATUSES = ("initiated", "active", "suspended", "completed", "cancelled")
_PERIOD_UNITS = ("days", "weeks", "months", "years")


def _in(column: str, values: Sequence[str]) -> str:
    return "{} IN ({})".format(column, ", ".join(f"'{v}'" for v in values))


def _document_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("tenant_id", sa.String(), nullable=False),
        sa.Column("document_definition_id", sa.String(), nullable=False),
        sa.Column("document_id", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("requested", sa.DateTime(timezone=True), nullable=False),
        sa.Column("requested_by", sa.String(), nullable=False),
        sa.Column("provided", sa.DateTime(timezone=True), nullable=True),
        sa.Column("provided_by", sa.String(), nullable=True),
        sa.Column("verified", sa.DateTime(timezone=True), nullable=True),
        sa.Column("verified_by", sa.String(), nullable=True),
        sa.Column("rejected", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejected_by", sa.String(), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("waived", sa.DateTime(timezone=True), nullable=True),
        sa.Column("waived_by", sa.String(), nullable=True),
        sa.Column("waive_reason", sa.Text(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "operations_events",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("tenant_id", sa.String(), nullable=False),
        sa.Column("object_type", sa.String(), nullable=False),
        sa.Column("object_id", sa.String(), nullable=False),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("occurred", sa.DateTime(timezone=True), nullable=False),
        sa.Column("actor", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="queued"),
        sa.Column(
            "processing_attempts", sa.Integer(), nullable=False, server_default="0"
        ),
        sa.Column("locked", sa.DateTime(timezone=True), nullable=True),
        sa.Column("lock_name", sa.String(), nullable=True),
        sa.Column("last_processed", sa.DateTime(timezone=True), nullable=True),
        sa.Column("processed", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(_in("status", _EVENT_STATUSES), name="operations_events_status_check"),
        sa.CheckConstraint(
            _in("object_type", _OBJECT_TYPES), name="operations_events_object_type_check"
        ),
        sa.CheckConstraint(_in("type", _EVENT_TYPES), name="operations_events_type_check"),
        sa.CheckConstraint(
            "processing_attempts >= 0", name="operations_events_attempts_check"
        ),
        sa.CheckConstraint(
            "(locked IS NULL) = (lock_name IS NULL)",
            name="operations_events_lock_pair_check",
        ),
        sa.CheckConstraint(
            "processed IS NULL OR (status = 'processed' AND locked IS NULL)",
            name="operations_events_processed_check",
        ),
    )
    op.create_index(
        "ix_operations_events_tenant_id", "operations_events", ["tenant_id"]
    )
    op.create_index(
        "ix_operations_events_status_occurred",
        "operations_events",
        ["status", "occurred", "id"],
    )
    op.create_index(
        "ix_operations_events_object",
        "operations_events",
        ["tenant_id", "object_type", "object_id"],
    )
    op.create_index(
        "ix_operations_events_lock_name", "operations_events", ["lock_name"]
    )

    op.create_table(
        "operations_workflow_definitions",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("engine_id", sa.String(), nullable=False),
        sa.PrimaryKeyConstraint("id", "version"),
    )
    op.create_index(
        "ix_operations_workflow_definitions_engine_id",
        "operations_workflow_definitions",
        ["engine_id"],
    )

    op.create_table(
        "operations_workflow_definition_document_definitions",
        sa.Column("workflow_definition_id", sa.String(), nullable=False),
        sa.Column("workflow_definition_version", sa.Integer(), nullable=False),
        sa.Column("document_definition_id", sa.String(), nullable=False),
        sa.Column("required", sa.Boolean(), nullable=False),
        sa.Column("singular", sa.Boolean(), nullable=False),
        sa.Column(
            "verifiable", sa.Boolean(), nullable=False, server_default=sa.true()
        ),
        sa.Column("internal", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("validity_period_unit", sa.String(), nullable=True),
        sa.Column("validity_period_amount", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint(
            "workflow_definition_id",
            "workflow_definition_version",
            "document_definition_id",
        ),
        sa.ForeignKeyConstraint(
            ["workflow_definition_id", "workflow_definition_version"],
            [
                "operations_workflow_definitions.id",
                "operations_workflow_definitions.version",
            ],
            ondelete="CASCADE",
        ),
        sa.CheckConstraint(
            "(validity_period_unit IS NULL) = (validity_period_amount IS NULL)",
            name="operations_wddd_validity_pair_check",
        ),
        sa.CheckConstraint(
            "validity_period_unit IS NULL OR " + _in("validity_period_unit", _PERIOD_UNITS),
            name="operations_wddd_validity_unit_check",
        ),
        sa.CheckConstraint(
            "validity_period_amount IS NULL OR validity_period_amount >= 1",
            name="operations_wddd_validity_amount_check",
        ),
    )

    op.create_table(
        "operations_workflows",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("tenant_id", sa.String(), nullable=False),
        sa.Column("definition_id", sa.String(), nullable=False),
        sa.Column("definition_version", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("engine_instance_id", sa.String(), nullable=True),
        sa.Column(
            "created",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["definition_id", "definition_version"],
            [
                "operations_workflow_definitions.id",
                "operations_workflow_definitions.version",
            ],
        ),
        sa.CheckConstraint(
            _in("status", _WORKFLOW_STATUSES), name="operations_workflows_status_check"
        ),
    )
    op.create_index(
        "ix_operations_workflows_tenant_id", "operations_workflows", ["tenant_id"]
    )
    op.create_index(
        "ix_operations_workflows_definition",
        "operations_workflows",
        ["definition_id", "definition_version"],
    )

    op.create_table(
        "operations_workflow_documents",
        *_document_columns(),
        sa.Column("workflow_id", sa.String(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["workflow_id"], ["operations_workflows.id"], ondelete="CASCADE"
        ),
        sa.CheckConstraint(
            _in("status", _DOCUMENT_STATUSES),
            name="operations_workflow_documents_status_check",
        ),
        sa.CheckConstraint(
            "document_id IS NOT NULL OR status IN ('requested', 'waived')",
            name="operations_workflow_documents_document_id_check",
        ),
    )
    op.create_index(
        "ix_operations_workflow_documents_tenant_id",
        "operations_workflow_documents",
        ["tenant_id"],
    )
    op.create_index(
        "ix_operations_workflow_documents_owner",
        "operations_workflow_documents",
        ["workflow_id", "document_definition_id"],
    )

    op.create_table(
        "operations_process_documents",
        *_document_columns(),
        sa.Column("process_id", sa.String(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            _in("status", _DOCUMENT_STATUSES),
            name="operations_process_documents_status_check",
        ),
        sa.CheckConstraint(
            "document_id IS NOT NULL OR status IN ('requested', 'waived')",
            name="operations_process_documents_document_id_check",
        ),
    )
    op.create_index(
        "ix_operations_process_documents_tenant_id",
        "operations_process_documents",
        ["tenant_id"],
    )
    op.create_index(
        "ix_operations_process_documents_owner",
        "operations_process_documents",
        ["process_id", "document_definition_id"],
    )


def downgrade() -> None:
    op.drop_index(
        "ix_operations_process_documents_owner",
        table_name="operations_process_documents",
    )
    op.drop_index(
        "ix_operations_process_documents_tenant_id",
        table_name="operations_process_documents",
    )
    op.drop_table("operations_process_documents")
    op.drop_index(
        "ix_operations_workflow_documents_owner",
        table_name="operations_workflow_documents",
    )
    op.drop_index(
        "ix_operations_workflow_documents_tenant_id",
        table_name="operations_workflow_documents",
    )
    op.drop_table("operations_workflow_documents")
    op.drop_index("ix_operations_workflows_definition", table_name="operations_workflows")
    op.drop_index("ix_operations_workflows_tenant_id", table_name="operations_workflows")
    op.drop_table("operations_workflows")
    op.drop_table("operations_workflow_definition_document_definitions")
    op.drop_index(
        "ix_operations_workflow_definitions_engine_id",
        table_name="operations_workflow_definitions",
    )
    op.drop_table("operations_workflow_definitions")
    op.drop_index("ix_operations_events_lock_name", table_name="operations_events")
    op.drop_index("ix_operations_events_object", table_name="operations_events")
    op.drop_index("ix_operations_events_status_occurred", table_name="operations_events")
    op.drop_index("ix_operations_events_tenant_id", table_name="operations_events")
    op.drop_table("operations_events")
