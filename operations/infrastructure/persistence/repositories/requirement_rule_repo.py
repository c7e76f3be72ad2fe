"""Requirement rule repository: document definitions required per workflow definition version."""

from sqlalchemy import asc, select
from sqlalchemy.ext.asyncio import AsyncSession

from operations.domain.entities.workflow import DocumentRequirementRule
from operations.domain.value_objects import ValidityPeriod
from operations.infrastructure.persistence.models.workflow import (
    WorkflowDefinitionDocumentDefinition as RuleModel,
)


def _rule_to_entity(r: RuleModel) -> DocumentRequirementRule:
    return DocumentRequirementRule(
        workflow_definition_id=r.workflow_definition_id,
        workflow_definition_version=r.workflow_definition_version,
        document_definition_id=r.document_definition_id,
        required=r.required,
        singular=r.singular,
        verifiable=r.verifiable,
        internal=r.internal,
        validity_period=ValidityPeriod.from_columns(
            r.validity_period_unit, r.validity_period_amount
        ),
    )


class RequirementRuleRepository:
    """Rules keyed by (workflow_definition_id, workflow_definition_version, document_definition_id)."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_rules(
        self, workflow_definition_id: str, workflow_definition_version: int
    ) -> list[DocumentRequirementRule]:
        result = await self.db.execute(
            select(RuleModel)
            .where(
                RuleModel.workflow_definition_id == workflow_definition_id,
                RuleModel.workflow_definition_version == workflow_definition_version,
            )
            .order_by(asc(RuleModel.document_definition_id))
        )
        return [_rule_to_entity(r) for r in result.scalars().all()]

    async def add(self, rule: DocumentRequirementRule) -> DocumentRequirementRule:
        period = rule.validity_period
        row = RuleModel(
            workflow_definition_id=rule.workflow_definition_id,
            workflow_definition_version=rule.workflow_definition_version,
            document_definition_id=rule.document_definition_id,
            required=rule.required,
            singular=rule.singular,
            verifiable=rule.verifiable,
            internal=rule.internal,
            validity_period_unit=period.unit.value if period else None,
            validity_period_amount=period.amount if period else None,
        )
        self.db.add(row)
        await self.db.flush()
        return _rule_to_entity(row)
