"""Requirement resolver: classify a workflow's document obligations at a point in time.

For each rule of the workflow's definition version, the workflow's documents
for that document definition are classified as satisfied or outstanding
(with a reason). Optional rules are reported separately and never block.

Singular rules with more than one live (non-rejected) document are reported
as conflicts, resolved in favor of the most recently requested document.
Conflicts are data states, so they are returned rather than raised.
"""

from collections import defaultdict
from collections.abc import Iterable
from datetime import datetime

from operations.application.dtos.requirements import (
    RequirementConflict,
    RequirementItem,
    RequirementResolution,
)
from operations.application.interfaces.repositories import (
    IDocumentRecordRepository,
    IRequirementRuleRepository,
)
from operations.domain.entities.document import DocumentRecord
from operations.domain.entities.workflow import DocumentRequirementRule
from operations.domain.enums import DocumentStatus, RequirementReason, RequirementState
from operations.shared.telemetry.logging import get_logger
from operations.shared.telemetry.tracing import traced

logger = get_logger(__name__)


def _recency(record: DocumentRecord) -> tuple[datetime, str]:
    return (record.requested, record.id)


def _item(
    rule: DocumentRequirementRule,
    state: RequirementState,
    reason: RequirementReason,
    record: DocumentRecord | None = None,
    expires: datetime | None = None,
) -> RequirementItem:
    return RequirementItem(
        document_definition_id=rule.document_definition_id,
        state=state,
        reason=reason,
        required=rule.required,
        internal=rule.internal,
        document_record_id=record.id if record else None,
        expires=expires,
    )


def classify_document(
    rule: DocumentRequirementRule, record: DocumentRecord, now: datetime
) -> RequirementItem:
    """Classify a single document against its rule."""
    outstanding, satisfied = RequirementState.OUTSTANDING, RequirementState.SATISFIED
    match record.status:
        case DocumentStatus.REQUESTED:
            return _item(rule, outstanding, RequirementReason.AWAITING_SUBMISSION, record)
        case DocumentStatus.PROVIDED if rule.verifiable:
            return _item(rule, outstanding, RequirementReason.AWAITING_VERIFICATION, record)
        case DocumentStatus.PROVIDED | DocumentStatus.VERIFIED:
            reason = (
                RequirementReason.VERIFIED
                if record.status is DocumentStatus.VERIFIED
                else RequirementReason.PROVIDED
            )
            period = rule.validity_period
            issued = record.provided or record.verified
            if period is None or issued is None:
                return _item(rule, satisfied, reason, record)
            expires = period.expiry(issued)
            if now > expires:
                return _item(rule, outstanding, RequirementReason.EXPIRED, record, expires)
            return _item(rule, satisfied, reason, record, expires)
        case DocumentStatus.WAIVED:
            return _item(rule, satisfied, RequirementReason.WAIVED, record)
        case _:
            return _item(rule, outstanding, RequirementReason.REJECTED, record)


def _resolve_rule(
    rule: DocumentRequirementRule,
    documents: list[DocumentRecord],
    now: datetime,
) -> tuple[RequirementItem, RequirementConflict | None]:
    if not documents:
        return (
            _item(rule, RequirementState.OUTSTANDING, RequirementReason.NOT_REQUESTED),
            None,
        )
    live = sorted((d for d in documents if d.is_live), key=_recency, reverse=True)
    if not live:
        latest_rejected = max(documents, key=_recency)
        return (
            _item(
                rule,
                RequirementState.OUTSTANDING,
                RequirementReason.REJECTED,
                latest_rejected,
            ),
            None,
        )
    latest = live[0]
    if len(live) == 1:
        return classify_document(rule, latest, now), None
    if rule.singular:
        conflict = RequirementConflict(
            document_definition_id=rule.document_definition_id,
            kept_record_id=latest.id,
            superseded_record_ids=tuple(d.id for d in live[1:]),
            internal=rule.internal,
        )
        return classify_document(rule, latest, now), conflict
    items = [classify_document(rule, d, now) for d in live]
    for item in items:
        if item.is_satisfied:
            return item, None
    return items[0], None


def resolve_requirements(
    workflow_id: str,
    rules: Iterable[DocumentRequirementRule],
    documents: Iterable[DocumentRecord],
    now: datetime,
) -> RequirementResolution:
    """Classify every rule against the workflow's documents. Pure; ordered by document_definition_id."""
    by_definition: dict[str, list[DocumentRecord]] = defaultdict(list)
    for document in documents:
        by_definition[document.document_definition_id].append(document)

    resolution = RequirementResolution(workflow_id=workflow_id)
    for rule in sorted(rules, key=lambda r: r.document_definition_id):
        item, conflict = _resolve_rule(
            rule, by_definition.get(rule.document_definition_id, []), now
        )
        if conflict is not None:
            resolution.conflicts.append(conflict)
        if item.is_satisfied:
            resolution.satisfied.append(item)
        elif rule.required:
            resolution.outstanding.append(item)
        else:
            resolution.optional_outstanding.append(item)
    return resolution


class RequirementResolver:
    """Loads rules and documents through repositories and resolves them."""

    def __init__(
        self,
        rule_repo: IRequirementRuleRepository,
        document_repo: IDocumentRecordRepository,
    ) -> None:
        self.rule_repo = rule_repo
        self.document_repo = document_repo

    @traced("requirements.resolve")
    async def resolve(
        self,
        workflow_definition_id: str,
        workflow_definition_version: int,
        workflow_id: str,
        now: datetime,
    ) -> RequirementResolution:
        rules = await self.rule_repo.get_rules(
            workflow_definition_id, workflow_definition_version
        )
        documents = await self.document_repo.list_for_owner(workflow_id)
        resolution = resolve_requirements(workflow_id, rules, documents, now)
        for conflict in resolution.conflicts:
            logger.warning(
                "Conflicting documents for singular requirement %s on workflow %s: "
                "keeping %s, superseding %s",
                conflict.document_definition_id,
                workflow_id,
                conflict.kept_record_id,
                ", ".join(conflict.superseded_record_ids),
            )
        return resolution
