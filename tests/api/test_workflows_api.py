"""Workflow requirement endpoint."""

from datetime import timedelta

from httpx import AsyncClient

from operations.domain.enums import DocumentStatus, ValidityPeriodUnit
from operations.domain.value_objects import ValidityPeriod
from tests.builders import OTHER_TENANT_ID, T0, TENANT_ID, make_record, make_rule, seed_workflow

HEADERS = {"X-Tenant-ID": TENANT_ID}
URL = "/api/v1/workflows/wf-1/requirements"


async def _seed(session_factory) -> None:
    await seed_workflow(
        session_factory,
        [
            make_rule(
                "ID_CARD", validity_period=ValidityPeriod(ValidityPeriodUnit.DAYS, 30)
            ),
            make_rule("RISK_MEMO", internal=True),
            make_rule("CV", required=False),
        ],
        records=[
            make_record(
                "ID_CARD",
                DocumentStatus.VERIFIED,
                record_id="r-old",
                provided=T0,
                verified=T0,
            ),
            make_record(
                "ID_CARD",
                DocumentStatus.VERIFIED,
                record_id="r-new",
                requested=T0 + timedelta(hours=1),
                provided=T0 + timedelta(hours=1),
                verified=T0 + timedelta(hours=2),
            ),
        ],
    )


async def test_requirements(client: AsyncClient, session_factory) -> None:
    await _seed(session_factory)

    response = await client.get(
        URL, params={"at": "2024-01-10T00:00:00+00:00"}, headers=HEADERS
    )

    assert response.status_code == 200
    data = response.json()
    assert data["workflow_id"] == "wf-1"
    assert data["can_proceed"] is False
    [satisfied] = data["satisfied"]
    assert satisfied["document_definition_id"] == "ID_CARD"
    assert satisfied["document_record_id"] == "r-new"
    assert satisfied["reason"] == "verified"
    assert satisfied["expires"].startswith("2024-01-31T13:00:00")
    [outstanding] = data["outstanding"]
    assert outstanding["document_definition_id"] == "RISK_MEMO"
    assert outstanding["reason"] == "not requested"
    assert outstanding["internal"] is True
    assert [i["document_definition_id"] for i in data["optional_outstanding"]] == ["CV"]
    [conflict] = data["conflicts"]
    assert conflict == {
        "document_definition_id": "ID_CARD",
        "kept_record_id": "r-new",
        "superseded_record_ids": ["r-old"],
    }


async def test_requirements_external_view(client: AsyncClient, session_factory) -> None:
    await _seed(session_factory)

    response = await client.get(
        URL,
        params={"at": "2024-01-10T00:00:00+00:00", "include_internal": "false"},
        headers=HEADERS,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["outstanding"] == []
    assert data["can_proceed"] is True


async def test_requirements_after_expiry(client: AsyncClient, session_factory) -> None:
    await _seed(session_factory)

    response = await client.get(
        URL,
        params={"at": "2024-03-01T00:00:00+00:00", "include_internal": "false"},
        headers=HEADERS,
    )

    [item] = response.json()["outstanding"]
    assert item["document_definition_id"] == "ID_CARD"
    assert item["reason"] == "expired, resubmission required"


async def test_unknown_or_foreign_workflow(client: AsyncClient, session_factory) -> None:
    await _seed(session_factory)
    missing = await client.get("/api/v1/workflows/nope/requirements", headers=HEADERS)
    assert missing.status_code == 404
    foreign = await client.get(URL, headers={"X-Tenant-ID": OTHER_TENANT_ID})
    assert foreign.status_code == 404
