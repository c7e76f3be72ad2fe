"""Event queue inspection endpoints."""

from datetime import timedelta

from httpx import AsyncClient

from operations.domain.enums import EventStatus
from tests.builders import OTHER_TENANT_ID, T0, TENANT_ID, add_events, make_event

HEADERS = {"X-Tenant-ID": TENANT_ID}


async def _seed(session_factory) -> None:
    await add_events(
        session_factory,
        make_event(event_id="q1"),
        make_event(event_id="q2", occurred=T0 + timedelta(minutes=1)),
        make_event(event_id="p1", status=EventStatus.PROCESSED, processed=T0),
        make_event(
            event_id="f1",
            object_id="wf-2",
            status=EventStatus.FAILED,
            processing_attempts=6,
            last_processed=T0,
        ),
        make_event(event_id="x1", tenant_id=OTHER_TENANT_ID),
    )


async def test_missing_tenant_header_rejected(client: AsyncClient) -> None:
    response = await client.get("/api/v1/events/report")
    assert response.status_code == 400
    assert "X-Tenant-ID" in response.json()["message"]


async def test_invalid_tenant_header_rejected(client: AsyncClient) -> None:
    response = await client.get("/api/v1/events/report", headers={"X-Tenant-ID": "a b"})
    assert response.status_code == 400


async def test_report_counts_by_status(client: AsyncClient, session_factory) -> None:
    await _seed(session_factory)

    response = await client.get("/api/v1/events/report", headers=HEADERS)

    assert response.status_code == 200
    data = response.json()
    assert data["tenant_id"] == TENANT_ID
    assert data["counts"] == {"queued": 2, "processed": 1, "failed": 1}
    assert data["total"] == 4
    assert [e["id"] for e in data["recent_failed"]] == ["f1"]
    assert data["recent_failed"][0]["processing_attempts"] == 6


async def test_failed_events_are_listed(client: AsyncClient, session_factory) -> None:
    await _seed(session_factory)
    response = await client.get("/api/v1/events/failed", headers=HEADERS)
    assert response.status_code == 200
    assert [e["status"] for e in response.json()] == ["failed"]


async def test_events_for_object(client: AsyncClient, session_factory) -> None:
    await _seed(session_factory)

    response = await client.get(
        "/api/v1/events",
        params={"object_type": "workflow", "object_id": "wf-1"},
        headers=HEADERS,
    )

    assert response.status_code == 200
    assert [e["id"] for e in response.json()] == ["p1", "q1", "q2"]


async def test_events_for_object_rejects_unknown_type(client: AsyncClient) -> None:
    response = await client.get(
        "/api/v1/events",
        params={"object_type": "invoice", "object_id": "wf-1"},
        headers=HEADERS,
    )
    assert response.status_code == 422


async def test_get_event(client: AsyncClient, session_factory) -> None:
    await _seed(session_factory)

    response = await client.get("/api/v1/events/q1", headers=HEADERS)

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == "q1"
    assert data["object_type"] == "workflow"
    assert data["type"] == "workflow_created"
    assert data["status"] == "queued"
    assert data["locked"] is None


async def test_get_event_not_found_or_other_tenant(client: AsyncClient, session_factory) -> None:
    await _seed(session_factory)
    assert (await client.get("/api/v1/events/missing", headers=HEADERS)).status_code == 404
    assert (await client.get("/api/v1/events/x1", headers=HEADERS)).status_code == 404
