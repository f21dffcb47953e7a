"""
Integration tests for the REST API endpoints.

Uses an in-memory SQLite database with test models that replace PostGIS
Geometry columns with plain String columns.  The production repository
is pointed at those models and injected through ``create_app``.
"""

from __future__ import annotations

import asyncio
import json

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.api.app import create_app
from src.api.middleware import limiter
from src.config import settings
from src.infrastructure.image_store import FilesystemImageStore
from src.infrastructure.locks import KeyedAsyncLock
from src.workers.dispatcher import NotificationDispatcher
from tests.fakes import RecordingNotifier

PNG = b"\x89PNG\r\n\x1a\n fake tiger"


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest_asyncio.fixture
async def dispatcher(notifier):
    d = NotificationDispatcher(notifier, capacity=100)
    await d.start()
    yield d
    await d.shutdown()


@pytest_asyncio.fixture
async def client(sql_repository, dispatcher, tmp_path):
    """AsyncClient backed by SQLite + test models."""
    limiter.reset()
    app = create_app(
        repository=sql_repository,
        image_store=FilesystemImageStore(tmp_path / "images"),
        dispatcher=dispatcher,
        subject_locks=KeyedAsyncLock(),
    )
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def _payload(user_id=1, tiger_id=7, lat=10.0, lon=20.0, timestamp="2024-03-01T06:00:00Z"):
    info = {"user_id": user_id, "tiger_id": tiger_id, "lat": lat, "lon": lon}
    if timestamp is not None:
        info["timestamp"] = timestamp
    return {"sightingInfo": json.dumps(info)}


async def _post(client, filename="tiger.png", **kwargs):
    return await client.post(
        "/api/v1/sightings",
        data=_payload(**kwargs),
        files={"image": (filename, PNG, "image/png")},
    )


# ── Tests ─────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get("/api/v1/admin/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_create_sighting_returns_201(client: AsyncClient):
    resp = await _post(client)
    assert resp.status_code == 201
    data = resp.json()
    assert data["id"] is not None
    assert data["tiger_id"] == 7
    assert data["user_id"] == 1
    assert data["image_path"].endswith(".png")


@pytest.mark.asyncio
async def test_sighting_flow_notifies_prior_observer(
    client: AsyncClient, dispatcher, notifier
):
    first = await _post(client, user_id=1, lat=10.0, lon=20.0)
    assert first.status_code == 201

    second = await _post(
        client, user_id=2, lat=10.05, lon=20.0, timestamp="2024-03-01T08:00:00Z"
    )
    assert second.status_code == 201

    third = await _post(
        client, user_id=1, lat=10.051, lon=20.001, timestamp="2024-03-01T09:00:00Z"
    )
    assert third.status_code == 400
    assert third.json()["code"] == "TOO_CLOSE_TO_PREVIOUS_SIGHTING"

    await dispatcher.shutdown()
    assert notifier.sent == [(1, 7)]

    listing = await client.get("/api/v1/sightings", params={"tigerID": 7})
    assert [s["user_id"] for s in listing.json()] == [2, 1]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides, code",
    [
        ({"timestamp": None}, "INVALID_TIMESTAMP"),
        ({"lat": 0}, "INVALID_LATITUDE"),
        ({"lon": 181}, "INVALID_LONGITUDE"),
        ({"user_id": 0}, "INVALID_USER_ID"),
        ({"tiger_id": -1}, "INVALID_TIGER_ID"),
    ],
)
async def test_validation_errors_are_structured(client: AsyncClient, overrides, code):
    resp = await _post(client, **overrides)
    assert resp.status_code == 400
    body = resp.json()
    assert body["code"] == code
    assert body["message"]


@pytest.mark.asyncio
async def test_malformed_sighting_info(client: AsyncClient):
    resp = await client.post(
        "/api/v1/sightings",
        data={"sightingInfo": "{not json"},
        files={"image": ("tiger.png", PNG, "image/png")},
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_missing_image(client: AsyncClient):
    resp = await client.post("/api/v1/sightings", data=_payload())
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_oversized_image_is_rejected(client: AsyncClient, monkeypatch):
    monkeypatch.setattr(settings, "max_upload_bytes", 4)
    resp = await _post(client)
    assert resp.status_code == 413

    listing = await client.get("/api/v1/sightings", params={"tigerID": 7})
    assert listing.json() == []


@pytest.mark.asyncio
async def test_concurrent_reports_of_same_spot_accept_one(client: AsyncClient):
    first, second = await asyncio.gather(
        _post(client, user_id=1),
        _post(client, user_id=2, timestamp="2024-03-01T06:05:00Z"),
    )

    assert sorted([first.status_code, second.status_code]) == [201, 400]
    rejected = first if first.status_code == 400 else second
    assert rejected.json()["code"] == "TOO_CLOSE_TO_PREVIOUS_SIGHTING"

    listing = await client.get("/api/v1/sightings", params={"tigerID": 7})
    assert len(listing.json()) == 1


@pytest.mark.asyncio
async def test_unsupported_image_type_is_internal_error(client: AsyncClient):
    resp = await _post(client, filename="tiger.gif")
    assert resp.status_code == 500
    assert resp.json() == {"detail": "Internal server error"}


@pytest.mark.asyncio
async def test_unknown_tiger_is_internal_error(client: AsyncClient):
    resp = await _post(client, tiger_id=99)
    assert resp.status_code == 500

    listing = await client.get("/api/v1/sightings", params={"tigerID": 99})
    assert listing.json() == []


@pytest.mark.asyncio
async def test_list_requires_tiger_id(client: AsyncClient):
    assert (await client.get("/api/v1/sightings")).status_code == 400
    resp = await client.get("/api/v1/sightings", params={"tigerID": "abc"})
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_list_pagination_coerces_bad_values(client: AsyncClient):
    for hour, lat in enumerate([10.0, 11.0, 12.0]):
        resp = await _post(
            client, lat=lat, timestamp=f"2024-03-01T{hour:02d}:00:00Z"
        )
        assert resp.status_code == 201

    newest_first = [12.0, 11.0, 10.0]
    for params in (
        {"page": 0},
        {"page": -3},
        {"pageSize": 0},
        {"pageSize": -1},
        {},
    ):
        resp = await client.get("/api/v1/sightings", params={"tigerID": 7, **params})
        assert resp.status_code == 200
        assert [s["lat"] for s in resp.json()] == newest_first

    resp = await client.get(
        "/api/v1/sightings", params={"tigerID": 7, "page": 2, "pageSize": 2}
    )
    assert [s["lat"] for s in resp.json()] == [10.0]


@pytest.mark.asyncio
async def test_notification_stats_endpoint(client: AsyncClient):
    resp = await client.get("/api/v1/admin/notifications")
    assert resp.status_code == 200
    body = resp.json()
    assert body["capacity"] == 100
    assert body["running"] is True
    assert body["closed"] is False
