"""HTTP surface: auth, quota headers, error mapping, and guarded endpoints."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from zeitgeist.schema.user import Tier
from zeitgeist.services import history_service
from zeitgeist.services.task_queue import task_queue
from zeitgeist.tests.utils import auth_headers, cron_headers, make_history, make_user, make_vibe

SCENARIO = {"scenario": {"description": "Dinner with coworkers"}}


async def _seed_fresh_vibes(store) -> None:
    now = datetime.now(timezone.utc)
    await store.save_vibe(make_vibe("v1", "Office dinner etiquette", keywords=["dinner", "coworkers"], now=now))
    await store.save_vibe(make_vibe("v2", "Supper clubs", keywords=["dinner"], now=now))


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "store": "memory", "queue": "inline"}


@pytest.mark.asyncio
async def test_advice_sets_quota_headers_and_saves_history(client, store):
    await _seed_fresh_vibes(store)
    response = await client.post("/api/advice", json=SCENARIO, headers=auth_headers("alice"))

    assert response.status_code == 200
    assert response.headers["X-RateLimit-Limit"] == "5"
    assert response.headers["X-RateLimit-Remaining"] == "4"
    body = response.json()
    assert body["usage"]["used"] == 1
    assert [match["vibe"]["id"] for match in body["advice"]["matched_vibes"]] == ["v1", "v2"]

    entries = await store.get_advice_history("alice")
    assert [entry.id for entry in entries] == [body["history_id"]]


@pytest.mark.asyncio
async def test_exhausted_quota_returns_429_with_headers(client, store):
    await make_user(store, "alice", Tier.FREE)
    for _ in range(5):
        await store.increment_query_count("alice")

    response = await client.post("/api/advice", json=SCENARIO, headers=auth_headers("alice"))
    assert response.status_code == 429
    assert response.headers["X-RateLimit-Limit"] == "5"
    assert response.headers["X-RateLimit-Remaining"] == "0"
    assert "X-RateLimit-Reset" in response.headers
    assert response.json()["error"] == "rate_limit_exceeded"
    assert await store.get_advice_history("alice") == []


@pytest.mark.asyncio
async def test_unlimited_tier_reports_unlimited_headers(client, store):
    await make_user(store, "alice", Tier.UNLIMITED)
    response = await client.post("/api/advice", json=SCENARIO, headers=auth_headers("alice"))
    assert response.status_code == 200
    assert response.headers["X-RateLimit-Limit"] == "unlimited"
    assert response.headers["X-RateLimit-Remaining"] == "unlimited"


@pytest.mark.asyncio
async def test_anonymous_advice_is_not_metered(client, store):
    await _seed_fresh_vibes(store)
    response = await client.post("/api/advice", json=SCENARIO)
    assert response.status_code == 200
    assert "X-RateLimit-Limit" not in response.headers
    assert response.json()["history_id"] is None
    assert await store.list_user_ids() == []


@pytest.mark.asyncio
async def test_invalid_token_is_rejected(client):
    response = await client.post(
        "/api/advice", json=SCENARIO, headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_invalid_scenario_maps_to_400(client):
    response = await client.post("/api/advice", json={"scenario": {"description": "hi"}})
    assert response.status_code == 400
    assert response.json()["error"] == "validation_error"


@pytest.mark.asyncio
async def test_profile_update_cannot_change_tier(client, store):
    await make_user(store, "alice")
    headers = auth_headers("alice")
    blocked = await client.put("/api/user/profile", json={"tier": "unlimited"}, headers=headers)
    assert blocked.status_code == 400
    assert (await store.get_user("alice")).tier == Tier.FREE

    allowed = await client.put(
        "/api/user/profile", json={"interests": ["Fashion", "fashion"], "region": "EU-UK"}, headers=headers
    )
    assert allowed.status_code == 200
    assert allowed.json()["interests"] == ["Fashion"]
    assert allowed.json()["query_limit"] == 5


@pytest.mark.asyncio
async def test_usage_endpoint(client, store):
    await make_user(store, "alice", Tier.FREE)
    for _ in range(4):
        await store.increment_query_count("alice")
    response = await client.get("/api/user/usage", headers=auth_headers("alice"))
    body = response.json()
    assert body["used"] == 4
    assert body["remaining"] == 1
    assert body["percentage"] == 80.0
    assert body["near_limit"] is True
    assert body["at_limit"] is False


@pytest.mark.asyncio
async def test_account_deletion_requires_confirmation(client, store):
    headers = auth_headers("alice")
    await make_user(store, "alice")
    await history_service.save_advice(store, make_history("alice"))

    refused = await client.request("DELETE", "/api/user/profile", json={}, headers=headers)
    assert refused.status_code == 400

    response = await client.request("DELETE", "/api/user/profile", json={"confirm": True}, headers=headers)
    assert response.status_code == 200
    assert response.json() == {"deleted": True, "history_deleted": 1, "favorites_deleted": 0}
    assert await store.get_user("alice") is None


@pytest.mark.asyncio
async def test_history_ownership_and_feedback(client, store):
    entry = await history_service.save_advice(store, make_history("alice"))

    foreign = await client.get(f"/api/history/{entry.id}", headers=auth_headers("bob"))
    assert foreign.status_code == 403

    rated = await client.put(f"/api/history/{entry.id}", json={"rating": 4}, headers=auth_headers("alice"))
    assert rated.status_code == 200
    assert rated.json()["rating"] == 4

    out_of_range = await client.put(f"/api/history/{entry.id}", json={"rating": 9}, headers=auth_headers("alice"))
    assert out_of_range.status_code == 400

    deleted = await client.delete(f"/api/history/{entry.id}", headers=auth_headers("alice"))
    assert deleted.status_code == 204
    missing = await client.get(f"/api/history/{entry.id}", headers=auth_headers("alice"))
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_favorites_endpoints(client, store):
    await _seed_fresh_vibes(store)
    headers = auth_headers("alice")
    created = await client.post("/api/favorites", json={"type": "vibe", "reference_id": "v1"}, headers=headers)
    assert created.status_code == 201
    assert created.json()["metadata"]["vibe_name"] == "Office dinner etiquette"

    duplicate = await client.post("/api/favorites", json={"type": "vibe", "reference_id": "v1"}, headers=headers)
    assert duplicate.status_code == 409
    assert duplicate.json()["error"] == "already_favorited"

    check = await client.get("/api/favorites/check", params={"type": "vibe", "reference_id": "v1"}, headers=headers)
    assert check.json() == {"favorited": True, "favorite_id": created.json()["id"]}

    removed = await client.delete(f"/api/favorites/{created.json()['id']}", headers=headers)
    assert removed.status_code == 204
    assert (await client.get("/api/favorites", headers=headers)).json() == []


@pytest.mark.asyncio
async def test_metric_month_is_validated(client):
    headers = auth_headers("alice")
    bad = await client.get("/api/analytics/metrics", params={"month": "2025-13"}, headers=headers)
    assert bad.status_code == 400
    missing = await client.get("/api/analytics/metrics", params={"month": "2025-01"}, headers=headers)
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_insights_and_summary(client, store):
    await history_service.save_advice(store, make_history("alice", interests=["fashion"], rating=5))
    insights = await client.get("/api/analytics/insights", headers=auth_headers("alice"))
    assert insights.status_code == 200
    assert insights.json()["total_queries"] == 1
    summary = await client.get("/api/analytics/summary", headers=auth_headers("alice"))
    assert summary.json()["summary"].startswith("You've made 1 queries in total")


@pytest.mark.asyncio
async def test_cron_endpoints_require_secret(client, store):
    await make_user(store, "alice")
    await store.increment_query_count("alice")

    missing = await client.post("/api/cron/reset-quotas")
    assert missing.status_code == 401
    wrong = await client.post("/api/cron/reset-quotas", headers={"Authorization": "Bearer nope"})
    assert wrong.status_code == 401

    response = await client.post("/api/cron/reset-quotas", headers=cron_headers())
    assert response.status_code == 200
    assert response.json() == {"success": True, "users_reset": 1}
    assert (await store.get_user("alice")).queries_this_month == 0


@pytest.mark.asyncio
async def test_cron_aggregate_analytics(client, store):
    await make_user(store, "alice")
    await history_service.save_advice(
        store, make_history("alice", timestamp=datetime.now(timezone.utc), region="US-West")
    )
    response = await client.post("/api/cron/aggregate-analytics", headers=cron_headers())
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["users_processed"] == 1
    assert body["metrics_written"] == 1


@pytest.mark.asyncio
async def test_vibe_ingest_and_ops_are_guarded(client):
    payload = {"id": "fresh", "name": "Tiny desk concerts", "strength": 0.6, "category": "trend"}
    assert (await client.post("/api/vibes", json=payload)).status_code == 401
    created = await client.post("/api/vibes", json=payload, headers=cron_headers())
    assert created.status_code == 201
    assert created.json()["half_life"] is not None

    listed = await client.get("/api/vibes")
    assert [vibe["id"] for vibe in listed.json()] == ["fresh"]
    assert (await client.get("/api/vibes/unknown")).status_code == 404

    assert (await client.get("/api/ops/queues")).status_code == 401
    queues = await client.get("/api/ops/queues", headers=cron_headers())
    assert queues.status_code == 200
    assert queues.json()["status"] == "offline"


@pytest.mark.asyncio
async def test_cron_reset_runs_on_app_store_when_queue_is_online(client, store, monkeypatch):
    await make_user(store, "alice")
    await store.increment_query_count("alice")
    monkeypatch.setattr(task_queue, "_enabled", True)
    monkeypatch.setattr(task_queue, "_connection", object())

    def refuse_queue(*args, **kwargs):
        raise AssertionError("memory-store jobs must not be enqueued")

    monkeypatch.setattr(task_queue, "get_queue", refuse_queue)

    response = await client.post("/api/cron/reset-quotas", headers=cron_headers())
    assert response.status_code == 200
    assert response.json() == {"success": True, "users_reset": 1}
    assert (await store.get_user("alice")).queries_this_month == 0
