"""Quota enforcement, atomicity under concurrency, and monthly reset."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import pytest

from zeitgeist.core.config import settings
from zeitgeist.core.errors import NotFoundError, QuotaExceeded
from zeitgeist.core.security import next_quota_reset
from zeitgeist.schema.user import Tier
from zeitgeist.services import quota_service, user_service
from zeitgeist.tests.utils import make_user


@pytest.mark.asyncio
async def test_free_tier_allows_five_then_refuses(store):
    await make_user(store, "free-user", Tier.FREE)
    for expected_remaining in (4, 3, 2, 1, 0):
        info = await quota_service.check_and_consume(store, "free-user")
        assert info.allowed is True
        assert info.remaining == expected_remaining

    with pytest.raises(QuotaExceeded) as excinfo:
        await quota_service.check_and_consume(store, "free-user")
    assert excinfo.value.limit == 5
    assert excinfo.value.remaining == 0
    assert excinfo.value.status_code == 429

    profile = await store.get_user("free-user")
    assert profile.queries_this_month == 5


@pytest.mark.asyncio
async def test_reset_restores_allowance(store):
    await make_user(store, "free-user", Tier.FREE)
    for _ in range(5):
        await quota_service.check_and_consume(store, "free-user")

    assert await quota_service.reset_all(store) == 1
    info = await quota_service.check_and_consume(store, "free-user")
    assert info.remaining == 4
    assert (await store.get_user("free-user")).tier == Tier.FREE


@pytest.mark.asyncio
async def test_unlimited_tier_is_never_metered(store):
    await make_user(store, "vip", Tier.UNLIMITED)
    for _ in range(10):
        info = await quota_service.check_and_consume(store, "vip")
        assert info.limit is None
        assert info.remaining is None
    assert (await store.get_user("vip")).queries_this_month == 0
    headers = quota_service.rate_limit_headers(info)
    assert headers["X-RateLimit-Limit"] == "unlimited"
    assert headers["X-RateLimit-Remaining"] == "unlimited"


@pytest.mark.asyncio
async def test_unknown_user_raises_not_found(store):
    with pytest.raises(NotFoundError):
        await quota_service.check_and_consume(store, "ghost")


@pytest.mark.asyncio
async def test_concurrent_requests_at_limit_allow_exactly_one(store):
    await make_user(store, "racer", Tier.FREE, queries_this_month=4)
    results = await asyncio.gather(
        *(quota_service.check_and_consume(store, "racer") for _ in range(10)),
        return_exceptions=True,
    )
    allowed = [result for result in results if not isinstance(result, Exception)]
    refused = [result for result in results if isinstance(result, QuotaExceeded)]
    assert len(allowed) == 1
    assert len(refused) == 9
    assert (await store.get_user("racer")).queries_this_month == 5


@pytest.mark.asyncio
async def test_sql_store_increment_is_conditional(sql_store):
    await make_user(sql_store, "racer", Tier.FREE, queries_this_month=4)
    results = await asyncio.gather(
        *(quota_service.check_and_consume(sql_store, "racer") for _ in range(5)),
        return_exceptions=True,
    )
    assert sum(1 for result in results if not isinstance(result, Exception)) == 1
    assert all(isinstance(result, QuotaExceeded) for result in results if isinstance(result, Exception))
    assert (await sql_store.get_user("racer")).queries_this_month == 5

    assert await quota_service.reset_all(sql_store) == 1
    assert (await sql_store.get_user("racer")).queries_this_month == 0


@pytest.mark.asyncio
async def test_profile_save_keeps_stored_counter(store):
    profile = await make_user(store, "writer", Tier.LIGHT)
    await quota_service.check_and_consume(store, "writer")
    await quota_service.check_and_consume(store, "writer")
    saved = await store.save_user(profile.model_copy(update={"display_name": "Stale copy"}))
    assert saved.queries_this_month == 2
    assert saved.display_name == "Stale copy"


@pytest.mark.asyncio
async def test_downgrade_clamps_usage_to_new_limit(store):
    await make_user(store, "shrinker", Tier.REGULAR, queries_this_month=40)
    updated = await user_service.change_tier(store, "shrinker", Tier.FREE)
    assert updated.queries_this_month == 5
    assert updated.query_limit == 5
    with pytest.raises(QuotaExceeded):
        await quota_service.check_and_consume(store, "shrinker")


@pytest.mark.asyncio
async def test_usage_summary_flags_near_limit(store):
    await make_user(store, "dash", Tier.FREE, queries_this_month=4)
    summary = await quota_service.usage(store, "dash")
    assert summary.percentage == 80.0
    assert summary.near_limit is True
    assert summary.at_limit is False
    assert summary.remaining == 1


def test_reset_date_is_first_of_next_month(monkeypatch):
    monkeypatch.setattr(settings, "quota_timezone", "UTC")
    assert next_quota_reset(datetime(2025, 12, 31, 23, 59, tzinfo=timezone.utc)) == datetime(
        2026, 1, 1, tzinfo=timezone.utc
    )
    assert next_quota_reset(datetime(2025, 3, 10, tzinfo=timezone.utc)) == datetime(2025, 4, 1, tzinfo=timezone.utc)


def test_reset_date_respects_configured_zone(monkeypatch):
    monkeypatch.setattr(settings, "quota_timezone", "America/New_York")
    reset = next_quota_reset(datetime(2025, 1, 31, 12, tzinfo=timezone.utc))
    assert reset == datetime(2025, 2, 1, 5, tzinfo=timezone.utc)
