"""Monthly query quota enforcement per subscription tier.

Invariants:
- ``queries_this_month`` never exceeds the tier limit; the check and the
  increment happen in one store call.
- Reset dates come from the server clock only.
- ``remaining`` is never negative; unlimited tiers report ``None``.
"""

from __future__ import annotations

import logging
from datetime import datetime

from zeitgeist.core.errors import NotFoundError, QuotaExceeded
from zeitgeist.core.security import next_quota_reset
from zeitgeist.schema.quota import RateLimitInfo
from zeitgeist.schema.user import UsageSummary, UserProfile
from zeitgeist.store.base import Store

logger = logging.getLogger("zeitgeist.services.quota_service")

NEAR_LIMIT_PERCENT = 80
UNLIMITED_HEADER_VALUE = "unlimited"


def _remaining(limit: int | None, used: int) -> int | None:
    if limit is None:
        return None
    return max(0, limit - used)


def _info_for(profile: UserProfile, used: int, allowed: bool, reset_date: datetime) -> RateLimitInfo:
    return RateLimitInfo(
        allowed=allowed,
        tier=profile.tier,
        used=used,
        limit=profile.query_limit,
        remaining=_remaining(profile.query_limit, used),
        reset_date=reset_date,
    )


async def _require_profile(store: Store, user_id: str) -> UserProfile:
    profile = await store.get_user(user_id)
    if profile is None:
        raise NotFoundError("User", user_id)
    return profile


async def check_and_consume(store: Store, user_id: str) -> RateLimitInfo:
    """Consume one query or raise ``QuotaExceeded`` if the month's allowance is gone."""
    profile = await _require_profile(store, user_id)
    reset_date = next_quota_reset()
    if profile.is_unlimited:
        return _info_for(profile, profile.queries_this_month, True, reset_date)

    new_count = await store.increment_query_count(user_id)
    if new_count is None:
        # The profile may have been deleted or its tier changed between the reads.
        current = await _require_profile(store, user_id)
        if current.is_unlimited:
            return _info_for(current, current.queries_this_month, True, reset_date)
        logger.info("Quota exhausted for user %s (%s/%s)", user_id, current.queries_this_month, current.query_limit)
        raise QuotaExceeded(limit=current.query_limit or 0, reset_date=reset_date)
    return _info_for(profile, new_count, True, reset_date)


async def peek(store: Store, user_id: str) -> RateLimitInfo:
    """Report quota state without consuming anything."""
    profile = await _require_profile(store, user_id)
    used = profile.queries_this_month
    allowed = profile.is_unlimited or used < (profile.query_limit or 0)
    return _info_for(profile, used, allowed, next_quota_reset())


async def reset_all(store: Store) -> int:
    """Zero every user's monthly counter; limits are left untouched."""
    count = await store.reset_monthly_queries()
    logger.info("Reset monthly query counters for %d users", count)
    return count


def rate_limit_headers(info: RateLimitInfo) -> dict[str, str]:
    """Response headers describing the caller's quota."""
    return {
        "X-RateLimit-Limit": UNLIMITED_HEADER_VALUE if info.limit is None else str(info.limit),
        "X-RateLimit-Remaining": UNLIMITED_HEADER_VALUE if info.remaining is None else str(info.remaining),
        "X-RateLimit-Reset": info.reset_date.isoformat(),
    }


def quota_exceeded_headers(exc: QuotaExceeded) -> dict[str, str]:
    return {
        "X-RateLimit-Limit": str(exc.limit),
        "X-RateLimit-Remaining": str(exc.remaining),
        "X-RateLimit-Reset": exc.reset_date.isoformat(),
    }


async def usage(store: Store, user_id: str) -> UsageSummary:
    """Usage dashboard for the current month."""
    info = await peek(store, user_id)
    percentage = None
    if info.limit:
        percentage = round(info.used / info.limit * 100, 1)
    return UsageSummary(
        tier=info.tier,
        used=info.used,
        limit=info.limit,
        remaining=info.remaining,
        percentage=percentage,
        reset_date=info.reset_date,
        near_limit=percentage is not None and percentage >= NEAR_LIMIT_PERCENT,
        at_limit=not info.allowed,
    )
