"""Monthly metric aggregation and cross-month user insights.

Invariants:
- ``aggregate_month`` is idempotent: unchanged history yields an identical metric.
- A month with no history produces no metric at all, never a zeroed one.
- Ratings are averaged over rated entries only.
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, timedelta, timezone

from zeitgeist.core.errors import ZeitgeistError
from zeitgeist.schema.analytics import (
    AggregationReport,
    DayCount,
    HourCount,
    InsightsSummary,
    MonthlyMetric,
    Satisfaction,
    Trends,
    UsagePatterns,
    UserInsights,
    VibeCount,
)
from zeitgeist.schema.base import CountItem
from zeitgeist.schema.history import AdviceHistory
from zeitgeist.services import history_service
from zeitgeist.store.base import Store
from zeitgeist.utils.datetime import ensure_utc, month_bounds, month_key, parse_month_key, previous_month_key

logger = logging.getLogger("zeitgeist.services.analytics_service")

DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
SATISFACTION_BAND = 0.2
TIMELINE_DAYS = 30
SCENARIO_PREVIEW_CHARS = 100


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _histogram(counter: Counter[str]) -> dict[str, int]:
    """Counter as a dict ordered by count desc, then key, for stable output."""
    return {key: count for key, count in sorted(counter.items(), key=lambda item: (-item[1], item[0]))}


def _top(counter: Counter[str], limit: int) -> list[CountItem]:
    return [CountItem(name=name, count=count) for name, count in list(_histogram(counter).items())[:limit]]


def _average(values: list[int]) -> float | None:
    if not values:
        return None
    return round(sum(values) / len(values), 4)


def build_monthly_metric(user_id: str, month: str, entries: list[AdviceHistory]) -> MonthlyMetric | None:
    """Fold a month of history into a metric; ``None`` when there is nothing to fold."""
    if not entries:
        return None
    regions: Counter[str] = Counter()
    interests: Counter[str] = Counter()
    for entry in entries:
        if entry.region_filter_applied:
            regions[entry.region_filter_applied] += 1
        for interest in entry.interest_boosts_applied:
            interests[interest] += 1
    return MonthlyMetric(
        user_id=user_id,
        month=month,
        queries_count=len(entries),
        top_regions_queried=_histogram(regions),
        top_interest_matches=_histogram(interests),
        average_rating=_average([entry.rating for entry in entries if entry.rating is not None]),
    )


async def aggregate_month(store: Store, user_id: str, month: str | None = None) -> MonthlyMetric | None:
    """Recompute and store one user's metric for ``month`` (default: current UTC month)."""
    key = month or month_key(_utcnow())
    start, end = month_bounds(key)
    entries = await store.get_advice_history_between(user_id, start, end)
    metric = build_monthly_metric(user_id, key, entries)
    if metric is None:
        return None
    return await store.save_monthly_metric(metric)


async def aggregate_monthly_metrics(store: Store, user_id: str, now: datetime | None = None) -> list[MonthlyMetric]:
    """Aggregate the current and previous month for one user."""
    current = month_key(now or _utcnow())
    results: list[MonthlyMetric] = []
    for key in (previous_month_key(current), current):
        metric = await aggregate_month(store, user_id, key)
        if metric is not None:
            results.append(metric)
    return results


async def aggregate_all_users(store: Store, now: datetime | None = None) -> AggregationReport:
    """Run monthly aggregation for every known user, isolating per-user failures."""
    report = AggregationReport()
    for user_id in await store.list_user_ids():
        try:
            metrics = await aggregate_monthly_metrics(store, user_id, now)
        except ZeitgeistError as exc:
            logger.error("Analytics aggregation failed for user %s: %s", user_id, exc.code)
            report.failures += 1
            continue
        report.users_processed += 1
        report.metrics_written += len(metrics)
    logger.info(
        "Aggregated analytics for %d users (%d metrics, %d failures)",
        report.users_processed,
        report.metrics_written,
        report.failures,
    )
    return report


async def get_monthly_metric(store: Store, user_id: str, month: str) -> MonthlyMetric | None:
    """Stored metric for a strictly validated ``YYYY-MM`` key."""
    parse_month_key(month)
    return await store.get_monthly_metric(user_id, month)


def _satisfaction(entries: list[AdviceHistory]) -> Satisfaction:
    ratings = [entry.rating for entry in entries if entry.rating is not None]
    distribution = {score: 0 for score in range(1, 6)}
    for rating in ratings:
        distribution[rating] += 1
    judged = [entry.was_helpful for entry in entries if entry.was_helpful is not None]
    helpful = round(sum(1 for value in judged if value) / len(judged) * 100, 1) if judged else 0.0
    return Satisfaction(
        average_rating=_average(ratings),
        total_ratings=len(ratings),
        rating_distribution=distribution,
        helpful_percentage=helpful,
    )


def _usage_patterns(entries: list[AdviceHistory], now: datetime) -> UsagePatterns:
    days: Counter[str] = Counter({name: 0 for name in DAY_NAMES})
    hours: Counter[int] = Counter({hour: 0 for hour in range(24)})
    timeline: Counter = Counter()
    window_start = now - timedelta(days=TIMELINE_DAYS)
    for entry in entries:
        stamp = ensure_utc(entry.timestamp)
        days[DAY_NAMES[stamp.weekday()]] += 1
        hours[stamp.hour] += 1
        if stamp >= window_start:
            timeline[stamp.date()] += 1
    return UsagePatterns(
        busiest_days=[
            CountItem(name=name, count=days[name])
            for name in sorted(DAY_NAMES, key=lambda name: (-days[name], DAY_NAMES.index(name)))
        ],
        busiest_hours=[
            HourCount(hour=hour, count=hours[hour]) for hour in sorted(range(24), key=lambda hour: (-hours[hour], hour))
        ],
        timeline=[DayCount(date=day, count=timeline[day]) for day in sorted(timeline)],
    )


def _trends(entries: list[AdviceHistory], this_month: int, last_month: int, now: datetime) -> Trends:
    growth = round((this_month - last_month) / last_month * 100, 1) if last_month else 0.0
    recent_start = now - timedelta(days=30)
    previous_start = now - timedelta(days=60)
    recent = [e.rating for e in entries if e.rating is not None and ensure_utc(e.timestamp) >= recent_start]
    previous = [
        e.rating
        for e in entries
        if e.rating is not None and previous_start <= ensure_utc(e.timestamp) < recent_start
    ]
    recent_avg = _average(recent) or 0.0
    previous_avg = _average(previous) or 0.0
    trend = "stable"
    if recent_avg > previous_avg + SATISFACTION_BAND:
        trend = "up"
    elif recent_avg < previous_avg - SATISFACTION_BAND:
        trend = "down"

    recent_interests: list[str] = []
    older_interests: set[str] = set()
    for entry in entries:
        for interest in entry.interest_boosts_applied:
            if ensure_utc(entry.timestamp) >= recent_start:
                if interest not in recent_interests:
                    recent_interests.append(interest)
            else:
                older_interests.add(interest)
    emerging = [interest for interest in recent_interests if interest not in older_interests]
    return Trends(query_growth=growth, satisfaction_trend=trend, emerging_interests=emerging)


async def user_insights(store: Store, user_id: str, now: datetime | None = None) -> UserInsights:
    """Summarize a user's whole history."""
    reference = ensure_utc(now or _utcnow())
    entries = await history_service.load_all_history(store, user_id)
    if not entries:
        return UserInsights()

    current_key = month_key(reference)
    previous_key = previous_month_key(current_key)
    this_month = sum(1 for entry in entries if month_key(entry.timestamp) == current_key)
    last_month = sum(1 for entry in entries if month_key(entry.timestamp) == previous_key)

    interests: Counter[str] = Counter()
    regions: Counter[str] = Counter()
    scenarios: Counter[str] = Counter()
    vibes: Counter[str] = Counter()
    vibe_names: dict[str, str] = {}
    for entry in entries:
        interests.update(entry.interest_boosts_applied)
        if entry.region_filter_applied:
            regions[entry.region_filter_applied] += 1
        scenarios[entry.scenario.description[:SCENARIO_PREVIEW_CHARS]] += 1
        for match in entry.advice.matched_vibes:
            vibes[match.vibe.id] += 1
            vibe_names.setdefault(match.vibe.id, match.vibe.name)

    return UserInsights(
        total_queries=len(entries),
        queries_this_month=this_month,
        queries_last_month=last_month,
        top_interests=_top(interests, 10),
        top_regions=_top(regions, 5),
        top_matched_vibes=[
            VibeCount(id=vibe_id, name=vibe_names[vibe_id], count=count)
            for vibe_id, count in list(_histogram(vibes).items())[:10]
        ],
        top_scenarios=_top(scenarios, 5),
        usage=_usage_patterns(entries, reference),
        satisfaction=_satisfaction(entries),
        trends=_trends(entries, this_month, last_month, reference),
    )


def detect_patterns(insights: UserInsights) -> list[str]:
    """Plain heuristics over usage and satisfaction."""
    patterns: list[str] = []
    day_total = sum(item.count for item in insights.usage.busiest_days)
    weekend = sum(item.count for item in insights.usage.busiest_days if item.name in ("Saturday", "Sunday"))
    if day_total and weekend > day_total * 0.4:
        patterns.append("You tend to seek advice more on weekends, possibly for social events.")
    hour_total = sum(item.count for item in insights.usage.busiest_hours)
    evening = sum(item.count for item in insights.usage.busiest_hours if 18 <= item.hour <= 22)
    if hour_total and evening > hour_total * 0.4:
        patterns.append("You mostly use the app in the evening (6-10 PM).")
    if insights.trends.query_growth > 20:
        patterns.append("Your engagement is growing quickly month over month.")
    if insights.satisfaction.average_rating is not None and insights.satisfaction.average_rating >= 4.0:
        patterns.append("You consistently rate advice highly.")
    return patterns[:5]


def insights_summary(insights: UserInsights) -> InsightsSummary:
    """Readable summary of an insights snapshot."""
    parts = [
        f"You've made {insights.total_queries} queries in total, with {insights.queries_this_month} this month."
    ]
    growth = insights.trends.query_growth
    if growth > 10:
        parts.append(f"Your usage has grown by {growth:.1f}% compared to last month!")
    elif growth < -10:
        parts.append(f"Your usage has decreased by {abs(growth):.1f}% compared to last month.")
    if insights.top_interests:
        names = ", ".join(item.name for item in insights.top_interests[:3])
        parts.append(f"Your top interests are: {names}.")
    if insights.top_regions:
        parts.append(f"You primarily explore vibes from {insights.top_regions[0].name}.")
    if insights.usage.busiest_days and insights.usage.busiest_days[0].count > 0:
        parts.append(f"You're most active on {insights.usage.busiest_days[0].name}s.")
    if insights.satisfaction.total_ratings and insights.satisfaction.average_rating is not None:
        parts.append(f"Your average satisfaction rating is {insights.satisfaction.average_rating:.1f}/5 stars.")
        if insights.trends.satisfaction_trend == "up":
            parts.append("Your satisfaction has been trending upward!")
        elif insights.trends.satisfaction_trend == "down":
            parts.append("Your satisfaction has been trending downward recently.")
    if insights.trends.emerging_interests:
        parts.append(f"New interests you're exploring: {', '.join(insights.trends.emerging_interests[:3])}.")
    return InsightsSummary(summary=" ".join(parts), patterns=detect_patterns(insights))
