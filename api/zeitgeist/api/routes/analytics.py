"""Per-user analytics: insights, stored monthly metrics, and a readable summary."""

from fastapi import APIRouter, Depends, Query

from zeitgeist.api.deps import get_current_user, get_store
from zeitgeist.core.errors import NotFoundError
from zeitgeist.schema.analytics import InsightsSummary, MonthlyMetric, UserInsights
from zeitgeist.schema.user import UserProfile
from zeitgeist.services import analytics_service
from zeitgeist.store.base import Store

router = APIRouter()


@router.get("/insights", response_model=UserInsights)
async def read_insights(
    current_user: UserProfile = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> UserInsights:
    return await analytics_service.user_insights(store, current_user.id)


@router.get("/metrics", response_model=MonthlyMetric)
async def read_monthly_metric(
    month: str = Query(..., description="Month key in YYYY-MM form"),
    current_user: UserProfile = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> MonthlyMetric:
    """Return the stored aggregate for one month."""
    metric = await analytics_service.get_monthly_metric(store, current_user.id, month)
    if metric is None:
        raise NotFoundError("Monthly metric", month)
    return metric


@router.get("/summary", response_model=InsightsSummary)
async def read_summary(
    current_user: UserProfile = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> InsightsSummary:
    insights = await analytics_service.user_insights(store, current_user.id)
    return analytics_service.insights_summary(insights)
