"""Advice endpoint: the only metered operation."""

from fastapi import APIRouter, BackgroundTasks, Depends, Response

from zeitgeist.api.deps import get_matchers, get_optional_current_user, get_store
from zeitgeist.matchers.registry import MatcherRegistry
from zeitgeist.schema.advice import AdviceRequest, AdviceResponse
from zeitgeist.schema.user import UserProfile
from zeitgeist.services import advice_service, quota_service
from zeitgeist.store.base import Store

router = APIRouter()


@router.post("", response_model=AdviceResponse)
async def create_advice(
    payload: AdviceRequest,
    response: Response,
    background_tasks: BackgroundTasks,
    current_user: UserProfile | None = Depends(get_optional_current_user),
    store: Store = Depends(get_store),
    matchers: MatcherRegistry = Depends(get_matchers),
) -> AdviceResponse:
    """Match current vibes to a scenario; signed-in callers spend one monthly query."""
    outcome = await advice_service.generate_advice(store, matchers, payload.scenario, current_user)
    if outcome.rate_limit is not None:
        response.headers.update(quota_service.rate_limit_headers(outcome.rate_limit))
    if outcome.history_entry is not None:
        background_tasks.add_task(advice_service.persist_history, store, outcome.history_entry)
    return outcome.response
