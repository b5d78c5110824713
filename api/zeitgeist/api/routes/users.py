"""Profile, preference, and usage endpoints for the signed-in user."""

from fastapi import APIRouter, Depends

from zeitgeist.api.deps import get_current_user, get_store
from zeitgeist.core.errors import ValidationError
from zeitgeist.schema.user import AccountDeletion, UsageSummary, UserProfile, UserProfileRead, UserProfileUpdate
from zeitgeist.services import quota_service, user_service
from zeitgeist.store.base import Store

router = APIRouter()


@router.get("/profile", response_model=UserProfileRead)
async def read_profile(current_user: UserProfile = Depends(get_current_user)) -> UserProfile:
    """Return the current user's profile, creating it on first sign-in."""
    return current_user


@router.put("/profile", response_model=UserProfileRead)
async def update_profile(
    payload: UserProfileUpdate,
    current_user: UserProfile = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> UserProfile:
    """Update allow-listed preferences; tier and counters are not writable here."""
    return await user_service.update_preferences(store, current_user.id, payload)


@router.delete("/profile")
async def delete_profile(
    payload: AccountDeletion,
    current_user: UserProfile = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> dict:
    """Delete the account along with its history and favorites."""
    if not payload.confirm:
        raise ValidationError("confirm", "must be true to delete the account")
    deleted = await user_service.delete_account(store, current_user.id)
    return {"deleted": True, **deleted}


@router.get("/usage", response_model=UsageSummary)
async def read_usage(
    current_user: UserProfile = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> UsageSummary:
    return await quota_service.usage(store, current_user.id)
