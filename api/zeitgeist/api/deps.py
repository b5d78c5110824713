from fastapi import Cookie, Depends, Header, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from zeitgeist.core.config import settings
from zeitgeist.core.security import decode_token, verify_bearer_secret
from zeitgeist.matchers.registry import MatcherRegistry
from zeitgeist.schema.user import UserProfile
from zeitgeist.services import user_service
from zeitgeist.store.base import Store

bearer_scheme = HTTPBearer(auto_error=False)


def get_store(request: Request) -> Store:
    return request.app.state.store


def get_matchers(request: Request) -> MatcherRegistry:
    return request.app.state.matchers


def _token_from(
    credentials: HTTPAuthorizationCredentials | None, access_token_cookie: str | None
) -> str | None:
    if credentials and credentials.credentials:
        return credentials.credentials
    return access_token_cookie


async def _resolve_user_from_token(store: Store, token: str) -> UserProfile:
    payload = decode_token(token)
    if not payload or payload.get("type") != "access":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return await user_service.get_or_create_profile(
        store,
        str(user_id),
        email=payload.get("email"),
        display_name=payload.get("name"),
    )


async def get_current_user(
    store: Store = Depends(get_store),
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    access_token_cookie: str | None = Cookie(default=None, alias="access_token"),
) -> UserProfile:
    candidate = _token_from(credentials, access_token_cookie)
    if not candidate:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return await _resolve_user_from_token(store, candidate)


async def get_optional_current_user(
    store: Store = Depends(get_store),
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    access_token_cookie: str | None = Cookie(default=None, alias="access_token"),
) -> UserProfile | None:
    candidate = _token_from(credentials, access_token_cookie)
    if not candidate:
        return None
    return await _resolve_user_from_token(store, candidate)


async def require_cron_secret(authorization: str | None = Header(default=None)) -> None:
    """Gate scheduler and ops endpoints behind ``Authorization: Bearer <CRON_SECRET>``."""
    if not verify_bearer_secret(authorization, settings.cron_secret):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
