"""Persistence contract shared by the in-memory and relational backends.

Invariants:
- Every method is a coroutine; callers treat each call as an I/O suspension point.
- Backends return copies; mutating a returned record never changes stored state.
- ``increment_query_count`` is the only compare-and-increment; it never lets
  ``queries_this_month`` exceed ``query_limit``.
- Backend failures surface as ``StoreUnavailable``; nothing is retried here.
"""

from __future__ import annotations

from datetime import datetime

from zeitgeist.schema.analytics import MonthlyMetric
from zeitgeist.schema.favorite import Favorite, FavoriteType
from zeitgeist.schema.history import AdviceHistory
from zeitgeist.schema.user import UserProfile
from zeitgeist.schema.vibe import Vibe


class Store:
    """Store interface; each coroutine raises ``NotImplementedError`` until a backend overrides it."""

    backend_name: str = "base"

    # Vibes
    async def get_vibe(self, vibe_id: str) -> Vibe | None:
        raise NotImplementedError

    async def get_recent_vibes(self, limit: int = 50) -> list[Vibe]:
        """Return vibes ordered by ``timestamp`` descending."""
        raise NotImplementedError

    async def get_all_vibes(self) -> list[Vibe]:
        raise NotImplementedError

    async def save_vibe(self, vibe: Vibe) -> Vibe:
        """Insert or replace a vibe by id."""
        raise NotImplementedError

    # User profiles
    async def get_user(self, user_id: str) -> UserProfile | None:
        raise NotImplementedError

    async def save_user(self, profile: UserProfile) -> UserProfile:
        """Insert or replace a profile by id and return the stored version.

        For existing profiles the stored ``queries_this_month`` wins (clamped to
        the new tier limit) so a profile write never undoes a concurrent increment.
        """
        raise NotImplementedError

    async def delete_user(self, user_id: str) -> bool:
        raise NotImplementedError

    async def list_user_ids(self) -> list[str]:
        raise NotImplementedError

    async def increment_query_count(self, user_id: str) -> int | None:
        """Atomically add one query if the user is under a finite limit.

        Returns the new count, or ``None`` when the user is missing, unlimited,
        or already at the limit.
        """
        raise NotImplementedError

    async def reset_monthly_queries(self) -> int:
        """Zero every counter and return how many profiles were touched."""
        raise NotImplementedError

    # Advice history
    async def save_advice_history(self, entry: AdviceHistory) -> AdviceHistory:
        """Insert or replace a history entry by id."""
        raise NotImplementedError

    async def get_advice_history(self, user_id: str, limit: int = 20, offset: int = 0) -> list[AdviceHistory]:
        """Return the user's entries newest-first, ties broken by insertion order."""
        raise NotImplementedError

    async def get_advice_history_between(
        self, user_id: str, start: datetime, end: datetime
    ) -> list[AdviceHistory]:
        """Return the user's entries with ``start <= timestamp < end``, oldest first."""
        raise NotImplementedError

    async def get_advice_history_item(self, entry_id: str) -> AdviceHistory | None:
        raise NotImplementedError

    async def delete_advice_history(self, entry_id: str) -> bool:
        raise NotImplementedError

    async def delete_all_advice_history(self, user_id: str) -> int:
        raise NotImplementedError

    # Favorites
    async def save_favorite(self, favorite: Favorite) -> Favorite:
        """Insert a favorite; raises ``DuplicateFavoriteError`` on a repeated tuple."""
        raise NotImplementedError

    async def get_favorites(self, user_id: str, favorite_type: FavoriteType | None = None) -> list[Favorite]:
        """Return the user's favorites newest-first."""
        raise NotImplementedError

    async def get_favorite(self, favorite_id: str) -> Favorite | None:
        raise NotImplementedError

    async def find_favorite(
        self, user_id: str, favorite_type: FavoriteType, reference_id: str
    ) -> Favorite | None:
        raise NotImplementedError

    async def delete_favorite(self, favorite_id: str) -> bool:
        raise NotImplementedError

    async def delete_all_favorites(self, user_id: str) -> int:
        raise NotImplementedError

    # Monthly metrics
    async def save_monthly_metric(self, metric: MonthlyMetric) -> MonthlyMetric:
        """Insert or replace the metric for ``(user_id, month)``."""
        raise NotImplementedError

    async def get_monthly_metric(self, user_id: str, month: str) -> MonthlyMetric | None:
        raise NotImplementedError

    async def close(self) -> None:
        """Release backend resources."""
        return None
