"""Dictionary-backed store used by tests and single-process development."""

from __future__ import annotations

import itertools
import threading
from datetime import datetime, timezone

from zeitgeist.core.errors import DuplicateFavoriteError
from zeitgeist.schema.analytics import MonthlyMetric
from zeitgeist.schema.favorite import Favorite, FavoriteType
from zeitgeist.schema.history import AdviceHistory
from zeitgeist.schema.user import UserProfile
from zeitgeist.schema.vibe import Vibe
from zeitgeist.store.base import Store


class MemoryStore(Store):
    """In-process store; all mutations happen under one lock and return deep copies."""

    backend_name = "memory"

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sequence = itertools.count()
        self._vibes: dict[str, Vibe] = {}
        self._users: dict[str, UserProfile] = {}
        self._history: dict[str, tuple[int, AdviceHistory]] = {}
        self._favorites: dict[str, tuple[int, Favorite]] = {}
        self._metrics: dict[tuple[str, str], MonthlyMetric] = {}

    async def get_vibe(self, vibe_id: str) -> Vibe | None:
        vibe = self._vibes.get(vibe_id)
        return vibe.model_copy(deep=True) if vibe else None

    async def get_recent_vibes(self, limit: int = 50) -> list[Vibe]:
        ordered = sorted(self._vibes.values(), key=lambda vibe: (vibe.timestamp, vibe.id), reverse=True)
        return [vibe.model_copy(deep=True) for vibe in ordered[: max(0, limit)]]

    async def get_all_vibes(self) -> list[Vibe]:
        return [vibe.model_copy(deep=True) for vibe in self._vibes.values()]

    async def save_vibe(self, vibe: Vibe) -> Vibe:
        with self._lock:
            self._vibes[vibe.id] = vibe.model_copy(deep=True)
        return vibe.model_copy(deep=True)

    async def get_user(self, user_id: str) -> UserProfile | None:
        profile = self._users.get(user_id)
        return profile.model_copy(deep=True) if profile else None

    async def save_user(self, profile: UserProfile) -> UserProfile:
        with self._lock:
            existing = self._users.get(profile.id)
            if existing is not None:
                used = existing.queries_this_month
                if profile.query_limit is not None:
                    used = min(used, profile.query_limit)
                profile = profile.model_copy(update={"queries_this_month": used})
            self._users[profile.id] = profile.model_copy(deep=True)
        return profile.model_copy(deep=True)

    async def delete_user(self, user_id: str) -> bool:
        with self._lock:
            return self._users.pop(user_id, None) is not None

    async def list_user_ids(self) -> list[str]:
        return sorted(self._users)

    async def increment_query_count(self, user_id: str) -> int | None:
        with self._lock:
            profile = self._users.get(user_id)
            if profile is None or profile.query_limit is None:
                return None
            if profile.queries_this_month >= profile.query_limit:
                return None
            updated = profile.model_copy(
                update={
                    "queries_this_month": profile.queries_this_month + 1,
                    "last_active": datetime.now(timezone.utc),
                }
            )
            self._users[user_id] = updated
            return updated.queries_this_month

    async def reset_monthly_queries(self) -> int:
        with self._lock:
            for user_id, profile in self._users.items():
                self._users[user_id] = profile.model_copy(update={"queries_this_month": 0})
            return len(self._users)

    async def save_advice_history(self, entry: AdviceHistory) -> AdviceHistory:
        with self._lock:
            existing = self._history.get(entry.id)
            sequence = existing[0] if existing else next(self._sequence)
            self._history[entry.id] = (sequence, entry.model_copy(deep=True))
        return entry.model_copy(deep=True)

    def _user_history(self, user_id: str) -> list[tuple[int, AdviceHistory]]:
        return [item for item in self._history.values() if item[1].user_id == user_id]

    async def get_advice_history(self, user_id: str, limit: int = 20, offset: int = 0) -> list[AdviceHistory]:
        ordered = sorted(
            self._user_history(user_id),
            key=lambda item: (item[1].timestamp, item[0]),
            reverse=True,
        )
        window = ordered[max(0, offset) : max(0, offset) + max(0, limit)]
        return [entry.model_copy(deep=True) for _, entry in window]

    async def get_advice_history_between(
        self, user_id: str, start: datetime, end: datetime
    ) -> list[AdviceHistory]:
        matching = [
            item for item in self._user_history(user_id) if start <= item[1].timestamp < end
        ]
        matching.sort(key=lambda item: (item[1].timestamp, item[0]))
        return [entry.model_copy(deep=True) for _, entry in matching]

    async def get_advice_history_item(self, entry_id: str) -> AdviceHistory | None:
        item = self._history.get(entry_id)
        return item[1].model_copy(deep=True) if item else None

    async def delete_advice_history(self, entry_id: str) -> bool:
        with self._lock:
            return self._history.pop(entry_id, None) is not None

    async def delete_all_advice_history(self, user_id: str) -> int:
        with self._lock:
            doomed = [entry_id for entry_id, item in self._history.items() if item[1].user_id == user_id]
            for entry_id in doomed:
                del self._history[entry_id]
            return len(doomed)

    async def save_favorite(self, favorite: Favorite) -> Favorite:
        with self._lock:
            for _, existing in self._favorites.values():
                if (
                    existing.user_id == favorite.user_id
                    and existing.type == favorite.type
                    and existing.reference_id == favorite.reference_id
                    and existing.id != favorite.id
                ):
                    raise DuplicateFavoriteError(favorite.type.value, favorite.reference_id)
            current = self._favorites.get(favorite.id)
            sequence = current[0] if current else next(self._sequence)
            self._favorites[favorite.id] = (sequence, favorite.model_copy(deep=True))
        return favorite.model_copy(deep=True)

    async def get_favorites(self, user_id: str, favorite_type: FavoriteType | None = None) -> list[Favorite]:
        matching = [
            item
            for item in self._favorites.values()
            if item[1].user_id == user_id and (favorite_type is None or item[1].type == favorite_type)
        ]
        matching.sort(key=lambda item: (item[1].timestamp, item[0]), reverse=True)
        return [favorite.model_copy(deep=True) for _, favorite in matching]

    async def get_favorite(self, favorite_id: str) -> Favorite | None:
        item = self._favorites.get(favorite_id)
        return item[1].model_copy(deep=True) if item else None

    async def find_favorite(
        self, user_id: str, favorite_type: FavoriteType, reference_id: str
    ) -> Favorite | None:
        for _, favorite in self._favorites.values():
            if (
                favorite.user_id == user_id
                and favorite.type == favorite_type
                and favorite.reference_id == reference_id
            ):
                return favorite.model_copy(deep=True)
        return None

    async def delete_favorite(self, favorite_id: str) -> bool:
        with self._lock:
            return self._favorites.pop(favorite_id, None) is not None

    async def delete_all_favorites(self, user_id: str) -> int:
        with self._lock:
            doomed = [fav_id for fav_id, item in self._favorites.items() if item[1].user_id == user_id]
            for fav_id in doomed:
                del self._favorites[fav_id]
            return len(doomed)

    async def save_monthly_metric(self, metric: MonthlyMetric) -> MonthlyMetric:
        with self._lock:
            self._metrics[(metric.user_id, metric.month)] = metric.model_copy(deep=True)
        return metric.model_copy(deep=True)

    async def get_monthly_metric(self, user_id: str, month: str) -> MonthlyMetric | None:
        metric = self._metrics.get((user_id, month))
        return metric.model_copy(deep=True) if metric else None
