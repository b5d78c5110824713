"""SQLAlchemy-backed store for production deployments.

Implementation notes:
- Each operation runs in its own short session from the injected factory.
- The quota increment is one conditional UPDATE so concurrent requests for the
  same user serialize on the row instead of on application state.
- Driver and connection failures are logged by operation and exception type
  only, never with the statement or its parameters, and re-raised as
  ``StoreUnavailable``.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator

from sqlalchemy import case, delete, select, update
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from zeitgeist.core.errors import DuplicateFavoriteError, StoreUnavailable
from zeitgeist.models.favorite import FavoriteRecord
from zeitgeist.models.history import AdviceHistoryRecord, MonthlyMetricRecord
from zeitgeist.models.user import UserProfileRecord
from zeitgeist.models.vibe import VibeRecord
from zeitgeist.schema.analytics import MonthlyMetric
from zeitgeist.schema.favorite import Favorite, FavoriteMetadata, FavoriteType
from zeitgeist.schema.history import AdviceHistory
from zeitgeist.schema.user import UserProfile
from zeitgeist.schema.vibe import Vibe
from zeitgeist.store.base import Store

logger = logging.getLogger("zeitgeist.store.sql")


def _vibe_values(vibe: Vibe) -> dict:
    payload = vibe.model_dump(mode="json")
    return {
        **payload,
        "timestamp": vibe.timestamp,
        "first_seen": vibe.first_seen,
        "last_seen": vibe.last_seen,
    }


def _profile_values(profile: UserProfile) -> dict:
    payload = profile.model_dump(mode="json")
    return {
        **payload,
        "query_limit": profile.query_limit,
        "created_at": profile.created_at,
        "last_active": profile.last_active,
    }


def _apply_profile(record: UserProfileRecord, profile: UserProfile, values: dict) -> None:
    """Copy profile fields onto a stored row; the counter is only ever clamped, never raised."""
    for name, value in values.items():
        if name != "queries_this_month":
            setattr(record, name, value)
    if profile.query_limit is not None:
        record.queries_this_month = case(
            (UserProfileRecord.queries_this_month > profile.query_limit, profile.query_limit),
            else_=UserProfileRecord.queries_this_month,
        )


def _history_values(entry: AdviceHistory) -> dict:
    payload = entry.model_dump(mode="json")
    return {**payload, "timestamp": entry.timestamp}


def _favorite_from_record(record: FavoriteRecord) -> Favorite:
    metadata = FavoriteMetadata.model_validate(record.metadata_payload) if record.metadata_payload else None
    return Favorite(
        id=record.id,
        user_id=record.user_id,
        type=FavoriteType(record.type),
        reference_id=record.reference_id,
        timestamp=record.timestamp,
        note=record.note,
        metadata=metadata,
    )


class SqlStore(Store):
    """Relational store over an async session factory."""

    backend_name = "sql"

    def __init__(
        self, session_factory: async_sessionmaker[AsyncSession], engine: AsyncEngine | None = None
    ) -> None:
        self._session_factory = session_factory
        self._engine = engine

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_factory() as session:
                yield session
        except (DBAPIError, OSError) as exc:
            logger.error("Store operation %s failed (%s)", operation, type(exc).__name__)
            raise StoreUnavailable(operation) from exc

    async def _upsert(self, session: AsyncSession, model: type, key: object, values: dict) -> None:
        record = await session.get(model, key)
        if record is None:
            session.add(model(**values))
            return
        for name, value in values.items():
            setattr(record, name, value)

    # Vibes
    async def get_vibe(self, vibe_id: str) -> Vibe | None:
        async with self._session("get_vibe") as session:
            record = await session.get(VibeRecord, vibe_id)
            return Vibe.model_validate(record) if record else None

    async def get_recent_vibes(self, limit: int = 50) -> list[Vibe]:
        async with self._session("get_recent_vibes") as session:
            result = await session.execute(
                select(VibeRecord).order_by(VibeRecord.timestamp.desc(), VibeRecord.id.desc()).limit(limit)
            )
            return [Vibe.model_validate(record) for record in result.scalars().all()]

    async def get_all_vibes(self) -> list[Vibe]:
        async with self._session("get_all_vibes") as session:
            result = await session.execute(select(VibeRecord).order_by(VibeRecord.id))
            return [Vibe.model_validate(record) for record in result.scalars().all()]

    async def save_vibe(self, vibe: Vibe) -> Vibe:
        async with self._session("save_vibe") as session:
            await self._upsert(session, VibeRecord, vibe.id, _vibe_values(vibe))
            await session.commit()
        return vibe

    # User profiles
    async def get_user(self, user_id: str) -> UserProfile | None:
        async with self._session("get_user") as session:
            record = await session.get(UserProfileRecord, user_id)
            return UserProfile.model_validate(record) if record else None

    async def save_user(self, profile: UserProfile) -> UserProfile:
        values = _profile_values(profile)
        async with self._session("save_user") as session:
            record = await session.get(UserProfileRecord, profile.id)
            if record is None:
                session.add(UserProfileRecord(**values))
                try:
                    await session.commit()
                except IntegrityError:
                    # A concurrent first write created the row; fall through to the update path.
                    await session.rollback()
                    logger.info("Profile %s was created concurrently; updating instead", profile.id)
                    record = await session.get(UserProfileRecord, profile.id)
                    if record is None:
                        raise
            if record is not None:
                _apply_profile(record, profile, values)
                await session.commit()
            stored = await session.get(UserProfileRecord, profile.id, populate_existing=True)
            return UserProfile.model_validate(stored)

    async def delete_user(self, user_id: str) -> bool:
        async with self._session("delete_user") as session:
            result = await session.execute(delete(UserProfileRecord).where(UserProfileRecord.id == user_id))
            await session.commit()
            return result.rowcount > 0

    async def list_user_ids(self) -> list[str]:
        async with self._session("list_user_ids") as session:
            result = await session.execute(select(UserProfileRecord.id).order_by(UserProfileRecord.id))
            return list(result.scalars().all())

    async def increment_query_count(self, user_id: str) -> int | None:
        async with self._session("increment_query_count") as session:
            result = await session.execute(
                update(UserProfileRecord)
                .where(
                    UserProfileRecord.id == user_id,
                    UserProfileRecord.query_limit.is_not(None),
                    UserProfileRecord.queries_this_month < UserProfileRecord.query_limit,
                )
                .values(
                    queries_this_month=UserProfileRecord.queries_this_month + 1,
                    last_active=datetime.now(timezone.utc),
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                await session.rollback()
                return None
            count = await session.scalar(
                select(UserProfileRecord.queries_this_month).where(UserProfileRecord.id == user_id)
            )
            await session.commit()
            return count

    async def reset_monthly_queries(self) -> int:
        async with self._session("reset_monthly_queries") as session:
            result = await session.execute(
                update(UserProfileRecord).values(queries_this_month=0).execution_options(synchronize_session=False)
            )
            await session.commit()
            return result.rowcount

    # Advice history
    async def save_advice_history(self, entry: AdviceHistory) -> AdviceHistory:
        async with self._session("save_advice_history") as session:
            record = await session.scalar(select(AdviceHistoryRecord).where(AdviceHistoryRecord.id == entry.id))
            values = _history_values(entry)
            if record is None:
                session.add(AdviceHistoryRecord(**values))
            else:
                for name, value in values.items():
                    setattr(record, name, value)
            await session.commit()
        return entry

    async def get_advice_history(self, user_id: str, limit: int = 20, offset: int = 0) -> list[AdviceHistory]:
        async with self._session("get_advice_history") as session:
            result = await session.execute(
                select(AdviceHistoryRecord)
                .where(AdviceHistoryRecord.user_id == user_id)
                .order_by(AdviceHistoryRecord.timestamp.desc(), AdviceHistoryRecord.pk.desc())
                .offset(offset)
                .limit(limit)
            )
            return [AdviceHistory.model_validate(record) for record in result.scalars().all()]

    async def get_advice_history_between(
        self, user_id: str, start: datetime, end: datetime
    ) -> list[AdviceHistory]:
        async with self._session("get_advice_history_between") as session:
            result = await session.execute(
                select(AdviceHistoryRecord)
                .where(
                    AdviceHistoryRecord.user_id == user_id,
                    AdviceHistoryRecord.timestamp >= start,
                    AdviceHistoryRecord.timestamp < end,
                )
                .order_by(AdviceHistoryRecord.timestamp, AdviceHistoryRecord.pk)
            )
            return [AdviceHistory.model_validate(record) for record in result.scalars().all()]

    async def get_advice_history_item(self, entry_id: str) -> AdviceHistory | None:
        async with self._session("get_advice_history_item") as session:
            record = await session.scalar(select(AdviceHistoryRecord).where(AdviceHistoryRecord.id == entry_id))
            return AdviceHistory.model_validate(record) if record else None

    async def delete_advice_history(self, entry_id: str) -> bool:
        async with self._session("delete_advice_history") as session:
            result = await session.execute(delete(AdviceHistoryRecord).where(AdviceHistoryRecord.id == entry_id))
            await session.commit()
            return result.rowcount > 0

    async def delete_all_advice_history(self, user_id: str) -> int:
        async with self._session("delete_all_advice_history") as session:
            result = await session.execute(delete(AdviceHistoryRecord).where(AdviceHistoryRecord.user_id == user_id))
            await session.commit()
            return result.rowcount

    # Favorites
    async def save_favorite(self, favorite: Favorite) -> Favorite:
        async with self._session("save_favorite") as session:
            session.add(
                FavoriteRecord(
                    id=favorite.id,
                    user_id=favorite.user_id,
                    type=favorite.type.value,
                    reference_id=favorite.reference_id,
                    timestamp=favorite.timestamp,
                    note=favorite.note,
                    metadata_payload=favorite.metadata.model_dump(mode="json") if favorite.metadata else None,
                )
            )
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise DuplicateFavoriteError(favorite.type.value, favorite.reference_id) from exc
        return favorite

    async def get_favorites(self, user_id: str, favorite_type: FavoriteType | None = None) -> list[Favorite]:
        async with self._session("get_favorites") as session:
            query = select(FavoriteRecord).where(FavoriteRecord.user_id == user_id)
            if favorite_type:
                query = query.where(FavoriteRecord.type == favorite_type.value)
            result = await session.execute(query.order_by(FavoriteRecord.timestamp.desc(), FavoriteRecord.id))
            return [_favorite_from_record(record) for record in result.scalars().all()]

    async def get_favorite(self, favorite_id: str) -> Favorite | None:
        async with self._session("get_favorite") as session:
            record = await session.get(FavoriteRecord, favorite_id)
            return _favorite_from_record(record) if record else None

    async def find_favorite(
        self, user_id: str, favorite_type: FavoriteType, reference_id: str
    ) -> Favorite | None:
        async with self._session("find_favorite") as session:
            record = await session.scalar(
                select(FavoriteRecord).where(
                    FavoriteRecord.user_id == user_id,
                    FavoriteRecord.type == favorite_type.value,
                    FavoriteRecord.reference_id == reference_id,
                )
            )
            return _favorite_from_record(record) if record else None

    async def delete_favorite(self, favorite_id: str) -> bool:
        async with self._session("delete_favorite") as session:
            result = await session.execute(delete(FavoriteRecord).where(FavoriteRecord.id == favorite_id))
            await session.commit()
            return result.rowcount > 0

    async def delete_all_favorites(self, user_id: str) -> int:
        async with self._session("delete_all_favorites") as session:
            result = await session.execute(delete(FavoriteRecord).where(FavoriteRecord.user_id == user_id))
            await session.commit()
            return result.rowcount

    # Monthly metrics
    async def save_monthly_metric(self, metric: MonthlyMetric) -> MonthlyMetric:
        async with self._session("save_monthly_metric") as session:
            record = await session.scalar(
                select(MonthlyMetricRecord).where(
                    MonthlyMetricRecord.user_id == metric.user_id,
                    MonthlyMetricRecord.month == metric.month,
                )
            )
            values = metric.model_dump(mode="json")
            if record is None:
                session.add(MonthlyMetricRecord(**values))
            else:
                for name, value in values.items():
                    setattr(record, name, value)
            await session.commit()
        return metric

    async def get_monthly_metric(self, user_id: str, month: str) -> MonthlyMetric | None:
        async with self._session("get_monthly_metric") as session:
            record = await session.scalar(
                select(MonthlyMetricRecord).where(
                    MonthlyMetricRecord.user_id == user_id,
                    MonthlyMetricRecord.month == month,
                )
            )
            return MonthlyMetric.model_validate(record, from_attributes=True) if record else None

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
