"""Favorite schemas for bookmarked vibes and advice."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field

from zeitgeist.schema.base import ORMModel


class FavoriteType(str, Enum):
    VIBE = "vibe"
    ADVICE = "advice"


class FavoriteMetadata(BaseModel):
    """Denormalized display fields captured when the favorite was created."""
    vibe_name: str | None = None
    scenario_description: str | None = None


class Favorite(ORMModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    type: FavoriteType
    reference_id: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    note: str | None = None
    metadata: FavoriteMetadata | None = None


class FavoriteCreate(BaseModel):
    type: FavoriteType
    reference_id: str = Field(min_length=1, max_length=255)
    note: str | None = Field(default=None, max_length=500)


class FavoriteStatus(BaseModel):
    favorited: bool
    favorite_id: str | None = None
