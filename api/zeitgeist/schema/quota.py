"""Quota snapshot returned by check-and-consume and peek."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from zeitgeist.schema.user import Tier


class RateLimitInfo(BaseModel):
    """Quota state for one user; ``limit``/``remaining`` are ``None`` when unlimited."""
    allowed: bool
    tier: Tier
    used: int = Field(ge=0)
    limit: int | None = None
    remaining: int | None = Field(default=None, ge=0)
    reset_date: datetime

    @property
    def unlimited(self) -> bool:
        return self.limit is None
