"""Typed error taxonomy shared by services and the HTTP layer.

Invariants:
- Every error maps to exactly one HTTP status via ``status_code``.
- ``public_detail`` never carries store-specific or internal exception text.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any


class ZeitgeistError(Exception):
    """Base class for domain errors surfaced to callers."""

    status_code = 500
    code = "internal_error"

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(message)
        self.message = message

    def public_detail(self) -> dict[str, Any]:
        return {"error": self.code, "message": self.message}


class ValidationError(ZeitgeistError):
    """Malformed scenario, profile, or query input."""

    status_code = 400
    code = "validation_error"

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"{field}: {reason}")
        self.field = field
        self.reason = reason

    def public_detail(self) -> dict[str, Any]:
        return {"error": self.code, "message": self.message, "field": self.field, "reason": self.reason}


class QuotaExceeded(ZeitgeistError):
    """Monthly query allowance is used up for the caller's tier."""

    status_code = 429
    code = "rate_limit_exceeded"

    def __init__(self, limit: int, reset_date: datetime, remaining: int = 0) -> None:
        message = (
            f"You have used all {limit} queries for this month. "
            f"Limit resets on {reset_date.date().isoformat()}."
        )
        super().__init__(message)
        self.limit = limit
        self.remaining = max(0, remaining)
        self.reset_date = reset_date

    def public_detail(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "limit": self.limit,
            "remaining": self.remaining,
            "reset_date": self.reset_date.isoformat(),
        }


class AuthorizationError(ZeitgeistError):
    """Caller does not own the record it tried to read or mutate."""

    status_code = 403
    code = "forbidden"

    def __init__(self, message: str = "You do not have access to this resource") -> None:
        super().__init__(message)


class NotFoundError(ZeitgeistError):
    """Referenced vibe, history entry, favorite, or user does not exist."""

    status_code = 404
    code = "not_found"

    def __init__(self, resource: str, identifier: str | None = None) -> None:
        message = f"{resource} not found" if not identifier else f"{resource} '{identifier}' not found"
        super().__init__(message)
        self.resource = resource
        self.identifier = identifier


class DuplicateFavoriteError(ZeitgeistError):
    """The (user, type, reference) favorite already exists."""

    status_code = 409
    code = "already_favorited"

    def __init__(self, favorite_type: str, reference_id: str) -> None:
        super().__init__(f"{favorite_type} '{reference_id}' is already favorited")
        self.favorite_type = favorite_type
        self.reference_id = reference_id


class StoreUnavailable(ZeitgeistError):
    """The persistence backend failed or timed out."""

    status_code = 503
    code = "store_unavailable"

    def __init__(self, operation: str) -> None:
        super().__init__("Storage is temporarily unavailable")
        self.operation = operation
