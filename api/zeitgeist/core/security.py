"""Token decoding, secret comparison, and quota reset clock helpers.

Invariants:
- Secret comparisons always go through ``secure_compare``.
- Quota reset instants are derived from the server clock only.
"""

import hmac
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo

from jose import JWTError, jwt

from .config import settings


def create_access_token(subject: str, expires_delta: timedelta = timedelta(hours=1)) -> str:
    """Create a signed JWT for the given subject (used by tooling and tests)."""
    now = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "sub": subject,
        "type": "access",
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """Decode a JWT and return its payload if valid."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def secure_compare(provided: str | None, expected: str | None) -> bool:
    """Constant-time string comparison; missing values never match."""
    if not provided or not expected:
        return False
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


def verify_bearer_secret(authorization: str | None, expected: str | None) -> bool:
    """Check an ``Authorization: Bearer <secret>`` header against a shared secret."""
    if not authorization:
        return False
    scheme, _, credential = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return False
    return secure_compare(credential.strip(), expected)


def server_now() -> datetime:
    """Current server time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def next_quota_reset(now: datetime | None = None) -> datetime:
    """Return the first instant of next calendar month in the quota time zone.

    ``now`` exists for tests and scheduled jobs; request handlers never pass
    client-supplied values here.
    """
    zone = ZoneInfo(settings.quota_timezone)
    current = (now or server_now()).astimezone(zone)
    if current.month == 12:
        boundary = datetime(current.year + 1, 1, 1, tzinfo=zone)
    else:
        boundary = datetime(current.year, current.month + 1, 1, tzinfo=zone)
    return boundary.astimezone(timezone.utc)
