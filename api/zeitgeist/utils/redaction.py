"""Redaction helpers for log lines and diagnostic payloads."""

from __future__ import annotations

import re
from typing import Iterable

_URL_USERINFO_RE = re.compile(r"([a-z][a-z0-9+.-]*://)([^@/]+)@", re.IGNORECASE)
_QUERY_SECRET_RE = re.compile(
    r"(?i)(token|secret|password|cron_secret|jwt_secret_key|access_token)=([^&\s]+)"
)
_BEARER_RE = re.compile(r"(?i)(bearer\s+)([A-Za-z0-9._~+/=-]+)")
_JWT_RE = re.compile(r"\beyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]*")

REDACTED = "***"


def redact_secrets(text: str, known_values: Iterable[str | None] = ()) -> str:
    """Mask DSN credentials, bearer tokens, JWTs, and any of ``known_values``."""
    if not text:
        return text
    redacted = _URL_USERINFO_RE.sub(rf"\1{REDACTED}@", text)
    redacted = _QUERY_SECRET_RE.sub(rf"\1={REDACTED}", redacted)
    redacted = _BEARER_RE.sub(rf"\1{REDACTED}", redacted)
    redacted = _JWT_RE.sub(REDACTED, redacted)
    for value in known_values:
        if value and len(value) >= 4:
            redacted = redacted.replace(value, REDACTED)
    return redacted
