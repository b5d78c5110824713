from __future__ import annotations

from datetime import timedelta

import pytest
from pydantic import ValidationError as PydanticValidationError

from zeitgeist.core.config import Settings
from zeitgeist.core.security import create_access_token, decode_token, secure_compare, verify_bearer_secret


def test_secure_compare_rejects_missing_values():
    assert secure_compare("abc", "abc") is True
    assert secure_compare("abc", "abd") is False
    assert secure_compare(None, "abc") is False
    assert secure_compare("", "") is False
    assert secure_compare("abc", None) is False


def test_verify_bearer_secret_requires_scheme():
    assert verify_bearer_secret("Bearer s3cret", "s3cret") is True
    assert verify_bearer_secret("bearer s3cret", "s3cret") is True
    assert verify_bearer_secret("Basic s3cret", "s3cret") is False
    assert verify_bearer_secret("s3cret", "s3cret") is False
    assert verify_bearer_secret(None, "s3cret") is False
    assert verify_bearer_secret("Bearer s3cret", None) is False


def test_access_token_round_trips_subject():
    payload = decode_token(create_access_token("user-42"))
    assert payload["sub"] == "user-42"
    assert payload["type"] == "access"


def test_expired_token_is_rejected():
    assert decode_token(create_access_token("user-42", expires_delta=timedelta(seconds=-5))) is None
    assert decode_token("not-a-token") is None


def test_unknown_quota_timezone_is_rejected():
    with pytest.raises(PydanticValidationError):
        Settings(quota_timezone="Mars/Olympus_Mons")
    assert Settings(quota_timezone="Europe/Berlin").quota_timezone == "Europe/Berlin"
