from __future__ import annotations

from datetime import datetime, timezone

import pytest

from zeitgeist.core.errors import ValidationError
from zeitgeist.utils.datetime import month_bounds, month_key, parse_month_key, previous_month_key


@pytest.mark.parametrize("value", ["2025-6", "2025-13", "2025-00", "25-06", "2025/06", "2025-06\n", "", None])
def test_malformed_month_keys_are_rejected(value):
    with pytest.raises(ValidationError) as excinfo:
        parse_month_key(value)
    assert excinfo.value.field == "month"


def test_month_bounds_cover_december_rollover():
    start, end = month_bounds("2024-12")
    assert start == datetime(2024, 12, 1, tzinfo=timezone.utc)
    assert end == datetime(2025, 1, 1, tzinfo=timezone.utc)


def test_previous_month_wraps_year():
    assert previous_month_key("2025-01") == "2024-12"
    assert previous_month_key("2025-07") == "2025-06"


def test_month_key_normalizes_to_utc():
    assert month_key(datetime(2025, 3, 31, 23, 30)) == "2025-03"
    assert parse_month_key("2025-03") == (2025, 3)
