"""
Tests for the in-memory credential rate limiter.
"""
from unittest.mock import MagicMock, patch

import pytest
from fastapi import HTTPException

from app.core.rate_limit import check_rate_limit, rate_limit_store


def _request(ip):
    request = MagicMock()
    request.headers = {}
    request.client.host = ip
    return request


@pytest.fixture(autouse=True)
def empty_store():
    rate_limit_store.clear()
    yield
    rate_limit_store.clear()


def test_limit_applies_per_client():
    with patch("app.core.rate_limit.time.time", return_value=1000.0):
        for _ in range(2):
            check_rate_limit(_request("10.0.0.1"), "auth", max_requests=2, window_seconds=60)
        with pytest.raises(HTTPException) as exc:
            check_rate_limit(_request("10.0.0.1"), "auth", max_requests=2, window_seconds=60)
        check_rate_limit(_request("10.0.0.2"), "auth", max_requests=2, window_seconds=60)

    assert exc.value.status_code == 429


def test_idle_clients_are_evicted():
    with patch("app.core.rate_limit.time.time", return_value=1000.0):
        for i in range(50):
            check_rate_limit(_request(f"10.0.1.{i}"), "auth", window_seconds=60)
    assert len(rate_limit_store) == 50

    with patch("app.core.rate_limit.time.time", return_value=1061.0):
        check_rate_limit(_request("10.0.2.1"), "auth", window_seconds=60)

    assert list(rate_limit_store) == ["auth:10.0.2.1"]


def test_other_buckets_are_left_alone():
    with patch("app.core.rate_limit.time.time", return_value=1000.0):
        check_rate_limit(_request("10.0.0.1"), "signup", window_seconds=3600)

    with patch("app.core.rate_limit.time.time", return_value=1100.0):
        check_rate_limit(_request("10.0.0.1"), "auth", window_seconds=60)

    assert set(rate_limit_store) == {"signup:10.0.0.1", "auth:10.0.0.1"}


def test_window_expiry_resets_count():
    with patch("app.core.rate_limit.time.time", return_value=1000.0):
        check_rate_limit(_request("10.0.0.1"), "auth", max_requests=1, window_seconds=60)

    with patch("app.core.rate_limit.time.time", return_value=1061.0):
        check_rate_limit(_request("10.0.0.1"), "auth", max_requests=1, window_seconds=60)

    assert rate_limit_store["auth:10.0.0.1"] == [1061.0]
