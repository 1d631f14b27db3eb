"""
Tests for the best-effort billing notification hook.
"""
from unittest.mock import MagicMock, patch

import requests

from app.services.notification_service import send_billing_notification


def test_unconfigured_hook_is_skipped():
    with patch("app.services.notification_service.requests.post") as post:
        assert send_billing_notification("subscription", {"userId": "u-1"}) is False

    post.assert_not_called()


def test_subscription_notification_payload():
    with patch("app.services.notification_service.requests.post", return_value=MagicMock(status_code=200)) as post:
        sent = send_billing_notification("subscription", {"userId": "u-1", "plan": "pro"}, url="http://hooks.test")

    assert sent is True
    body = post.call_args.kwargs["json"]
    assert body["type"] == "subscription"
    assert body["plan"] == "pro"
    assert "subscribedAt" in body
    assert post.call_args.kwargs["timeout"] == 5


def test_cancellation_notification_timestamp():
    with patch("app.services.notification_service.requests.post", return_value=MagicMock(status_code=200)) as post:
        send_billing_notification("cancellation", {"userId": "u-1"}, url="http://hooks.test")

    assert "cancelledAt" in post.call_args.kwargs["json"]


def test_failures_are_swallowed():
    with patch("app.services.notification_service.requests.post", side_effect=requests.exceptions.Timeout("slow")):
        assert send_billing_notification("subscription", {"userId": "u-1"}, url="http://hooks.test") is False


def test_http_error_status_is_a_failure():
    response = MagicMock()
    response.raise_for_status.side_effect = requests.exceptions.HTTPError("502")

    with patch("app.services.notification_service.requests.post", return_value=response):
        assert send_billing_notification("cancellation", {"userId": "u-1"}, url="http://hooks.test") is False
