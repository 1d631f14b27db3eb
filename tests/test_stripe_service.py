"""
Tests for the Stripe SDK wrapper: missing-customer detection and webhook checks.
"""
from unittest.mock import MagicMock, patch

import pytest
import stripe

from app.core.errors import ExternalServiceError
from app.services import stripe_service


def test_customer_exists_for_live_customer():
    with patch("stripe.Customer.retrieve", return_value={"id": "cus_1"}):
        assert stripe_service.customer_exists("cus_1") is True


def test_customer_missing_is_reported_as_false():
    error = stripe.error.InvalidRequestError("No such customer: 'cus_gone'", "id", code="resource_missing")

    with patch("stripe.Customer.retrieve", side_effect=error):
        assert stripe_service.customer_exists("cus_gone") is False


def test_deleted_customer_is_reported_as_false():
    with patch("stripe.Customer.retrieve", return_value={"id": "cus_1", "deleted": True}):
        assert stripe_service.customer_exists("cus_1") is False


def test_other_stripe_errors_propagate():
    with patch("stripe.Customer.retrieve", side_effect=stripe.error.APIConnectionError("network down")):
        with pytest.raises(ExternalServiceError):
            stripe_service.customer_exists("cus_1")


def test_checkout_session_carries_metadata_on_subscription():
    metadata = {"userId": "u-1", "plan": "pro", "email": "a@example.com", "displayName": ""}

    with patch("stripe.checkout.Session.create", return_value=MagicMock(id="cs_1")) as create:
        stripe_service.create_checkout_session("cus_1", "price_pro_usd", metadata, "http://ok", "http://cancel")

    kwargs = create.call_args.kwargs
    assert kwargs["mode"] == "subscription"
    assert kwargs["metadata"] == metadata
    assert kwargs["subscription_data"] == {"metadata": metadata}


def test_missing_checkout_session_returns_none():
    error = stripe.error.InvalidRequestError("No such checkout.session", "id", code="resource_missing")

    with patch("stripe.checkout.Session.retrieve", side_effect=error):
        assert stripe_service.retrieve_checkout_session("cs_missing") is None


def test_verify_webhook_requires_signature():
    with pytest.raises(ValueError):
        stripe_service.verify_webhook(b"{}", None)


def test_verify_webhook_rejects_bad_signature():
    with pytest.raises(ValueError):
        stripe_service.verify_webhook(b'{"id": "evt_1"}', "t=1700000000,v1=bad")
