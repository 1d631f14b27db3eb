"""
Stripe service: thin wrapper over the Stripe SDK calls the billing flow needs.

SDK failures are logged here and re-raised as ExternalServiceError so the
subscription service never handles raw Stripe exceptions, except for the
"missing customer" case which is reported as a value.
"""
import logging
from typing import Optional, List

import stripe

from app.core.config import STRIPE_SECRET_KEY, STRIPE_WEBHOOK_SECRET
from app.core.errors import ExternalServiceError

logger = logging.getLogger(__name__)

# Initialize Stripe client
if STRIPE_SECRET_KEY:
    stripe.api_key = STRIPE_SECRET_KEY
else:
    logger.warning("STRIPE_SECRET_KEY not configured - Stripe features disabled")


def customer_exists(customer_id: str) -> bool:
    """
    Check whether a stored customer reference still resolves on Stripe.

    Returns False for a missing or deleted customer; other errors raise.
    """
    try:
        customer = stripe.Customer.retrieve(customer_id)
    except stripe.error.InvalidRequestError as e:
        if getattr(e, "code", None) == "resource_missing":
            logger.warning(f"Stripe customer missing: customer_id={customer_id}")
            return False
        logger.error(f"Stripe error retrieving customer {customer_id}: {e}")
        raise ExternalServiceError("Failed to retrieve billing customer") from e
    except stripe.error.StripeError as e:
        logger.error(f"Stripe error retrieving customer {customer_id}: {e}")
        raise ExternalServiceError("Failed to retrieve billing customer") from e

    if customer.get("deleted"):
        logger.warning(f"Stripe customer deleted: customer_id={customer_id}")
        return False
    return True


def create_customer(email: str, user_id: str, name: Optional[str] = None) -> str:
    """Create a Stripe customer and return its ID."""
    try:
        customer = stripe.Customer.create(
            email=email,
            name=name or None,
            metadata={"userId": user_id},
        )
    except stripe.error.StripeError as e:
        logger.error(f"Stripe error creating customer for user_id={user_id}: {e}")
        raise ExternalServiceError("Failed to create billing customer") from e

    logger.info(f"Created Stripe customer for user_id={user_id}: {customer.id}")
    return customer.id


def create_checkout_session(
    customer_id: str,
    price_id: str,
    metadata: dict,
    success_url: str,
    cancel_url: str,
):
    """
    Create a subscription-mode Checkout session.

    The metadata is attached to both the session and the subscription it
    creates, so later subscription events can be attributed to the user.
    """
    try:
        session = stripe.checkout.Session.create(
            customer=customer_id,
            payment_method_types=["card"],
            mode="subscription",
            line_items=[{
                "price": price_id,
                "quantity": 1,
            }],
            success_url=success_url,
            cancel_url=cancel_url,
            metadata=metadata,
            subscription_data={"metadata": metadata},
        )
    except stripe.error.StripeError as e:
        logger.error(f"Stripe error creating checkout session: {e}")
        raise ExternalServiceError("Failed to create checkout session") from e

    logger.info(f"Created checkout session: session_id={session.id}, user_id={metadata.get('userId')}")
    return session


def retrieve_checkout_session(session_id: str):
    try:
        return stripe.checkout.Session.retrieve(session_id)
    except stripe.error.InvalidRequestError as e:
        if getattr(e, "code", None) == "resource_missing":
            return None
        logger.error(f"Stripe error retrieving session {session_id}: {e}")
        raise ExternalServiceError("Failed to verify payment") from e
    except stripe.error.StripeError as e:
        logger.error(f"Stripe error retrieving session {session_id}: {e}")
        raise ExternalServiceError("Failed to verify payment") from e


def list_active_subscriptions(customer_id: str, limit: int = 1) -> List:
    try:
        subscriptions = stripe.Subscription.list(customer=customer_id, status="active", limit=limit)
    except stripe.error.StripeError as e:
        logger.error(f"Stripe error listing subscriptions for {customer_id}: {e}")
        raise ExternalServiceError("Failed to load subscriptions") from e
    return list(subscriptions.data)


def cancel_subscription(subscription_id: str):
    """Cancel immediately (not at period end)."""
    try:
        subscription = stripe.Subscription.cancel(subscription_id)
    except stripe.error.StripeError as e:
        logger.error(f"Stripe error canceling subscription {subscription_id}: {e}")
        raise ExternalServiceError("Failed to cancel subscription") from e

    logger.info(f"Canceled Stripe subscription {subscription_id}: status={subscription.get('status')}")
    return subscription


def retrieve_price(price_id: str):
    try:
        return stripe.Price.retrieve(price_id)
    except stripe.error.StripeError as e:
        logger.error(f"Stripe error retrieving price {price_id}: {e}")
        raise ExternalServiceError("Failed to load price") from e


def verify_webhook(request_body: bytes, signature: Optional[str]):
    """
    Verify and parse a Stripe webhook event from the raw request body.

    Raises:
        ValueError: If the payload or signature is invalid
    """
    if not STRIPE_WEBHOOK_SECRET:
        raise ValueError("STRIPE_WEBHOOK_SECRET not configured")
    if not signature:
        raise ValueError("Missing Stripe-Signature header")

    try:
        event = stripe.Webhook.construct_event(
            request_body, signature, STRIPE_WEBHOOK_SECRET
        )
    except ValueError as e:
        logger.error(f"Invalid webhook payload: {e}")
        raise ValueError(f"Invalid webhook payload: {e}")
    except stripe.error.SignatureVerificationError as e:
        logger.error(f"Webhook signature verification failed: {e}")
        raise ValueError(f"Invalid signature: {e}")

    logger.info(f"Verified webhook event: {event['type']}, id={event['id']}")
    return event
