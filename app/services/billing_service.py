"""
Billing service: keeps User.subscription in step with Stripe.

Three input channels drive the subscription state:

- checkout creation and verification (``start_checkout``, ``verify_checkout``)
- asynchronous webhook events (``process_event``)
- user-initiated cancellation (``cancel_subscription``)

No delivery order is assumed between channels. Every transition writes the
complete subscription state in a single commit (see crud.write_subscription),
so replays and concurrent duplicates converge to the same record.
"""
import logging
from typing import Optional, Dict, Any

from sqlalchemy.orm import Session

from app.core import config
from app.core.errors import (
    ExternalServiceError,
    InvalidPlanError,
    NoActiveSubscriptionError,
    NotFoundError,
    OrphanEventError,
    PriceNotFoundError,
    ValidationError,
)
from app.db import crud
from app.db.models.user import User, SubscriptionStatus, Plan
from app.services import stripe_service
from app.services.notification_service import send_billing_notification

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "USD"

# Stripe subscription statuses that still grant the paid plan
ACTIVE_PROVIDER_STATUSES = {"active", "trialing", "past_due"}
# Statuses after which the subscription will never bill again
TERMINAL_PROVIDER_STATUSES = {"canceled", "unpaid", "incomplete_expired"}


# ============================================
# Price table
# ============================================

def resolve_price_id(plan: Optional[str], currency: Optional[str]) -> str:
    """
    Look up the Stripe price for plan x currency.

    Raises:
        InvalidPlanError: Unknown plan
        PriceNotFoundError: Known plan without a price in that currency
    """
    plan_key = (plan or "").strip().lower()
    currency_key = (currency or DEFAULT_CURRENCY).strip().upper()

    if plan_key not in config.PRODUCT_PRICES:
        raise InvalidPlanError("Invalid subscription plan")

    price_id = config.PRODUCT_PRICES[plan_key].get(currency_key)
    if not price_id:
        raise PriceNotFoundError(
            f"Price ID not found for plan: {plan_key} and currency: {currency_key}"
        )
    return price_id


def get_plan_from_price_id(price_id: Optional[str]) -> Optional[str]:
    """Reverse lookup used when a subscription event carries no plan metadata."""
    if not price_id:
        return None
    for plan, prices in config.PRODUCT_PRICES.items():
        if price_id in prices.values():
            return plan
    return None


def list_plans(currency: Optional[str] = None) -> Dict[str, Dict[str, Any]]:
    """
    Available plans with their live Stripe price for one currency.

    Plans without a price in that currency, or whose price fails to load,
    are left out.
    """
    currency_key = (currency or DEFAULT_CURRENCY).strip().upper()
    plans = {}
    for plan, prices in config.PRODUCT_PRICES.items():
        price_id = prices.get(currency_key)
        if not price_id:
            continue
        try:
            price = stripe_service.retrieve_price(price_id)
        except ExternalServiceError:
            logger.error(f"Skipping plan {plan} ({currency_key}): price {price_id} unavailable")
            continue
        plans[plan] = {
            "id": price["id"],
            "name": plan.capitalize(),
            "amount": price.get("unit_amount"),
            "currency": price.get("currency"),
        }
    return plans


# ============================================
# Checkout
# ============================================

def ensure_billing_customer(db: Session, user: User) -> str:
    """
    Return a Stripe customer ID for the user that is known to resolve.

    A stored reference Stripe no longer knows about is cleared and replaced,
    and the new reference is persisted before it is used.
    """
    customer_ref = user.billing_customer_ref

    if customer_ref and not stripe_service.customer_exists(customer_ref):
        logger.warning(f"Stale billing reference for user_id={user.id}: {customer_ref}, recreating")
        crud.set_billing_customer_ref(db, user, None)
        customer_ref = None

    if not customer_ref:
        customer_ref = stripe_service.create_customer(user.email, user.id, user.display_name)
        crud.set_billing_customer_ref(db, user, customer_ref)
        logger.info(f"Billing customer stored: user_id={user.id}, customer_id={customer_ref}")

    return customer_ref


def start_checkout(db: Session, user: User, plan: str, currency: Optional[str] = None) -> Dict[str, str]:
    """
    Create a hosted checkout session for a paid plan.

    Returns:
        {"url": checkout URL, "sessionId": session ID}
    """
    price_id = resolve_price_id(plan, currency)
    plan_key = plan.strip().lower()
    customer_ref = ensure_billing_customer(db, user)

    # the only channel through which later async events find their way back to this user
    metadata = {
        "userId": user.id,
        "plan": plan_key,
        "email": user.email,
        "displayName": user.display_name or "",
    }
    session = stripe_service.create_checkout_session(
        customer_id=customer_ref,
        price_id=price_id,
        metadata=metadata,
        success_url=f"{config.CLIENT_URL}/payment/success?session_id={{CHECKOUT_SESSION_ID}}",
        cancel_url=f"{config.CLIENT_URL}/payment/cancel",
    )
    return {"url": session["url"], "sessionId": session["id"]}


# ============================================
# Transitions
# ============================================

def _metadata(obj) -> Dict[str, Any]:
    metadata = obj.get("metadata") if obj is not None else None
    return dict(metadata) if metadata else {}


def _downgrade(db: Session, user: User) -> User:
    # endsAt intentionally left null: the provider period end is not carried over
    return crud.write_subscription(
        db,
        user,
        reference_id=None,
        status=SubscriptionStatus.CANCELED.value,
        plan=Plan.FREE.value,
        cancel_at_period_end=False,
        ends_at=None,
    )


def apply_checkout_session(db: Session, session) -> Optional[User]:
    """
    Apply a paid checkout session to the user named in its metadata.

    Sets the absolute state {referenceId: session id, active, plan, not
    canceling}; applying the same session again yields the same record.
    Returns None without touching any record when the session cannot be
    attributed.
    """
    metadata = _metadata(session)
    user_id = metadata.get("userId")
    plan = metadata.get("plan")
    if not user_id or not plan:
        logger.warning(f"Checkout session {session.get('id')} missing userId/plan metadata, skipping")
        return None

    user = crud.get_user(db, user_id)
    if not user:
        raise OrphanEventError(f"No user {user_id} for checkout session {session.get('id')}")

    crud.write_subscription(
        db,
        user,
        reference_id=session.get("id"),
        status=SubscriptionStatus.ACTIVE.value,
        plan=plan,
        cancel_at_period_end=False,
    )
    logger.info(f"Subscription activated: user_id={user.id}, plan={plan}, session_id={session.get('id')}")
    return user


def handle_checkout_completed(db: Session, session) -> Optional[User]:
    """checkout.session.completed"""
    user = apply_checkout_session(db, session)
    if user is not None:
        metadata = _metadata(session)
        send_billing_notification("subscription", {
            "userId": user.id,
            "email": metadata.get("email") or user.email,
            "plan": metadata.get("plan"),
            "displayName": metadata.get("displayName") or user.display_name or "",
        })
    return user


def handle_subscription_upserted(db: Session, subscription) -> Optional[User]:
    """
    customer.subscription.created / customer.subscription.updated

    Mirrors Stripe's status and plan onto the user named in the
    subscription's own metadata. Without that metadata the event is skipped.
    """
    metadata = _metadata(subscription)
    user_id = metadata.get("userId")
    subscription_id = subscription.get("id")
    if not user_id:
        logger.info(f"Subscription {subscription_id} has no userId metadata, skipping")
        return None

    user = crud.get_user(db, user_id)
    if not user:
        raise OrphanEventError(f"No user {user_id} for subscription {subscription_id}")

    status = subscription.get("status")
    if status in TERMINAL_PROVIDER_STATUSES:
        _downgrade(db, user)
        logger.info(f"Subscription ended: user_id={user.id}, status={status}, subscription_id={subscription_id}")
        return user

    if status not in ACTIVE_PROVIDER_STATUSES:
        logger.info(f"Subscription {subscription_id} in status {status}, no change for user_id={user.id}")
        return None

    plan = metadata.get("plan") or get_plan_from_price_id(_first_price_id(subscription))
    if not plan:
        logger.warning(f"Subscription {subscription_id} has no resolvable plan, skipping")
        return None

    crud.write_subscription(
        db,
        user,
        reference_id=subscription_id,
        status=SubscriptionStatus.ACTIVE.value,
        plan=plan,
        cancel_at_period_end=bool(subscription.get("cancel_at_period_end")),
    )
    logger.info(f"Subscription mirrored: user_id={user.id}, plan={plan}, status={status}, subscription_id={subscription_id}")
    return user


def _first_price_id(subscription) -> Optional[str]:
    items = (subscription.get("items") or {}).get("data") or []
    if not items:
        return None
    return (items[0].get("price") or {}).get("id")


def handle_subscription_deleted(db: Session, subscription) -> User:
    """
    customer.subscription.deleted

    Keyed by the billing customer, since deletion events may not carry the
    user metadata.

    Raises:
        OrphanEventError: No user holds this customer reference
    """
    customer_ref = subscription.get("customer")
    user = crud.get_user_by_billing_ref(db, customer_ref) if customer_ref else None
    if not user:
        raise OrphanEventError(f"User not found with billing customer {customer_ref}")

    previous_plan = user.subscription_plan
    _downgrade(db, user)
    logger.info(f"Subscription canceled: user_id={user.id}, customer_id={customer_ref}")

    send_billing_notification("cancellation", {
        "userId": user.id,
        "email": user.email,
        "displayName": user.display_name or "",
        "plan": previous_plan,
        "stripeCustomerId": customer_ref,
    })
    return user


def handle_payment_succeeded(db: Session, payment) -> None:
    """payment_intent.succeeded / invoice.payment_succeeded: recorded only."""
    logger.info(f"Payment succeeded for customer {payment.get('customer')}: id={payment.get('id')}")


EVENT_HANDLERS = {
    "checkout.session.completed": handle_checkout_completed,
    "customer.subscription.created": handle_subscription_upserted,
    "customer.subscription.updated": handle_subscription_upserted,
    "customer.subscription.deleted": handle_subscription_deleted,
    "payment_intent.succeeded": handle_payment_succeeded,
    "invoice.payment_succeeded": handle_payment_succeeded,
}


def process_event(db: Session, event) -> str:
    """
    Dispatch a verified Stripe event.

    Returns:
        "applied", "ignored" (no handler or nothing to change) or "orphaned"
        (cannot be attributed to a user; acknowledged without retry)
    """
    event_type = event["type"]
    handler = EVENT_HANDLERS.get(event_type)
    if handler is None:
        logger.info(f"Unhandled event type {event_type}")
        return "ignored"

    data_object = event["data"]["object"]
    try:
        result = handler(db, data_object)
    except OrphanEventError as e:
        logger.warning(f"Orphan billing event {event.get('id')} ({event_type}): {e.message}")
        return "orphaned"

    return "applied" if result is not None else "ignored"


# ============================================
# Cancellation and verification
# ============================================

def cancel_subscription(db: Session, user: User) -> Dict[str, Any]:
    """
    Cancel the user's active Stripe subscription immediately and downgrade locally.

    The Stripe cancellation and the local write are not transactional. If the
    local write fails after Stripe canceled, the error is raised; the
    customer.subscription.deleted webhook converges the record afterwards.

    Raises:
        NoActiveSubscriptionError: No billing customer or no active subscription
    """
    if not user.billing_customer_ref:
        raise NoActiveSubscriptionError("No active subscription found for this user")

    subscriptions = stripe_service.list_active_subscriptions(user.billing_customer_ref, limit=1)
    if not subscriptions:
        raise NoActiveSubscriptionError("No active subscription found for this user on Stripe")

    subscription_id = subscriptions[0]["id"]
    canceled = stripe_service.cancel_subscription(subscription_id)

    try:
        _downgrade(db, user)
    except Exception as e:
        db.rollback()
        logger.error(
            f"Stripe subscription {subscription_id} canceled but local downgrade failed "
            f"for user_id={user.id}: {e}",
            exc_info=True,
        )
        raise ExternalServiceError("Failed to cancel subscription") from e

    logger.info(f"User unsubscribed: user_id={user.id}, subscription_id={subscription_id}")
    return {"stripeStatus": canceled.get("status")}


def verify_checkout(db: Session, session_id: Optional[str]) -> Dict[str, Any]:
    """
    Polling fallback for the checkout redirect.

    Applies the same overwrite as checkout.session.completed when the session
    is paid; an unpaid session changes nothing.
    """
    if not session_id:
        raise ValidationError("Session ID is required")

    session = stripe_service.retrieve_checkout_session(session_id)
    if not session:
        raise NotFoundError("Session not found")

    if session.get("payment_status") != "paid":
        return {"paid": False}

    try:
        apply_checkout_session(db, session)
    except OrphanEventError as e:
        logger.warning(f"Verified session {session_id} could not be applied: {e.message}")

    return {"paid": True, "plan": _metadata(session).get("plan")}
