"""
Payment endpoints: plans, checkout, the Stripe webhook, verification and
cancellation. All state changes go through app.services.billing_service.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Query, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from app.core.auth_dependency import Identity, get_current_user, get_current_user_obj, get_db
from app.db.models.user import User
from app.schemas.billing import CheckoutRequest
from app.services import billing_service, stripe_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payment", tags=["Payment"])


@router.get("/plans")
def get_plans(currency: Optional[str] = Query(default="USD")):
    return {"success": True, "data": billing_service.list_plans(currency)}


@router.post("/checkout")
def create_checkout(
    body: CheckoutRequest,
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db),
):
    session = billing_service.start_checkout(db, user, body.plan, body.currency)
    return {"success": True, "data": session}


@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None),
    db: Session = Depends(get_db),
):
    """
    Stripe webhook receiver.

    Only a failed signature check is rejected. Everything that verifies is
    acknowledged, including events that cannot be attributed to a user;
    unexpected failures propagate as 500 so Stripe redelivers.
    """
    payload = await request.body()

    try:
        event = stripe_service.verify_webhook(payload, stripe_signature)
    except ValueError as e:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "message": f"Webhook Error: {e}"},
        )

    outcome = await run_in_threadpool(billing_service.process_event, db, event)
    logger.info(f"Webhook {event['id']} ({event['type']}): {outcome}")
    return {"success": True, "received": True}


@router.get("/verify")
def verify_payment(
    session_id: Optional[str] = Query(default=None),
    identity: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return {"success": True, "data": billing_service.verify_checkout(db, session_id)}


@router.post("/unsubscribe")
def unsubscribe(
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db),
):
    result = billing_service.cancel_subscription(db, user)
    return {
        "success": True,
        "message": "Subscription cancelled successfully",
        "data": result,
    }
