"""
Best-effort billing notifications to the external automation hook.

A failed notification is logged and dropped: it is never retried and never
propagated to the billing transition that triggered it.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

import requests

from app.core import config
from app.core.logging_config import sanitize_log_data

logger = logging.getLogger(__name__)


def send_billing_notification(kind: str, payload: dict, url: Optional[str] = None) -> bool:
    """
    POST a billing notification.

    Args:
        kind: "subscription" or "cancellation"
        payload: Event fields (userId, email, plan, displayName, ...)
        url: Override for NOTIFICATION_WEBHOOK_URL

    Returns:
        True if the hook accepted the notification, False otherwise
    """
    url = url or config.NOTIFICATION_WEBHOOK_URL
    if not url:
        logger.debug(f"Notification hook not configured, skipping {kind} notification")
        return False

    timestamp_field = "cancelledAt" if kind == "cancellation" else "subscribedAt"
    body = {
        **payload,
        "type": kind,
        timestamp_field: datetime.now(timezone.utc).isoformat(),
    }

    try:
        response = requests.post(url, json=body, timeout=config.NOTIFICATION_TIMEOUT_SECONDS)
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        logger.warning(f"Billing notification failed ({kind}): {e}; payload={sanitize_log_data(body)}")
        return False

    logger.info(f"Billing notification sent: type={kind}, user_id={payload.get('userId')}")
    return True
