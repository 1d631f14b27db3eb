"""
Simple in-memory rate limiter for the credential endpoints.

Per-process only; each worker keeps its own window.
"""
import logging
import time
from typing import Dict, List
from fastapi import Request, HTTPException, status

logger = logging.getLogger(__name__)

# {bucket:ip: [timestamps]}; a key exists only while it has hits inside the window
rate_limit_store: Dict[str, List[float]] = {}


def get_client_ip(request: Request) -> str:
    """Extract client IP address from request."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # first hop is the client
        return forwarded.split(",")[0].strip()

    if request.client:
        return request.client.host

    return "unknown"


def prune_expired(bucket: str, cutoff: float) -> None:
    """Drop every key in the bucket whose newest hit is outside the window."""
    prefix = f"{bucket}:"
    stale = [
        key for key, hits in rate_limit_store.items()
        if key.startswith(prefix) and (not hits or hits[-1] <= cutoff)
    ]
    for key in stale:
        del rate_limit_store[key]


def check_rate_limit(request: Request, bucket: str, max_requests: int = 10, window_seconds: int = 60) -> None:
    """
    Check if the client has exceeded the limit for a bucket.

    Raises:
        HTTPException: 429 if rate limit exceeded
    """
    key = f"{bucket}:{get_client_ip(request)}"
    now = time.time()

    cutoff = now - window_seconds
    prune_expired(bucket, cutoff)
    hits = [ts for ts in rate_limit_store.get(key, []) if ts > cutoff]

    request_count = len(hits)
    if request_count >= max_requests:
        rate_limit_store[key] = hits
        logger.warning(f"Rate limit exceeded for {key} ({request_count} requests in {window_seconds}s)")
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Rate limit exceeded. Maximum {max_requests} requests per {window_seconds} seconds."
        )

    hits.append(now)
    rate_limit_store[key] = hits


def rate_limit(bucket: str, max_requests: int = 10, window_seconds: int = 60):
    """Dependency factory wrapping check_rate_limit for one bucket."""
    def limiter(request: Request) -> None:
        check_rate_limit(request, bucket, max_requests, window_seconds)

    return limiter
