"""
In-memory sliding-window rate limits.

Buckets are keyed by scope plus caller: client IP for the unauthenticated
auth routes, user id for writes that fan out to other members (messages,
connection requests).
"""
import logging
import time
from collections import defaultdict
from typing import Dict, List

from fastapi import Depends, Request, HTTPException, status

from app.core.auth_dependency import get_current_user
from app.db.models.user import User

logger = logging.getLogger(__name__)

# {"scope:caller": [timestamps]}
rate_limit_store: Dict[str, List[float]] = defaultdict(list)


def get_client_ip(request: Request) -> str:
    """Extract client IP address from request."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # First IP in the proxy chain
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"


def check_rate_limit(bucket: str, max_requests: int, window_seconds: int) -> None:
    """
    Record a hit on `bucket`, or reject it when the window is already full.
    
    Raises:
        HTTPException: 429 if rate limit exceeded
    """
    now = time.time()
    cutoff = now - window_seconds
    hits = [timestamp for timestamp in rate_limit_store[bucket] if timestamp > cutoff]

    if len(hits) >= max_requests:
        rate_limit_store[bucket] = hits
        logger.warning(f"Rate limit exceeded for {bucket} ({len(hits)} requests in {window_seconds}s)")
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Rate limit exceeded. Maximum {max_requests} requests per {window_seconds} seconds."
        )

    hits.append(now)
    rate_limit_store[bucket] = hits


def auth_rate_limit(request: Request) -> None:
    """Signup and login: 10 attempts per minute per IP."""
    check_rate_limit(f"auth:{get_client_ip(request)}", max_requests=10, window_seconds=60)


def user_rate_limit(scope: str, max_requests: int, window_seconds: int = 60):
    """Build a dependency limiting the signed-in user within `scope`."""
    def dependency(user: User = Depends(get_current_user)) -> None:
        check_rate_limit(f"{scope}:{user.id}", max_requests, window_seconds)
    return dependency
