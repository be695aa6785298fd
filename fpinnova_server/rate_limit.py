# Copyright (C) 2024 FP Innova Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""In-memory rate limiting for login and code redemption (brute-force protection)."""

import time
from collections import defaultdict, deque

from fastapi import HTTPException, Request

# (client_key, endpoint) -> list of request timestamps in window
_buckets: defaultdict[tuple[str, str], deque[float]] = defaultdict(deque)
# Window seconds; max requests per window per endpoint
WINDOW = 60
LIMITS: dict[str, int] = {
    "/api/v1/auth/login": 10,
    "/api/v1/codes/validate": 20,
    "/api/v1/codes/redeem": 10,
}


def _client_key(request: Request) -> str:
    """Prefer X-Forwarded-For when behind a proxy."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host or "unknown"
    return "unknown"


def _clean_old(bucket: deque[float], now: float) -> None:
    cutoff = now - WINDOW
    while bucket and bucket[0] < cutoff:
        bucket.popleft()


def check_rate_limit(request: Request, path: str) -> None:
    """
    Raise 429 if the client has exceeded the limit for this path.
    Call this at the start of the endpoint (or via a dependency).
    """
    limit = LIMITS.get(path)
    if limit is None:
        return
    now = time.monotonic()
    bucket = _buckets[(_client_key(request), path)]
    _clean_old(bucket, now)
    if len(bucket) >= limit:
        raise HTTPException(
            status_code=429,
            detail="Too many requests. Please try again later.",
        )
    bucket.append(now)


def reset() -> None:
    """Forget all recorded requests."""
    _buckets.clear()


async def rate_limit_dep(request: Request) -> None:
    """FastAPI dependency: rate limit the endpoints in LIMITS. Add Depends(rate_limit_dep) to routes."""
    path = request.url.path.rstrip("/")
    if path in LIMITS:
        check_rate_limit(request, path)
