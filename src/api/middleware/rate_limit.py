"""Rate limiting middleware setup.

Per-route limits are declared on the routers. Limits for read routes are
looser than for mutations; ``STOCKLENS_RATE_LIMIT_ENABLED=false`` turns them
off (e.g. for load tests).
"""

import os

from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

READ_LIMIT = "60/minute"
WRITE_LIMIT = "30/minute"

limiter = Limiter(
    key_func=get_remote_address,
    enabled=os.getenv("STOCKLENS_RATE_LIMIT_ENABLED", "true").lower() != "false",
)


async def custom_rate_limit_handler(request, exc):
    """Return the standard error body for rate limit exceeded."""
    return JSONResponse(
        status_code=429,
        content={
            "detail": "Rate limit exceeded. Please try again later.",
            "error_code": "rate_limited",
        },
    )


def setup_rate_limiting(app):
    """Configure rate limiting for FastAPI app."""
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, custom_rate_limit_handler)
    return limiter
