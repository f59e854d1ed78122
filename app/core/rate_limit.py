"""Rate limiting configuration."""
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import settings


def get_client_ip(request):
    """Get client IP for rate limiting, considering proxies."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # X-Forwarded-For can contain multiple IPs, take the first one
        return forwarded.split(",")[0].strip()

    return get_remote_address(request)


# Uses Redis if REDIS_URL is set (multi-worker deployments), memory otherwise.
# Only routes decorated with limiter.limit are limited; there is no global default.
limiter = Limiter(
    key_func=get_client_ip,
    storage_uri=settings.REDIS_URL or "memory://",
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)

# Scanner devices at one venue usually sit behind a single NAT address,
# so the check-in limit is per venue rather than per device.
RATE_LIMITS = {
    "check_in": "600/minute",
    "roster_read": "120/minute",
    "roster_write": "60/minute",
}
