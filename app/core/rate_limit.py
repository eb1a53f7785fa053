from slowapi import Limiter
from slowapi.util import get_remote_address

from app.config import settings

# Per-IP limit applied to every route by SlowAPIMiddleware; probes use @limiter.exempt
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.rate_limit],
    enabled=settings.rate_limit_enabled,
)
