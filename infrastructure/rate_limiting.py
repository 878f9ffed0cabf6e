"""Per-client request limits"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from infrastructure.config import settings

# Counted per client IP across every route
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[f"{settings.RATE_LIMIT_MAX}/{settings.RATE_LIMIT_WINDOW}"]
)
