"""
Shared slowapi rate limiter instance.

A single instance keeps one counter store for every decorated route. The app
factory attaches it to ``app.state.limiter`` where slowapi looks it up.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    storage_uri="memory://",
    enabled=settings.RATE_LIMIT_ENABLED,
)
