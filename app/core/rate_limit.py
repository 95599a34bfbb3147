"""Shared slowapi limiter.

Every route gets ``RATE_LIMIT`` per client IP through ``SlowAPIMiddleware``;
routes decorated with ``@limiter.limit(...)`` use their own limit instead.
"""

from __future__ import annotations

from slowapi import Limiter
from slowapi.util import get_remote_address

from .config import settings


def default_rate_limit() -> str:
    # Read on each request so the limit follows the live settings object.
    return settings.RATE_LIMIT


limiter = Limiter(key_func=get_remote_address, default_limits=[default_rate_limit])
