"""Rate limiter instance for SlowAPI.

Shared by main (app.state.limiter) and route modules so every route uses the
same instance and limit strings live in one place.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

SEARCH_LIMIT = "60/minute"
WEBHOOK_LIMIT = "600/minute"

limit_search = limiter.limit(SEARCH_LIMIT)
limit_webhook = limiter.limit(WEBHOOK_LIMIT)
