"""Rate limiter instance for SlowAPI.

Shared so both main (app.state.limiter) and route modules can use the same
instance without circular imports. Central limit strings and decorators keep
rate limits in one place.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

CHECKOUT_LIMIT = "20/minute"
SIGN_IN_LIMIT = "10/minute"
CREATE_STORE_LIMIT = "5/minute"

limit_checkout = limiter.limit(CHECKOUT_LIMIT)
limit_sign_in = limiter.limit(SIGN_IN_LIMIT)
limit_create_store = limiter.limit(CREATE_STORE_LIMIT)
