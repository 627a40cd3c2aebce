from slowapi import Limiter
from slowapi.util import get_remote_address

# Default IP-based key; uploads carry their own tighter limit.
limiter = Limiter(key_func=get_remote_address, default_limits=["200/minute"])
