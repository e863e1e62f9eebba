"""
Rate limiting for remote-control commands.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from broadcaster.config import get_settings

limiter = Limiter(key_func=get_remote_address)

REMOTE_LIMIT = f"{get_settings().remote_rate_limit_per_minute}/minute"
