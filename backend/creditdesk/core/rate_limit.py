"""
Rate Limiting
Single slowapi limiter shared by the app and the routers that decorate endpoints.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from creditdesk.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    enabled=settings.rate_limit_enabled,
    storage_uri=settings.rate_limit_storage_uri,
)
