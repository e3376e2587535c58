"""Network module for respcli."""

from .session import RedisSession
from .tls import build_ssl_context

__all__ = [
    "RedisSession",
    "build_ssl_context",
]
