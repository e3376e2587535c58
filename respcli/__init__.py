"""
respcli: RESP Command-Line Client

A script-compatible redis-cli work-alike that speaks the Redis
serialization protocol over a single TCP, TLS or Unix socket connection.
"""

__version__ = "1.0.0"
__author__ = "respcli developers"
