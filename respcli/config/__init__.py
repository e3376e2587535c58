"""Configuration module for respcli."""

from .options import ClientOptions
from .settings import Settings, settings

__all__ = [
    "ClientOptions",
    "Settings",
    "settings",
]
