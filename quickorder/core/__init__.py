"""Core: config, lifespan, exception handlers and rate limits.

Single place for settings and application bootstrap.
"""

from quickorder.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
