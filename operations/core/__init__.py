"""Core: config, tenant context and application bootstrap.

Single place for settings.
"""

from operations.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
