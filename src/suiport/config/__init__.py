"""Configuration module for SuiPort.

Usage:
    from suiport.config import get_settings

    settings = get_settings()  # Cached
    print(settings.app_name)

Note:
    There is no module-level `settings` instance because it would fail on
    import if required env vars aren't set.
"""

from suiport.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
