"""Configuration: TOML layers under ``SLOTWISE_*`` environment overrides.

    from slotwise.config import get_settings

    timeout = get_settings().conflicts.timeout_minutes
"""

from functools import lru_cache

from slotwise.config.loader import load_config
from slotwise.config.settings import Settings, use_file_config


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings, read once; ``reload_settings`` re-reads the files."""
    use_file_config(load_config())
    return Settings()


def reload_settings() -> Settings:
    get_settings.cache_clear()
    return get_settings()


__all__ = ["Settings", "get_settings", "reload_settings"]
