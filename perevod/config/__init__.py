# perevod/config/__init__.py
"""
Configuration for Perevod.
"""

from .settings import AppSettings, USER_SETTINGS_KEYS, get_default_settings_path

__all__ = [
    'AppSettings',
    'USER_SETTINGS_KEYS',
    'get_default_settings_path',
]
