# perevod/relay/__init__.py
"""
Same-origin relay to the translation provider.
"""

from .app import create_app, forward_translate

__all__ = ["create_app", "forward_translate"]
