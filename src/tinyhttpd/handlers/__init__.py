"""
=============================================================================
REQUEST HANDLERS
=============================================================================

1. builtin.py
   - The dynamic routes: /, /about, /health, /hello
   - default_router() builds the table in that order

2. static.py
   - is_safe_path(): the ".." / leading "/" check
   - StaticFileHandler: document root lookup with index-file fallback

=============================================================================
"""

from .builtin import HealthHandler, default_router, home, about, hello
from .static import StaticFileHandler, is_safe_path

__all__ = [
    "HealthHandler",
    "default_router",
    "home",
    "about",
    "hello",
    "StaticFileHandler",
    "is_safe_path",
]
