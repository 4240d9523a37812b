"""
Extension host boundary and adapters.
"""

from .base import ExtensionHost, InstalledExtension, QueryHandler
from .stdio import StdioHost

__all__ = [
    "ExtensionHost",
    "InstalledExtension",
    "QueryHandler",
    "StdioHost",
]
