"""
Request handlers.

The server has exactly one: StaticFileHandler, which maps a request
path onto a file beneath the document root.
"""

from .static import DEFAULT_INDEX_FILE, FileLoader, PathResolver, StaticFileHandler

__all__ = [
    "DEFAULT_INDEX_FILE",
    "FileLoader",
    "PathResolver",
    "StaticFileHandler",
]
