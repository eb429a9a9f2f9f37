"""Common components shared between the core and aio packages.

This internal package contains non-I/O code only. It should NOT be
imported directly by users.

Important: This package must NEVER import from core or aio to avoid
circular dependencies.
"""

from .config import (
    BuildConfig,
    DEFAULT_MAX_CONCURRENT,
    ROOT_FOLDER_MARKER,
    SPECIAL_FOLDER_PREFIXES,
)

__all__ = [
    'BuildConfig',
    'DEFAULT_MAX_CONCURRENT',
    'ROOT_FOLDER_MARKER',
    'SPECIAL_FOLDER_PREFIXES',
]
