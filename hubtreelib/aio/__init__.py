"""Asynchronous implementation of HubTreeLib.

Everything that waits on the remote service lives here: the provider
abstraction, caching, error policies and the tree builder.
"""

# Providers
from .provider import (
    MAX_LOOPS,
    FetchResult,
    Page,
    RemoteDataProvider,
    PagedRemoteDataProvider,
    RemoteFetchError,
)
from .caching import CacheKeyMixin, CachingProvider

# Error handling
from .error_policies import (
    ErrorPolicy,
    FailFastPolicy,
    ContinueOnErrorsPolicy,
    ThresholdPolicy,
)

# Building
from .builder import ProjectBuilder

# High-level API
from .api import build_project_tree, load_project_tree

__all__ = [
    # Providers
    'MAX_LOOPS',
    'FetchResult',
    'Page',
    'RemoteDataProvider',
    'PagedRemoteDataProvider',
    'RemoteFetchError',
    'CacheKeyMixin',
    'CachingProvider',
    # Error handling
    'ErrorPolicy',
    'FailFastPolicy',
    'ContinueOnErrorsPolicy',
    'ThresholdPolicy',
    # Building
    'ProjectBuilder',
    # High-level API
    'build_project_tree',
    'load_project_tree',
]
