"""
Caching provider for HubTreeLib.

Provides a transparent caching layer that can wrap any remote data
provider, so rebuilding a project (or building overlapping subtrees)
does not list the same folder twice within the TTL.
"""

import asyncio
import logging
import threading
from typing import Any, Dict, List, Optional, Tuple

from cachetools import TTLCache

from ..core.ids import RemoteID, RemoteIDPair
from ..core.records import ProjectInfo
from .provider import FetchResult, RemoteDataProvider

logger = logging.getLogger(__name__)


class CacheKeyMixin:
    """Mixin providing standardized cache key generation for providers.

    Keys carry the class identity and an instance number, so two caching
    layers stacked over each other, or sharing one cache store, never
    collide.
    """

    def __init_subclass__(cls, **kwargs):
        """Initialize class-level attributes when subclass is created."""
        super().__init_subclass__(**kwargs)
        cls._class_id = f"{cls.__module__}.{cls.__name__}"
        cls._instance_counter = 0
        cls._counter_lock = threading.Lock()

    def __init__(self, *args, **kwargs):
        """Initialize instance-level cache key attributes."""
        super().__init__(*args, **kwargs)
        with self.__class__._counter_lock:
            self.__class__._instance_counter += 1
            self._instance_number = self.__class__._instance_counter

    def _get_cache_key_prefix(self) -> Tuple[str, int]:
        """Get standardized cache key prefix for this provider instance.

        Returns:
            Tuple of (class_identifier, instance_number)
        """
        return (self._class_id, self._instance_number)


class CachingProvider(CacheKeyMixin, RemoteDataProvider):
    """
    Optional caching layer for any remote data provider.

    Caches successful folder listings. Uses Future-based coordination so
    concurrent requests for the same folder share one remote call.
    Failures are never cached.

    Example:
        provider = CachingProvider(MyHttpProvider(session), ttl=600)
        builder = ProjectBuilder(provider)
        await builder.build(account_id, project_id)
    """

    def __init__(
        self,
        base_provider: RemoteDataProvider,
        max_size: int = 10000,
        ttl: float = 300.0  # 5 minutes
    ):
        """
        Initialize caching provider.

        Args:
            base_provider: The underlying provider to wrap
            max_size: Maximum number of folder listings in cache
            ttl: Time-to-live for cache entries in seconds
        """
        super().__init__()
        self._provider = base_provider
        self._cache = TTLCache(maxsize=max_size, ttl=ttl)
        self._fetches_in_progress: Dict[Any, asyncio.Future] = {}

        # Statistics
        self.cache_hits = 0
        self.cache_misses = 0
        self.concurrent_waits = 0

    @property
    def base_provider(self) -> RemoteDataProvider:
        return self._provider

    def _get_cache_key(self, project_id: RemoteID, folder_id: str) -> Tuple:
        return self._get_cache_key_prefix() + ('contents', RemoteID(project_id).bare, folder_id)

    async def get_project(self, ids: RemoteIDPair) -> FetchResult[ProjectInfo]:
        """Delegate to underlying provider."""
        return await self._provider.get_project(ids)

    async def get_folder(self, project_id: RemoteID, folder_id: str) -> FetchResult[Dict[str, Any]]:
        """Delegate to underlying provider."""
        return await self._provider.get_folder(project_id, folder_id)

    async def get_folder_contents(
        self,
        project_id: RemoteID,
        folder_id: str
    ) -> FetchResult[List[Dict[str, Any]]]:
        """
        Get folder contents with caching and async coordination.

        This method:
        1. Waits on another task already listing this folder
        2. Checks the cache for an existing listing
        3. Performs the listing if needed
        4. Shares a successful listing with all waiting tasks
        """
        cache_key = self._get_cache_key(project_id, folder_id)

        in_progress = self._fetches_in_progress.get(cache_key)
        if in_progress is not None:
            self.concurrent_waits += 1
            result = await asyncio.shield(in_progress)
            if result.is_success:
                return FetchResult.ok(list(result.data or []), result.status_code)
            # The original fetch failed, try again ourselves

        cached = self._check_cache(cache_key)
        if cached is not None:
            self.cache_hits += 1
            return FetchResult.ok(list(cached))

        self.cache_misses += 1

        future = asyncio.get_running_loop().create_future()
        self._fetches_in_progress[cache_key] = future

        try:
            result = await self._provider.get_folder_contents(project_id, folder_id)

            if result.is_success:
                self._update_cache(cache_key, list(result.data or []))
            else:
                logger.debug("Not caching failed listing of folder %s", folder_id)

            future.set_result(result)
            return result

        except BaseException as e:
            future.set_result(FetchResult.failure(e if isinstance(e, Exception) else None))
            raise
        finally:
            if self._fetches_in_progress.get(cache_key) is future:
                del self._fetches_in_progress[cache_key]

    def _check_cache(self, cache_key: Any) -> Optional[List[Dict[str, Any]]]:
        """
        Check cache for an existing listing.

        Returns None if not found or expired.
        """
        return self._cache.get(cache_key)

    def _update_cache(self, cache_key: Any, records: List[Dict[str, Any]]) -> None:
        self._cache[cache_key] = records

    def invalidate(self, project_id: RemoteID, folder_id: str) -> bool:
        """
        Drop one folder's cached listing.

        Returns:
            True if an entry was removed
        """
        return self._cache.pop(self._get_cache_key(project_id, folder_id), None) is not None

    def get_cache_stats(self) -> dict:
        """
        Get cache statistics for monitoring and debugging.
        """
        total_requests = self.cache_hits + self.cache_misses
        hit_rate = self.cache_hits / total_requests if total_requests > 0 else 0

        return {
            'cache_hits': self.cache_hits,
            'cache_misses': self.cache_misses,
            'hit_rate': hit_rate,
            'concurrent_waits': self.concurrent_waits,
            'cache_size': len(self._cache),
            'max_size': self._cache.maxsize,
            'ttl': self._cache.ttl
        }

    async def get_stats(self) -> dict:
        return self.get_cache_stats()

    def clear_cache(self) -> None:
        """
        Clear all cached entries.
        """
        self._cache.clear()
        self.cache_hits = 0
        self.cache_misses = 0
        self.concurrent_waits = 0

    async def close(self):
        await self._provider.close()
