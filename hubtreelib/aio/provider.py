"""Remote data provider abstraction.

Defines what the builder needs from the remote service: project metadata,
a folder's own record, and the immediate children of a folder. The
transport behind it (HTTP client, tokens, retry-after handling) is the
implementer's business.

Every call answers with a FetchResult instead of raising, so the builder
can tell "this folder is empty" apart from "this folder could not be
listed".
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, TypeVar

from ..core.ids import RemoteID, RemoteIDPair
from ..core.records import ProjectInfo

logger = logging.getLogger(__name__)

T = TypeVar('T')

# The most page requests one listing will ever make
MAX_LOOPS = 20


class RemoteFetchError(Exception):
    """A remote call failed (transport, authorization or payload)."""

    def __init__(self, message: str, status_code: int = 0):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class FetchResult(Generic[T]):
    """Outcome of one remote call.

    Three states: success with data, success with an empty result, and
    failure. Check `is_success` before looking at `data`.

    Attributes:
        data: The payload, if any
        status_code: HTTP-style status of the call
        error: Exception raised while making the call, if any
    """

    data: Optional[T] = None
    status_code: int = 0
    error: Optional[Exception] = None

    @property
    def is_exception(self) -> bool:
        return self.error is not None

    @property
    def is_success(self) -> bool:
        """2xx status and no exception. The data still has to be checked."""
        return not self.is_exception and 200 <= self.status_code < 300

    @property
    def is_empty(self) -> bool:
        """Succeeded but carried nothing."""
        return self.is_success and not self.data

    @classmethod
    def ok(cls, data: Optional[T] = None, status_code: int = 200) -> 'FetchResult[T]':
        return cls(data=data, status_code=status_code)

    @classmethod
    def failure(cls, error: Optional[Exception] = None, status_code: int = 0) -> 'FetchResult[T]':
        return cls(error=error, status_code=status_code)

    def as_error(self, context: str = "") -> Exception:
        """The exception describing why this call failed."""
        if self.error is not None:
            return self.error
        message = f"Remote call failed with status {self.status_code}"
        if context:
            message = f"{message}: {context}"
        return RemoteFetchError(message, self.status_code)


@dataclass
class Page:
    """One page of a folder listing."""

    records: List[Dict[str, Any]] = field(default_factory=list)
    has_next: bool = False


class RemoteDataProvider(ABC):
    """Abstract base class for remote data providers.

    Providers bridge the builder to a specific remote service.
    Implementations should never let transport errors escape; they
    report them as FetchResult.failure().
    """

    @abstractmethod
    async def get_project(self, ids: RemoteIDPair) -> FetchResult[ProjectInfo]:
        """Get the metadata of a project.

        Args:
            ids: Account and project the caller is asking about

        Returns:
            Name, platform and root folder ID of the project
        """
        pass

    @abstractmethod
    async def get_folder(self, project_id: RemoteID, folder_id: str) -> FetchResult[Dict[str, Any]]:
        """Get the raw record of a single folder.

        Args:
            project_id: Project the folder is in
            folder_id: Remote ID of the folder

        Returns:
            The folder's own record
        """
        pass

    @abstractmethod
    async def get_folder_contents(
        self,
        project_id: RemoteID,
        folder_id: str
    ) -> FetchResult[List[Dict[str, Any]]]:
        """Get the raw records of a folder's immediate children, in order.

        Any pagination happens behind this call.

        Args:
            project_id: Project the folder is in
            folder_id: Remote ID of the folder

        Returns:
            Child records in the order the service returned them
        """
        pass

    async def get_stats(self) -> dict:
        """Get provider statistics.

        Returns:
            Dictionary of statistics (call counts, cache hits, etc.)
        """
        return {}

    async def close(self):
        """Clean up provider resources.

        Override if the provider holds connections or sessions.
        """
        pass

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()


class PagedRemoteDataProvider(RemoteDataProvider):
    """Provider for services that list folder contents a page at a time.

    Subclasses implement get_folder_contents_page(); this class drives it
    until the service reports no further page, bounded by `max_loops` so a
    misbehaving service cannot keep the loop going forever.
    """

    def __init__(self, max_loops: int = MAX_LOOPS):
        if max_loops <= 0:
            raise ValueError("max_loops must be positive")
        self.max_loops = max_loops

    @abstractmethod
    async def get_folder_contents_page(
        self,
        project_id: RemoteID,
        folder_id: str,
        page: int
    ) -> FetchResult[Page]:
        """Get one page of a folder listing, starting at page 0."""
        pass

    async def get_folder_contents(
        self,
        project_id: RemoteID,
        folder_id: str
    ) -> FetchResult[List[Dict[str, Any]]]:
        records: List[Dict[str, Any]] = []
        status_code = 200

        for page_number in range(self.max_loops):
            result = await self.get_folder_contents_page(project_id, folder_id, page_number)

            if not result.is_success:
                return FetchResult.failure(result.error, result.status_code)

            status_code = result.status_code

            if result.data is None:
                break

            records.extend(result.data.records)

            if not result.data.has_next:
                break
        else:
            logger.warning(
                "Stopped listing folder %s after %d pages, results may be incomplete",
                folder_id, self.max_loops
            )

        return FetchResult.ok(records, status_code)


async def guarded_call(coro, description: str) -> FetchResult:
    """Await a provider call, turning anything it raises into a failure."""
    try:
        result = await coro
    except Exception as e:
        logger.warning("Provider raised during %s: %s", description, e)
        return FetchResult.failure(e)

    if not isinstance(result, FetchResult):
        return FetchResult.failure(
            RemoteFetchError(f"Provider returned {type(result).__name__} during {description}")
        )

    return result
