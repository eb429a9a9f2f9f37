"""Test fixtures for HubTreeLib consumers.

An in-memory stand-in for the remote service plus factories for the raw
records it serves, so builds can be exercised without a network.
"""

import asyncio
import itertools
from typing import Any, Dict, List, Optional, Set, Tuple

from ..aio.provider import (
    MAX_LOOPS,
    FetchResult,
    Page,
    PagedRemoteDataProvider,
    RemoteFetchError,
)
from ..core.ids import RemoteID, RemoteIDPair
from ..core.records import ProjectInfo

SAMPLE_ACCOUNT_ID = "b.9f8e7d6c-5b4a-3928-1706-f5e4d3c2b1a0"
SAMPLE_PROJECT_ID = "b.1a2b3c4d-0000-1111-2222-333344445555"
SAMPLE_ROOT_NAME = "1a2b3c4d-0000-1111-2222-333344445555-root-folder"

DEFAULT_TIMESTAMP = "2024-01-15T10:30:00.000Z"

_counter = itertools.count(1)


def folder_record(
    name: str,
    id: Optional[str] = None,
    modified: Optional[str] = DEFAULT_TIMESTAMP,
    modified_by: Optional[str] = "Jane Doe",
    display_name: bool = False
) -> Dict[str, Any]:
    """A raw folder record as the service returns it.

    Args:
        name: Folder name
        id: Remote ID, generated if omitted
        modified: lastModifiedTime attribute
        modified_by: lastModifiedUserName attribute
        display_name: Carry the name in displayName instead of name
    """
    attributes: Dict[str, Any] = {
        'lastModifiedTime': modified,
        'lastModifiedUserName': modified_by,
    }
    attributes['displayName' if display_name else 'name'] = name

    return {
        'type': 'folders',
        'id': id or f"urn:adsk.wipprod:fs.folder:co.{next(_counter)}",
        'attributes': attributes,
    }


def file_record(
    name: str,
    version: int = 1,
    id: Optional[str] = None,
    modified: Optional[str] = DEFAULT_TIMESTAMP,
    modified_by: Optional[str] = "Jane Doe"
) -> Dict[str, Any]:
    """A raw file (item) record whose tip points at `version`."""
    number = next(_counter)
    return {
        'type': 'items',
        'id': id or f"urn:adsk.wipprod:dm.lineage:{number}",
        'attributes': {
            'displayName': name,
            'lastModifiedTime': modified,
            'lastModifiedUserName': modified_by,
        },
        'relationships': {
            'tip': {'data': {'type': 'versions', 'id': f"urn:adsk.wipprod:fs.file:vf.{number}?version={version}"}},
        },
    }


def project_record(
    name: str,
    root_folder_id: str,
    project_id: str = SAMPLE_PROJECT_ID,
    platform: str = "ACC"
) -> Dict[str, Any]:
    """A raw project record pointing at its root folder."""
    return {
        'type': 'projects',
        'id': project_id,
        'attributes': {
            'name': name,
            'extension': {'data': {'projectType': platform}},
        },
        'relationships': {
            'rootFolder': {'data': {'type': 'folders', 'id': root_folder_id}},
        },
    }


class InMemoryProvider(PagedRemoteDataProvider):
    """A remote service held entirely in dictionaries.

    Folder listings are served in pages of `page_size` so the paging loop
    is exercised. Failures can be injected per folder, and every call is
    logged so tests can check what was fetched and in what order.

    Example:
        provider = InMemoryProvider()
        root = provider.add_project(SAMPLE_PROJECT_ID, "Tower")
        drawings = provider.add_folder(root['id'], "Drawings")
        provider.add_file(drawings['id'], "A101.pdf", version=3)
    """

    def __init__(self, page_size: int = 50, max_loops: int = MAX_LOOPS, delay: float = 0.0):
        super().__init__(max_loops)
        self.page_size = page_size
        self.delay = delay

        self.projects: Dict[str, Dict[str, Any]] = {}
        self.folders: Dict[str, Dict[str, Any]] = {}
        self.contents: Dict[str, List[Dict[str, Any]]] = {}

        # Failure injection
        self.fail_project = False
        self.failing_folders: Set[str] = set()
        self.raising_folders: Set[str] = set()
        self.endless_folders: Set[str] = set()

        # Observation
        self.calls: List[Tuple[str, str]] = []
        self.listed: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    def add_project(
        self,
        project_id: str = SAMPLE_PROJECT_ID,
        name: str = "Sample Project",
        root_name: Optional[str] = None,
        platform: str = "ACC"
    ) -> Dict[str, Any]:
        """Register a project and its root folder.

        Returns:
            The root folder record
        """
        bare = RemoteID(project_id).bare
        root = folder_record(root_name or f"{bare}-root-folder")
        self.folders[root['id']] = root
        self.contents.setdefault(root['id'], [])
        self.projects[bare] = project_record(name, root['id'], project_id, platform)
        return root

    def add_record(self, parent_id: str, record: Dict[str, Any]) -> Dict[str, Any]:
        """Append any raw record to a folder's listing."""
        self.contents.setdefault(parent_id, []).append(record)
        if record.get('type') == 'folders':
            self.folders[record['id']] = record
            self.contents.setdefault(record['id'], [])
        return record

    def add_folder(self, parent_id: str, name: str, **kwargs) -> Dict[str, Any]:
        return self.add_record(parent_id, folder_record(name, **kwargs))

    def add_file(self, parent_id: str, name: str, version: int = 1, **kwargs) -> Dict[str, Any]:
        return self.add_record(parent_id, file_record(name, version, **kwargs))

    async def get_project(self, ids: RemoteIDPair) -> FetchResult[ProjectInfo]:
        self.calls.append(('get_project', ids.project.bare))

        if self.fail_project:
            return FetchResult.failure(RemoteFetchError("Service unavailable", 503), 503)

        record = self.projects.get(ids.project.bare)
        if record is None:
            return FetchResult.failure(status_code=404)

        return FetchResult.ok(ProjectInfo.from_record(record))

    async def get_folder(self, project_id: RemoteID, folder_id: str) -> FetchResult[Dict[str, Any]]:
        self.calls.append(('get_folder', folder_id))

        record = self.folders.get(folder_id)
        if record is None:
            return FetchResult.failure(status_code=404)

        return FetchResult.ok(record)

    async def get_folder_contents_page(
        self,
        project_id: RemoteID,
        folder_id: str,
        page: int
    ) -> FetchResult[Page]:
        self.calls.append(('get_folder_contents_page', folder_id))
        if page == 0:
            self.listed.append(folder_id)

        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)

        try:
            await asyncio.sleep(self.delay)

            if folder_id in self.raising_folders:
                raise ConnectionError(f"Connection reset while listing {folder_id}")

            if folder_id in self.failing_folders:
                return FetchResult.failure(RemoteFetchError(f"Forbidden: {folder_id}", 403), 403)

            if folder_id in self.endless_folders:
                return FetchResult.ok(Page([folder_record(f"page-{page}")], has_next=True))

            records = self.contents.get(folder_id, [])
            start = page * self.page_size
            chunk = records[start:start + self.page_size]
            return FetchResult.ok(Page(chunk, has_next=start + self.page_size < len(records)))
        finally:
            self.in_flight -= 1

    async def get_stats(self) -> dict:
        return {
            'calls': len(self.calls),
            'folders_listed': len(self.listed),
            'max_in_flight': self.max_in_flight,
        }


def sample_provider(**kwargs) -> Tuple[InMemoryProvider, Dict[str, Any]]:
    """A project holding one folder and one file under its root.

        1a2b3c4d-...-root-folder
        ├── Drawings/
        └── spec.pdf (v1)

    Returns:
        The provider and the root folder record
    """
    provider = InMemoryProvider(**kwargs)
    root = provider.add_project(SAMPLE_PROJECT_ID, "Sample Project", SAMPLE_ROOT_NAME)
    provider.add_folder(root['id'], "Drawings")
    provider.add_file(root['id'], "spec.pdf", version=1)
    return provider, root
