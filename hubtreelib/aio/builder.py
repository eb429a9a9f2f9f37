"""Async builder that mirrors a remote project into a ProjectTree.

The remote service only lists one folder's immediate children per call,
so the tree is assembled incrementally: fetch the project, fetch its root
folder, then list every folder and attach its children, descending until
the depth limit or the leaves.
"""

import asyncio
import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional

from .._common.config import BuildConfig
from ..core.ids import RemoteIDPair
from ..core.node import Folder, NodeType, TreeNode, create_node, has_special_prefix, is_root_folder
from ..core.project import ProjectTree
from ..core.records import ProjectInfo
from .error_policies import ContinueOnErrorsPolicy, ErrorPolicy
from .provider import FetchResult, RemoteDataProvider, guarded_call

logger = logging.getLogger(__name__)


class ProjectBuilder:
    """Populates a ProjectTree from a remote data provider.

    Configure with the fluent setters, then call build():

        builder = ProjectBuilder(provider).include_special(False).no_files(True)
        if await builder.build(account_id, project_id, depth=3):
            tree = builder.project

    Sibling folders are listed concurrently, with at most
    `config.max_concurrent` remote calls in flight. Children are always
    attached in the order the provider returned them.
    """

    def __init__(
        self,
        provider: RemoteDataProvider,
        config: Optional[BuildConfig] = None,
        error_policy: Optional[ErrorPolicy] = None
    ):
        """Initialize the builder.

        Args:
            provider: Source of project, folder and listing data
            config: Build configuration, copied so the fluent setters never
                touch the caller's object (defaults to BuildConfig())
            error_policy: What to do when a folder below the root cannot be
                listed (defaults to ContinueOnErrorsPolicy)
        """
        self.provider = provider
        self.config = replace(config) if config is not None else BuildConfig()
        self.error_policy = error_policy or ContinueOnErrorsPolicy()
        self.project: Optional[ProjectTree] = None
        self._run: BuildConfig = self.config
        self._semaphore: Optional[asyncio.Semaphore] = None
        self.stats: Dict[str, int] = {}

    def include_special(self, include_special: bool = True) -> 'ProjectBuilder':
        """Keep the system folders found directly under the root folder."""
        self.config.include_special_folders = include_special
        return self

    def no_files(self, no_files: bool = True) -> 'ProjectBuilder':
        """Leave files out of the tree."""
        self.config.exclude_files = no_files
        return self

    def max_concurrent(self, max_concurrent: int) -> 'ProjectBuilder':
        """Cap the number of remote calls in flight."""
        self.config.max_concurrent = max_concurrent
        return self

    @property
    def failed_branches(self) -> List[str]:
        """IDs of folders whose listing failed during the last build."""
        return self.error_policy.failed_ids

    async def build(self, account_id: Any, project_id: Any, depth: Optional[int] = None) -> bool:
        """Build the project tree from scratch.

        Args:
            account_id: Hub/account ID, in either encoding
            project_id: Project ID, in either encoding
            depth: How far down to populate, where 0 is the root only.
                None or negative means all the way down. Overrides
                config.max_depth when given.

        Returns:
            True if the root and its reachable subtree were populated. A
            failure fetching the project, the root folder or the root's
            contents returns False. Failures below the root are handed to
            the error policy and do not fail the build unless it raises.
        """
        run = replace(self.config, max_depth=depth) if depth is not None else replace(self.config)
        errors = run.validate()
        if errors:
            raise ValueError(f"Invalid configuration: {', '.join(errors)}")

        ids = RemoteIDPair.create(account_id, project_id)

        if not ids.is_valid:
            logger.warning("Refusing to build with invalid IDs %r / %r", account_id, project_id)
            return False

        self._run = run
        self.project = ProjectTree(ids.project, ids.account)
        self.error_policy.reset()
        self._semaphore = asyncio.Semaphore(run.max_concurrent)
        self.stats = {'folders_listed': 0, 'nodes_added': 0, 'nodes_skipped': 0}

        logger.info("Getting root of project %s", ids.project)

        root = await self._get_root_folder(ids)
        if root is None:
            return False

        logger.info(
            "Begin walking project '%s' (%s) to depth %s",
            self.project.name, ids.project,
            "unlimited" if self._run.unlimited else self._run.max_depth
        )

        if not self._should_descend(root):
            self.project.root = root
            return True

        result = await self._list(root)
        if not result.is_success:
            logger.warning(
                "Could not list root folder of project %s: %s",
                ids.project, result.as_error(root.id)
            )
            return False

        self.project.root = root
        await self._attach(root, result.data or [])

        logger.info(
            "Finished project '%s': %d folders listed, %d nodes added, %d branches lost",
            self.project.name, self.stats['folders_listed'],
            self.stats['nodes_added'], len(self.failed_branches)
        )
        return True

    async def _get_root_folder(self, ids: RemoteIDPair) -> Optional[Folder]:
        """Fetch the project metadata and its root folder.

        Fills in the project's name and platform. Returns None if either
        call fails or the root record is not a folder.
        """
        project_result = await guarded_call(self.provider.get_project(ids), "get_project")
        info = project_result.data if project_result.is_success else None

        if not project_result.is_success:
            logger.warning("Could not get project %s: %s", ids.project, project_result.as_error())
            return None

        if not isinstance(info, ProjectInfo) or not info.root_folder_id:
            logger.warning("Project %s has no usable metadata", ids.project)
            return None

        self.project.name = info.name
        self.project.platform = info.platform
        self.project.last_modified = info.last_modified

        root_result = await guarded_call(
            self.provider.get_folder(ids.project, info.root_folder_id), "get_folder"
        )
        root = create_node(root_result.data) if root_result.is_success and root_result.data else None

        if root is None or root.node_type is not NodeType.FOLDER:
            logger.warning(
                "Root folder %s of project %s is missing or not a folder",
                info.root_folder_id, ids.project
            )
            return None

        return root

    def _should_descend(self, node: TreeNode) -> bool:
        if node.node_type is not NodeType.FOLDER:
            return False
        if not node.id or not node.id.strip():
            return False
        return self._run.should_explore(node.depth)

    async def _list(self, folder: Folder) -> FetchResult:
        async with self._semaphore:
            logger.debug("Listing '%s' (%s)", folder.name, folder.id)
            self.stats['folders_listed'] += 1
            return await guarded_call(
                self.provider.get_folder_contents(self.project.id, folder.id),
                "get_folder_contents"
            )

    async def _fill(self, folder: Folder) -> bool:
        """List a folder below the root and attach its subtree.

        Returns:
            True if the folder was descended into, False if it was left
            alone (depth limit, not a folder, no ID, no children, or a
            failed listing).
        """
        if not self._should_descend(folder):
            return False

        result = await self._list(folder)

        if result.is_success:
            records = result.data or []
        else:
            records = await self.error_policy.handle(
                result.as_error(folder.id), 'get_folder_contents', folder
            ) or []

        if not records:
            return False

        await self._attach(folder, records)
        return True

    async def _attach(self, parent: Folder, records: List[Dict[str, Any]]) -> None:
        """Turn records into children of `parent`, then fill each of them."""
        under_root = is_root_folder(parent)
        added: List[TreeNode] = []

        for record in records:
            child = create_node(record)

            if child is None:
                self.stats['nodes_skipped'] += 1
                continue

            child.place_under(parent)

            # System folders only live directly under the root folder
            if (not self._run.include_special_folders and under_root
                    and child.node_type is NodeType.FOLDER
                    and has_special_prefix(child.name)):
                logger.debug("Skipping special folder '%s'", child.name)
                self.stats['nodes_skipped'] += 1
                continue

            if self._run.exclude_files and child.node_type is NodeType.FILE:
                self.stats['nodes_skipped'] += 1
                continue

            parent.contents.append(child)
            added.append(child)

        self.stats['nodes_added'] += len(added)

        folders = [c for c in added if c.node_type is NodeType.FOLDER]

        if self._run.max_concurrent == 1:
            for child in folders:
                await self._fill(child)
            return

        if not folders:
            return

        # The first failure cancels every sibling still fetching
        tasks = [asyncio.ensure_future(self._fill(child)) for child in folders]
        try:
            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        for task in tasks:
            if task in done and not task.cancelled() and task.exception() is not None:
                raise task.exception()
