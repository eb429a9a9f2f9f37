"""The project-level container for a mirrored tree."""

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Union

from . import traversal
from .node import File, Folder, NodeType, TreeNode
from .ids import RemoteID
from .records import Platform

logger = logging.getLogger(__name__)


class ProjectTree:
    """A project and the folder tree under its root folder.

    The tree is not safe for concurrent mutation. The one supported
    multi-writer path is append_nodes(), which serializes writers with a
    lock. Readers walking the tree while an append runs are not excluded
    by that lock; callers must keep them apart.
    """

    def __init__(self, project_id: Any = None, account_id: Any = None):
        self.id = RemoteID(project_id)
        self.account_id = RemoteID(account_id)
        self.name: str = ""
        self.platform: Platform = Platform.UNDETERMINED
        self.last_modified: Optional[datetime] = None
        self.cache_updated: datetime = datetime.now(timezone.utc)
        self.root: Optional[Folder] = None
        self._lock = threading.Lock()

    @property
    def is_empty(self) -> bool:
        """True if there is no root folder or it has no contents."""
        return self.root is None or not self.root.contents

    def append_nodes(self, parent: Union[Folder, str], children: Iterable[TreeNode]) -> int:
        """Graft a batch of new nodes under the folder with a matching ID.

        The folder is located with a full preorder scan of the tree. Each
        appended node is linked to the folder and the paths of it and
        everything below it are rebuilt. A node already in the tree is
        moved, not copied.

        Args:
            parent: The folder, or just its ID
            children: Nodes to append

        Returns:
            Number of nodes appended, 0 if no folder matched
        """
        parent_id = parent.id if isinstance(parent, TreeNode) else parent
        if not parent_id or children is None or self.root is None:
            return 0

        batch = list(children)
        if not batch:
            return 0

        with self._lock:
            target = next(
                (node for node in traversal.preorder(self.root)
                 if node.node_type is NodeType.FOLDER and node.id == parent_id),
                None,
            )

            if target is None:
                logger.debug("No folder %r in project %s to append to", parent_id, self.id)
                return 0

            for child in batch:
                target.add(child)

        return len(batch)

    def index_by_id(self) -> Dict[str, TreeNode]:
        return traversal.index_by_id(self.root)

    def find_by_id(self, item_id: str) -> Optional[TreeNode]:
        return traversal.find_by_id(self.root, item_id)

    def find_by_path(self, path: str, delimiter: str = "/") -> Optional[TreeNode]:
        return traversal.find_by_path(self.root, path, delimiter)

    def to_list(self, folders_only: bool = True) -> List[TreeNode]:
        return traversal.to_list(self.root, folders_only)

    def get_files(self) -> List[File]:
        return traversal.get_files(self.root)

    def get_folders(self, empty_only: bool = False) -> List[Folder]:
        return traversal.get_folders(self.root, empty_only)

    def repath(self, depth: Optional[int] = None, no_files: bool = False) -> None:
        traversal.repath(self.root, depth, no_files)

    def __repr__(self) -> str:
        return f"ProjectTree(id={self.id.bare!r}, name={self.name!r})"
