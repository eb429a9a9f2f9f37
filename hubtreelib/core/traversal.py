"""Walks, searches and repairs over an in-memory project tree.

Every walk here re-links the parent reference of each child it visits to
the folder it was found in. That makes any of them usable as a repair
step on a tree whose parent links were lost, e.g. one loaded from a
cache. repath() goes further and rebuilds path segments as well.
"""

import logging
from collections import deque
from typing import Dict, Iterator, List, Optional

from .node import File, Folder, NodeType, TreeNode

logger = logging.getLogger(__name__)


def preorder(root: Folder) -> Iterator[TreeNode]:
    """Depth-first, pre-order walk using an explicit stack.

    Yields a node, then all of its descendants in their original order,
    before moving on to its next sibling. Lazy, so consumers can stop early.
    """
    if root is None:
        return

    to_visit: List[TreeNode] = [root]

    while to_visit:
        current = to_visit.pop()

        if current.node_type is NodeType.FOLDER:
            # Push right to left so the leftmost child is popped first
            for child in reversed(current.contents):
                child.parent = current
                to_visit.append(child)

        yield current


def level_order(root: Folder) -> Iterator[TreeNode]:
    """Breadth-first walk, one level at a time.

    Uses two queues: the level being visited and the next level being
    collected. They swap once the current level is exhausted.
    """
    if root is None:
        return

    to_visit = deque([root])
    next_level: deque = deque()

    while to_visit or next_level:
        while to_visit:
            current = to_visit.popleft()

            if current.node_type is NodeType.FOLDER:
                for child in current.contents:
                    child.parent = current
                    next_level.append(child)

            yield current

        to_visit, next_level = next_level, to_visit


def to_list(start: Folder, folders_only: bool = True) -> List[TreeNode]:
    """Flatten a tree into a list in level order.

    Args:
        start: Folder to start from, included in the result
        folders_only: Leave files out

    Returns:
        Nodes in level order
    """
    if start is None:
        return []

    return [
        node for node in level_order(start)
        if not folders_only or node.node_type is NodeType.FOLDER
    ]


def get_folders(start: Folder, empty_only: bool = False) -> List[Folder]:
    """All folders at or below `start` in preorder.

    Args:
        start: Folder to start searching from
        empty_only: Only return folders with no contents
    """
    if start is None:
        return []

    return [
        node for node in preorder(start)
        if node.node_type is NodeType.FOLDER and (not empty_only or not node.contents)
    ]


def get_files(start: Folder) -> List[File]:
    """All files below `start` in preorder."""
    if start is None:
        return []
    return [node for node in preorder(start) if node.node_type is NodeType.FILE]


def find_by_id(start: Folder, item_id: Optional[str]) -> Optional[TreeNode]:
    """First node in preorder whose ID exactly matches `item_id`."""
    if start is None or not item_id or not item_id.strip():
        return None

    item_id = item_id.strip()

    for node in preorder(start):
        if node.id == item_id:
            return node

    return None


def index_by_id(start: Folder) -> Dict[str, TreeNode]:
    """Map every node's ID to the node for repeated lookups.

    IDs are expected to be unique within one tree. If they are not, the
    node visited last in preorder wins.
    """
    index: Dict[str, TreeNode] = {}

    if start is None:
        return index

    for node in preorder(start):
        if node.id in index:
            logger.warning("Duplicate node ID %r in tree, keeping the later node", node.id)
        index[node.id] = node

    return index


def find_by_path(start: Folder, path: Optional[str], delimiter: str = "/") -> Optional[TreeNode]:
    """Find a node by a path relative to `start`, e.g. 'Project Files/Plans/A1.pdf'.

    Segments are matched against child names case-insensitively. Every
    segment but the last must resolve to a folder; the last may be a
    folder or a file.

    Returns:
        The matching node, `start` itself for a path made only of
        delimiters, or None when any segment fails to match.
    """
    if start is None or not path or not path.strip():
        return None

    parts = [p for p in path.split(delimiter) if p]

    if not parts:
        return start

    current = start

    for i, part in enumerate(parts):
        wanted = part.lower()

        if i == len(parts) - 1:
            return next((n for n in current.contents if n.name.lower() == wanted), None)

        if not current.contents:
            return None

        current = next(
            (n for n in current.contents
             if n.name.lower() == wanted and n.node_type is NodeType.FOLDER),
            None,
        )

        if current is None:
            return None

    return None


def to_root(node: TreeNode) -> Iterator[Folder]:
    """Walk parent links upward, nearest ancestor first."""
    current = node.parent

    while current is not None:
        yield current
        current = current.parent


def depth_of(node: TreeNode) -> int:
    """Depth found by counting parent links up to the root.

    Agrees with `node.depth` on any tree that has been built or re-linked.
    """
    if node is None:
        raise ValueError("A missing node has no depth")

    return sum(1 for _ in to_root(node))


def relink(start: Folder) -> None:
    """Re-link parents and rebuild path segments below `start`.

    Unlike repath() the tree is not reordered, trimmed or filtered.
    `start` keeps its own path.
    """
    for node in level_order(start):
        if node is not start:
            node.place_under(node.parent)


def repath(start: Folder, depth: Optional[int] = None, no_files: bool = False) -> None:
    """Re-organize an existing tree in place.

    Performs a level-order walk that, for each folder:

    - empties its contents if the folder is at or below `depth`,
    - otherwise drops its files when `no_files` is set,
    - otherwise orders its contents files first, then folders,

    and then re-links each remaining child to the folder and rebuilds its
    path segments. Use after loading a tree from a cache.

    Args:
        start: Folder to start from, usually the root folder
        depth: Deepest folder depth that keeps its contents, where 0 is the
            root. None or negative means no limit.
        no_files: Remove every file from the tree
    """
    if start is None:
        return

    limited = depth is not None and depth >= 0
    to_visit = deque([start])
    next_level: deque = deque()

    while to_visit or next_level:
        while to_visit:
            current = to_visit.popleft()

            if current.node_type is not NodeType.FOLDER:
                continue

            if limited and depth_of(current) >= depth:
                current.contents = []
            elif no_files:
                current.contents = [c for c in current.contents if c.node_type is NodeType.FOLDER]
            else:
                current.contents = sorted(current.contents, key=lambda c: c.node_type.ordinal)

            for child in current.contents:
                child.place_under(current)
                next_level.append(child)

        to_visit, next_level = next_level, to_visit
