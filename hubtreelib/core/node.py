"""Tree node model for a mirrored project.

A project is a tree of two node shapes, folders and files. Folders own
their children outright through an ordered list. The parent link going
the other way is a weak reference: it never keeps a folder alive and is
only there for upward walks and path reconstruction. It may be unset
(for example right after loading a cached tree) until a traversal
re-links it.
"""

import weakref
from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from .._common.config import ROOT_FOLDER_MARKER, SPECIAL_FOLDER_PREFIXES
from .ids import RemoteID, is_guid_root
from .records import (
    record_id,
    record_modified,
    record_modified_by,
    record_name,
    record_type,
    record_version,
)


class NodeType(Enum):
    """The two node shapes, valued with their remote type names."""
    FILE = "items"
    FOLDER = "folders"

    @property
    def ordinal(self) -> int:
        """Sort order of the remote type, files before folders."""
        return 3 if self is NodeType.FILE else 4

    @classmethod
    def from_wire(cls, text: str) -> Optional['NodeType']:
        for member in cls:
            if member.value == text:
                return member
        return None


class TreeNode(ABC):
    """Abstract base class for nodes in a project tree.

    Attributes:
        id: Remote ID of the item
        name: Display name of the item
        last_modified: When the item was last modified, if known
        path_segments: Names of every ancestor from the root folder down,
            not including the node itself. Includes the GUID root folder.
    """

    def __init__(
        self,
        id: str = "",
        name: str = "",
        last_modified: Optional[datetime] = None,
        last_modified_by: Optional[str] = None,
        path_segments: Optional[Iterable[str]] = None,
    ):
        self.id = id or ""
        self.name = name or ""
        self.last_modified = last_modified
        self.last_modified_by = last_modified_by
        self.path_segments: List[str] = list(path_segments or [])
        self._parent: Optional[weakref.ReferenceType] = None

    @property
    @abstractmethod
    def node_type(self) -> NodeType:
        """Which of the two node shapes this is."""
        pass

    @property
    def is_folder(self) -> bool:
        return self.node_type is NodeType.FOLDER

    @property
    def is_file(self) -> bool:
        return self.node_type is NodeType.FILE

    @property
    def last_modified_by(self) -> Optional[str]:
        return self._last_modified_by

    @last_modified_by.setter
    def last_modified_by(self, value: Optional[str]) -> None:
        self._last_modified_by = value.strip() if value and value.strip() else None

    @property
    def parent(self) -> Optional['Folder']:
        """The folder this node was last linked under, or None."""
        return self._parent() if self._parent is not None else None

    @parent.setter
    def parent(self, folder: Optional['Folder']) -> None:
        self._parent = weakref.ref(folder) if folder is not None else None

    @property
    def depth(self) -> int:
        """Depth from the root folder, where the root is 0."""
        return len(self.path_segments)

    @property
    def path_in_project(self) -> List[str]:
        """path_segments without the GUID root folder.

        Join with a separator to get the path a user would recognize.
        """
        return [p for p in self.path_segments if not is_guid_root(p)]

    def place_under(self, folder: 'Folder') -> None:
        """Link to a parent and rebuild path_segments from it."""
        self.parent = folder
        self.path_segments = folder.path_segments + [folder.name]

    def metadata(self) -> Dict[str, Any]:
        """Flat attributes for reporting and export."""
        return {
            'id': self.id,
            'name': self.name,
            'type': self.node_type.value,
            'depth': self.depth,
            'last_modified': self.last_modified,
            'last_modified_by': self.last_modified_by,
            'path': list(self.path_segments),
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.id!r}, name={self.name!r})"


class Folder(TreeNode):
    """A folder in a project. Owns its contents."""

    def __init__(self, *args, contents: Optional[Iterable[TreeNode]] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.contents: List[TreeNode] = list(contents or [])

    @property
    def node_type(self) -> NodeType:
        return NodeType.FOLDER

    def add(self, child: TreeNode) -> TreeNode:
        """Append a child, linking it and deriving its path from this folder.

        A child still linked under another folder is removed from that
        folder first. Paths below a grafted folder are rebuilt as well.
        """
        previous = child.parent
        if previous is not None:
            previous.contents = [c for c in previous.contents if c is not child]

        child.place_under(self)
        self.contents.append(child)

        if child.node_type is NodeType.FOLDER:
            from .traversal import relink
            relink(child)

        return child

    def get_empty_folders(self) -> List['Folder']:
        """Folders at or below this one that have no contents."""
        from .traversal import get_folders
        return get_folders(self, empty_only=True)


class File(TreeNode):
    """A file in a project."""

    def __init__(self, *args, version: int = 0, **kwargs):
        super().__init__(*args, **kwargs)
        self.version = version

    @property
    def node_type(self) -> NodeType:
        return NodeType.FILE

    def metadata(self) -> Dict[str, Any]:
        data = super().metadata()
        data['version'] = self.version
        return data


def create_node(record: Dict[str, Any]) -> Optional[TreeNode]:
    """Turn a raw remote record into a Folder or File.

    Returns None for any other record type; callers skip those.
    """
    node_type = NodeType.from_wire(record_type(record))

    common = dict(
        id=record_id(record),
        name=record_name(record),
        last_modified=record_modified(record),
        last_modified_by=record_modified_by(record),
    )

    if node_type is NodeType.FOLDER:
        return Folder(**common)
    if node_type is NodeType.FILE:
        return File(version=record_version(record), **common)
    return None


def is_root_folder(folder: TreeNode) -> bool:
    """Check for the root folder by name, not by a missing parent."""
    return ROOT_FOLDER_MARKER in folder.name


def has_special_prefix(name: str) -> bool:
    """Check a folder name against the reserved system folder prefixes."""
    return any(name.startswith(prefix) for prefix in SPECIAL_FOLDER_PREFIXES)


def is_special_folder(folder: TreeNode, project_id: Any = None) -> bool:
    """Check whether a folder is a system folder.

    A folder is special if its name starts with a reserved prefix, or if it
    contains the project's own ID (some system folders are named that way).
    """
    if has_special_prefix(folder.name):
        return True

    project = RemoteID(project_id)
    if not project.is_valid:
        return False

    return project.bare in folder.name.lower()
