"""Core abstractions for mirrored project trees.

Identifiers, the node model, the project container and every synchronous
algorithm that runs over a finished tree.
"""

from .ids import RemoteID, RemoteIDPair, is_guid_root, is_valid_id
from .records import Platform, ProjectInfo
from .node import (
    NodeType,
    TreeNode,
    Folder,
    File,
    create_node,
    has_special_prefix,
    is_root_folder,
    is_special_folder,
)
from .project import ProjectTree
from .traversal import (
    preorder,
    level_order,
    to_list,
    get_files,
    get_folders,
    find_by_id,
    find_by_path,
    index_by_id,
    to_root,
    depth_of,
    relink,
    repath,
)

__all__ = [
    # Identifiers
    'RemoteID',
    'RemoteIDPair',
    'is_guid_root',
    'is_valid_id',
    # Records
    'Platform',
    'ProjectInfo',
    # Nodes
    'NodeType',
    'TreeNode',
    'Folder',
    'File',
    'create_node',
    'has_special_prefix',
    'is_root_folder',
    'is_special_folder',
    # Project
    'ProjectTree',
    # Traversal
    'preorder',
    'level_order',
    'to_list',
    'get_files',
    'get_folders',
    'find_by_id',
    'find_by_path',
    'index_by_id',
    'to_root',
    'depth_of',
    'relink',
    'repath',
]
