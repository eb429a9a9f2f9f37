"""JSON round trip for cached project trees.

Parent links are never written. A tree read back from JSON has every
parent unset until it is walked; call repath() (or any traversal) on it
before relying on parents.
"""

import json
from datetime import datetime
from typing import Any, Dict, Optional

from .node import File, Folder, NodeType, TreeNode
from .project import ProjectTree
from .records import Platform, parse_timestamp


def _stamp(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def node_to_dict(node: TreeNode) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        'id': node.id,
        'name': node.name,
        'type': node.node_type.value,
        'lastModified': _stamp(node.last_modified),
        'lastModifiedBy': node.last_modified_by,
        'path': list(node.path_segments),
    }

    if node.node_type is NodeType.FOLDER:
        data['contents'] = [node_to_dict(child) for child in node.contents]
    else:
        data['version'] = node.version

    return data


def node_from_dict(data: Optional[Dict[str, Any]]) -> Optional[TreeNode]:
    """Rebuild a node and its subtree. Unknown types come back as None."""
    if not isinstance(data, dict):
        return None

    node_type = NodeType.from_wire(str(data.get('type', '')).lower())
    common = dict(
        id=data.get('id') or "",
        name=data.get('name') or "",
        last_modified=parse_timestamp(data.get('lastModified')),
        last_modified_by=data.get('lastModifiedBy'),
        path_segments=data.get('path') or [],
    )

    if node_type is NodeType.FOLDER:
        children = (node_from_dict(c) for c in data.get('contents') or [])
        return Folder(contents=[c for c in children if c is not None], **common)

    if node_type is NodeType.FILE:
        return File(version=int(data.get('version') or 0), **common)

    return None


def project_to_dict(project: ProjectTree) -> Dict[str, Any]:
    return {
        'id': project.id.bare,
        'name': project.name,
        'account': project.account_id.bare,
        'lastModified': _stamp(project.last_modified),
        'platform': project.platform.value,
        'cached': _stamp(project.cache_updated),
        'root': node_to_dict(project.root) if project.root is not None else None,
    }


def project_from_dict(data: Dict[str, Any]) -> ProjectTree:
    project = ProjectTree(data.get('id'), data.get('account'))
    project.name = data.get('name') or ""
    project.platform = Platform.parse(data.get('platform'))
    project.last_modified = parse_timestamp(data.get('lastModified'))

    cached = parse_timestamp(data.get('cached'))
    if cached is not None:
        project.cache_updated = cached

    root = node_from_dict(data.get('root'))
    project.root = root if isinstance(root, Folder) else None
    return project


def dumps(project: ProjectTree, **kwargs) -> str:
    return json.dumps(project_to_dict(project), **kwargs)


def loads(text: str) -> ProjectTree:
    return project_from_dict(json.loads(text))
