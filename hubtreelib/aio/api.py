"""High-level async API for HubTreeLib.

Simple functions for the common cases: build a project tree in one call,
or bring a cached one back to life.
"""

from typing import Any, Optional

from .._common.config import DEFAULT_MAX_CONCURRENT, BuildConfig
from ..core import serialization
from ..core.project import ProjectTree
from .builder import ProjectBuilder
from .error_policies import ErrorPolicy
from .provider import RemoteDataProvider


async def build_project_tree(
    provider: RemoteDataProvider,
    account_id: Any,
    project_id: Any,
    depth: Optional[int] = None,
    include_special: bool = False,
    no_files: bool = False,
    max_concurrent: int = DEFAULT_MAX_CONCURRENT,
    error_policy: Optional[ErrorPolicy] = None
) -> Optional[ProjectTree]:
    """Build a project tree.

    Args:
        provider: Source of remote data
        account_id: Hub/account ID
        project_id: Project ID
        depth: Maximum depth to populate, None for all of it
        include_special: Keep system folders under the root
        no_files: Folders only
        max_concurrent: Maximum remote calls in flight
        error_policy: Policy for folders below the root that fail to list

    Returns:
        The populated tree, or None if the build failed
    """
    config = BuildConfig(
        max_depth=depth,
        include_special_folders=include_special,
        exclude_files=no_files,
        max_concurrent=max_concurrent,
    )
    builder = ProjectBuilder(provider, config, error_policy)

    if not await builder.build(account_id, project_id):
        return None

    return builder.project


def load_project_tree(text: str, depth: Optional[int] = None, no_files: bool = False) -> ProjectTree:
    """Load a tree previously saved with serialization.dumps().

    The tree is re-linked and re-pathed before it is returned, optionally
    trimmed to `depth` and stripped of files.
    """
    project = serialization.loads(text)
    project.repath(depth, no_files)
    return project
