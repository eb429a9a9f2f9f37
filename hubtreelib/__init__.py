"""HubTreeLib - Mirror remote hub/project document stores as local trees.

The remote service only lists one folder at a time, so HubTreeLib builds
the tree incrementally and then offers traversal, search and repair
operations over the finished tree.

Choose your layer:
━━━━━━━━━━━━━━━━━━━━━━━━━━
Building (async, talks to the remote service):
    from hubtreelib.aio import ProjectBuilder, build_project_tree

Working with a finished tree (sync, in memory):
    from hubtreelib.core import preorder, find_by_path, repath
━━━━━━━━━━━━━━━━━━━━━━━━━━
"""

import logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

from . import core
from . import aio
from ._common import BuildConfig

__all__ = [
    "__version__",
    "core",
    "aio",
    "BuildConfig",
]
