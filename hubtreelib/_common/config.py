"""Configuration system for HubTreeLib.

This module defines how callers specify what the builder should fetch:
how deep to go, which folders and files to keep, and how many remote
calls may be in flight at once.
"""

from dataclasses import dataclass
from typing import List, Optional


# Marker carried by the synthetic top-level folder of every project,
# e.g. "1a2b3c4d-0000-1111-2222-333344445555-root-folder"
ROOT_FOLDER_MARKER = "root-folder"

# Name prefixes of system folders that sit directly under the root folder
SPECIAL_FOLDER_PREFIXES = (
    "submittals-attachments",
    "checklist_",
    "dailylog_",
    "issue_",
    "ProjectTb",
    "COST Root Folder",
)

DEFAULT_MAX_CONCURRENT = 4


@dataclass
class BuildConfig:
    """Complete configuration for building a project tree.

    Attributes:
        max_depth: How far down to populate from the root, where 0 is the
            root only. None (or any negative value) means unlimited.
        include_special_folders: Keep system folders found one level under
            the root folder.
        exclude_files: Drop file records, building a folders-only tree.
        max_concurrent: Maximum remote calls in flight. 1 gives the strictly
            sequential depth-first fetch order.
    """

    max_depth: Optional[int] = None
    include_special_folders: bool = False
    exclude_files: bool = False
    max_concurrent: int = DEFAULT_MAX_CONCURRENT

    @property
    def unlimited(self) -> bool:
        return self.max_depth is None or self.max_depth < 0

    def should_explore(self, depth: int) -> bool:
        """Check if the children of a folder at this depth should be fetched.

        Args:
            depth: Depth of the folder, root is 0

        Returns:
            True if we should go deeper
        """
        if self.unlimited:
            return True
        return depth < self.max_depth

    def validate(self) -> List[str]:
        """Validate configuration for consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if isinstance(self.max_depth, bool) or (
            self.max_depth is not None and not isinstance(self.max_depth, int)
        ):
            errors.append("max_depth must be an integer or None")

        if not isinstance(self.max_concurrent, int) or self.max_concurrent <= 0:
            errors.append("max_concurrent must be a positive integer")

        return errors
