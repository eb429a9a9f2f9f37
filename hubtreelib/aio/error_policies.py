"""
Error handling policies for HubTreeLib.

When listing a folder below the root fails, the builder hands the error
to a policy. The policy decides whether the branch quietly stops growing
or the whole build stops. Failures at the root are not routed here; they
always fail the build.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


class ErrorPolicy(ABC):
    """
    Base class for branch error policies.

    Subclasses implement different strategies for handling a folder whose
    contents could not be fetched.
    """

    @abstractmethod
    async def handle(self, error: Exception, method_name: str, node: Any) -> Any:
        """
        Handle an error that occurred while expanding a folder.

        Args:
            error: The exception describing the failure
            method_name: Name of the provider call that failed
                (e.g., 'get_folder_contents')
            node: The folder being expanded when the error occurred

        Returns:
            A value that lets the build continue (an empty list for
            listings), or re-raises to stop the build.
        """
        pass

    def reset(self) -> None:
        """Forget anything recorded by a previous build."""
        pass

    @property
    def failed_ids(self) -> List[str]:
        """IDs of folders whose branch was cut short."""
        return []

    @staticmethod
    def _default_for(method_name: str) -> Any:
        if method_name == 'get_folder_contents':
            return []
        return None

    @staticmethod
    def _record(error: Exception, method_name: str, node: Any) -> Dict[str, Any]:
        return {
            'id': getattr(node, 'id', None),
            'name': getattr(node, 'name', None),
            'path': list(getattr(node, 'path_segments', []) or []),
            'method': method_name,
            'error': error,
            'error_type': type(error).__name__,
            'error_message': str(error),
        }


class FailFastPolicy(ErrorPolicy):
    """
    Policy that immediately re-raises any error, stopping the build.

    Useful when a partial tree is worse than no tree.
    """

    async def handle(self, error: Exception, method_name: str, node: Any) -> Any:
        """Re-raise the error immediately."""
        raise error


class ContinueOnErrorsPolicy(ErrorPolicy):
    """
    Policy that records errors and lets the branch stop growing.

    This is the default. The folder that failed stays in the tree with no
    contents, the rest of the tree is still built, and the failures are
    kept for inspection afterward.
    """

    def __init__(self, verbose: bool = True):
        """
        Initialize the policy.

        Args:
            verbose: If True, log a warning for every lost branch
        """
        self.errors: List[Dict[str, Any]] = []
        self.verbose = verbose

    async def handle(self, error: Exception, method_name: str, node: Any) -> Any:
        """
        Record the error and return a sensible default.

        Returns:
            - Empty list for folder listings
            - None for anything else
        """
        record = self._record(error, method_name, node)
        self.errors.append(record)

        if self.verbose:
            logger.warning(
                "Skipping branch under '%s' (%s): %s in %s: %s",
                record['name'], record['id'], record['error_type'], method_name, error
            )

        return self._default_for(method_name)

    def reset(self) -> None:
        self.errors = []

    @property
    def failed_ids(self) -> List[str]:
        return [e['id'] for e in self.errors]

    def get_statistics(self) -> dict:
        """
        Get statistics about errors encountered.

        Returns:
            Dictionary with error counts and details
        """
        by_type: Dict[str, int] = {}
        for e in self.errors:
            by_type[e['error_type']] = by_type.get(e['error_type'], 0) + 1

        return {
            'total_errors': len(self.errors),
            'by_type': by_type,
            'failed_ids': self.failed_ids,
            'errors': self.errors,
        }


class ThresholdPolicy(ErrorPolicy):
    """
    Policy that tolerates errors up to a threshold, then fails.

    Useful when a few unreadable folders are expected but many point to a
    systemic problem (expired credentials, an outage) that should halt
    the build.
    """

    def __init__(self, max_errors: int = 10, verbose: bool = True):
        """
        Initialize threshold policy.

        Args:
            max_errors: Maximum errors to tolerate before failing
            verbose: If True, log a warning for every error
        """
        self.max_errors = max_errors
        self.verbose = verbose
        self.errors: List[Dict[str, Any]] = []

    @property
    def error_count(self) -> int:
        return len(self.errors)

    async def handle(self, error: Exception, method_name: str, node: Any) -> Any:
        """Handle error if under threshold, otherwise raise."""
        self.errors.append(self._record(error, method_name, node))

        if self.error_count > self.max_errors:
            raise RuntimeError(f"Error threshold exceeded ({self.max_errors} errors)") from error

        if self.verbose:
            logger.warning(
                "[%d/%d] Error in %s for '%s': %s",
                self.error_count, self.max_errors, method_name,
                getattr(node, 'name', node), error
            )

        return self._default_for(method_name)

    def reset(self) -> None:
        self.errors = []

    @property
    def failed_ids(self) -> List[str]:
        return [e['id'] for e in self.errors]
