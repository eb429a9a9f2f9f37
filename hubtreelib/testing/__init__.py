"""Testing utilities for HubTreeLib consumers.

This module provides fixtures and helpers for testing code that uses
HubTreeLib without talking to the real remote service.
"""

from .fixtures import (
    SAMPLE_ACCOUNT_ID,
    SAMPLE_PROJECT_ID,
    SAMPLE_ROOT_NAME,
    InMemoryProvider,
    file_record,
    folder_record,
    project_record,
    sample_provider,
)

__all__ = [
    'SAMPLE_ACCOUNT_ID',
    'SAMPLE_PROJECT_ID',
    'SAMPLE_ROOT_NAME',
    'InMemoryProvider',
    'file_record',
    'folder_record',
    'project_record',
    'sample_provider',
]
