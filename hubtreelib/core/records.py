"""Helpers for reading raw remote object records.

The remote service answers with JSON:API style objects:

    {
        "type": "folders",
        "id": "urn:adsk.wipprod:fs.folder:co.abc",
        "attributes": {"name": "Drawings", "lastModifiedTime": "...", ...},
        "relationships": {"tip": {"data": {"id": "...?version=3"}}, ...}
    }

Everything here is tolerant of missing keys; a record that lacks a field
produces an empty/default value rather than an error.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class Platform(Enum):
    """Project platform classification."""
    UNDETERMINED = "undetermined"
    BIM360 = "bim360"
    ACC = "acc"

    @classmethod
    def parse(cls, text: Any) -> 'Platform':
        if not isinstance(text, str):
            return cls.UNDETERMINED
        for member in cls:
            if member.value == text.strip().lower():
                return member
        return cls.UNDETERMINED


def _dig(record: Any, *keys: str) -> Any:
    """Walk nested dicts, returning None as soon as a level is missing."""
    current = record
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def record_type(record: Dict[str, Any]) -> str:
    value = _dig(record, 'type')
    return value.strip().lower() if isinstance(value, str) else ""


def record_id(record: Dict[str, Any]) -> str:
    value = _dig(record, 'id')
    return value if isinstance(value, str) else ""


def record_name(record: Dict[str, Any]) -> str:
    """Get whichever of name or displayName is populated."""
    name = _dig(record, 'attributes', 'name')
    if isinstance(name, str) and name.strip():
        return name
    display = _dig(record, 'attributes', 'displayName')
    return display if isinstance(display, str) else ""


def record_modified(record: Dict[str, Any]) -> Optional[datetime]:
    return parse_timestamp(_dig(record, 'attributes', 'lastModifiedTime'))


def record_modified_by(record: Dict[str, Any]) -> Optional[str]:
    value = _dig(record, 'attributes', 'lastModifiedUserName')
    return value if isinstance(value, str) else None


def record_version(record: Dict[str, Any]) -> int:
    """Version of a file record, read from its tip relationship."""
    return parse_version(_dig(record, 'relationships', 'tip', 'data', 'id'))


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp into an aware datetime.

    Naive values are assumed to be UTC. Returns None when the value is
    blank or unreadable.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(('Z', 'z')):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_version(tip_id: Any) -> int:
    """Pull the version number out of a tip version URN.

    'urn:adsk.wipprod:fs.file:vf.abc?version=3' -> 3. Anything else is 0.
    """
    if not isinstance(tip_id, str) or '?' not in tip_id:
        return 0

    query = tip_id.rsplit('?', 1)[-1]
    parts = [p for p in query.split('=') if p]
    if len(parts) < 2:
        return 0

    try:
        return int(parts[1])
    except ValueError:
        return 0


@dataclass
class ProjectInfo:
    """The project metadata the builder needs before it can walk the tree."""

    name: str
    root_folder_id: str
    platform: Platform = Platform.UNDETERMINED
    last_modified: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: Optional[Dict[str, Any]]) -> Optional['ProjectInfo']:
        """Read a project record.

        Returns None when the record does not name a root folder, since a
        project without one cannot be walked.
        """
        if not isinstance(record, dict):
            return None

        root_id = _dig(record, 'relationships', 'rootFolder', 'data', 'id')
        if not isinstance(root_id, str) or not root_id.strip():
            return None

        return cls(
            name=record_name(record),
            root_folder_id=root_id.strip(),
            platform=Platform.parse(
                _dig(record, 'attributes', 'extension', 'data', 'projectType')
            ),
            last_modified=record_modified(record),
        )
