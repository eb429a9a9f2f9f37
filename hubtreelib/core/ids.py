"""Remote identifier normalization.

Hub/account and project identifiers show up in two textual encodings:
a bare UUID ("1a2b3c4d-...") and the same UUID carrying a two character
scheme prefix ("b.1a2b3c4d-..."). RemoteID folds both into one canonical
value so they can be compared and projected back out either way.
"""

import re
import uuid
from typing import Any, NamedTuple, Optional


ID_PREFIX = "b."

_ID_PATTERN = re.compile(
    r"^(b\.)?[0-9a-f]{8}-([0-9a-f]{4}-){3}[0-9a-f]{12}$", re.IGNORECASE
)


class RemoteID:
    """Wraps an account or project identifier as its canonical UUID.

    Parsing never raises. Anything that cannot be read as a UUID becomes
    the invalid sentinel (the nil UUID) and callers must check `is_valid`
    before using the ID.

    Two RemoteIDs are equal when their canonical values are equal. This
    includes two invalid IDs, which compare (and hash) equal.
    """

    def __init__(self, raw: Any = None):
        if isinstance(raw, RemoteID):
            self._id = raw.uuid
        elif isinstance(raw, uuid.UUID):
            self._id = raw
        else:
            self._id = self._parse(raw)

    @staticmethod
    def _parse(raw: Optional[str]) -> uuid.UUID:
        if not isinstance(raw, str) or not raw.strip():
            return uuid.UUID(int=0)

        raw = raw.strip()

        if raw.lower().startswith(ID_PREFIX):
            raw = raw[len(ID_PREFIX):]

        try:
            return uuid.UUID(raw)
        except ValueError:
            return uuid.UUID(int=0)

    @property
    def uuid(self) -> uuid.UUID:
        """The canonical value."""
        return self._id

    @property
    def is_valid(self) -> bool:
        return self._id.int != 0

    @property
    def prefixed(self) -> str:
        """The ID in its scheme-prefixed form, e.g. 'b.<uuid>'."""
        return f"{ID_PREFIX}{self._id}".lower()

    @property
    def bare(self) -> str:
        """The ID as a bare lower-case UUID string."""
        return str(self._id).lower()

    def __str__(self) -> str:
        return self.bare

    def __repr__(self) -> str:
        return f"RemoteID({self.bare!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RemoteID):
            return NotImplemented
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)


class RemoteIDPair(NamedTuple):
    """An account ID and a project ID that belong together."""

    account: RemoteID
    project: RemoteID

    @classmethod
    def create(cls, account: Any, project: Any) -> 'RemoteIDPair':
        return cls(RemoteID(account), RemoteID(project))

    @property
    def is_valid(self) -> bool:
        return self.account.is_valid and self.project.is_valid


def is_valid_id(text: Optional[str]) -> bool:
    """Check that a string is an account or project ID in either encoding."""
    if not text:
        return False
    return bool(_ID_PATTERN.match(text.strip()))


def is_guid_root(name: Optional[str], suffix: str = "-root-folder") -> bool:
    """Check if a folder name is a GUID root folder name.

    Root folders are named with a 36 character dashed hex identifier
    followed by `suffix`, compared case-insensitively.
    """
    if not name:
        return False

    suffix = suffix.strip() if suffix else ""
    pattern = r"^[A-Z0-9]{8}-([A-Z0-9]{4}-){3}[A-Z0-9]{12}" + re.escape(suffix) + r"$"
    return re.match(pattern, name.strip(), re.IGNORECASE | re.DOTALL) is not None
