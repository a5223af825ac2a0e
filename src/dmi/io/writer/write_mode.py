"""
Write-mode policies for reconciling an in-memory record with persisted rows.

Each mode carries the integer code used by older callers and a display name.
Codes are informational only: members compare by identity.
"""

from enum import Enum
from typing import Optional


class WriteModeType(Enum):
    """How a write should treat rows that may or may not already exist."""

    # Try INSERT; on a duplicate-key failure run UPDATE
    INSERT_UPDATE = (6, "InsertUpdate")
    # Try UPDATE; when it touches no rows run INSERT
    UPDATE_INSERT = (7, "UpdateInsert")
    # DELETE the matching rows, then INSERT
    DELETE_INSERT = (8, "DeleteInsert")
    UPDATE = (9, "Update")
    INSERT = (10, "Insert")

    def __init__(self, code: int, display_name: str):
        self._code = code
        self._display_name = display_name

    @property
    def code(self) -> int:
        return self._code

    @property
    def display_name(self) -> str:
        return self._display_name

    def __str__(self) -> str:
        return self._display_name

    @classmethod
    def value_of_ignore_case(cls, name: Optional[str]) -> Optional["WriteModeType"]:
        """
        Look up a mode by display name, ignoring case.

        Examples:
            >>> WriteModeType.value_of_ignore_case("updateinsert")
            <WriteModeType.UPDATE_INSERT: (7, 'UpdateInsert')>
            >>> WriteModeType.value_of_ignore_case("Bogus") is None
            True
        """
        if not name:
            return None
        for mode in cls:
            if mode.display_name.lower() == name.lower():
                return mode
        return None

    @classmethod
    def from_code(cls, code: int) -> Optional["WriteModeType"]:
        """Map a legacy integer code to its mode, or None."""
        for mode in cls:
            if mode.code == code:
                return mode
        return None
