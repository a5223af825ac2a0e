"""
Dirty-state tracking for records read from or written to the database.

A record class extends DataObject to remember whether it has been changed
since it was last persisted, and to hold a snapshot of the persisted state
it was loaded with.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class DataObject(Generic[T]):
    """
    Base for records that track unsaved changes.

    A new instance is clean and has no original. The dirty flag and the
    original snapshot are independent; setting one never touches the other,
    and ``get_original()`` returns the exact object that was stored.

    Examples:
        >>> record = DataObject[dict]()
        >>> record.is_dirty()
        False
        >>> snapshot = {"id": 5}
        >>> record.set_original(snapshot)
        >>> record.get_original() is snapshot
        True
    """

    _dirty: bool = field(default=False, init=False, repr=False, compare=False)
    _original: Optional[T] = field(default=None, init=False, repr=False, compare=False)

    def is_dirty(self) -> bool:
        return self._dirty

    def set_dirty(self, dirty: bool) -> None:
        self._dirty = dirty

    def get_original(self) -> Optional[T]:
        return self._original

    def set_original(self, original: Optional[T]) -> None:
        self._original = original
