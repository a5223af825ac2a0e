"""Domain layer: in-memory records persisted through the DMI."""

from .record import DataObject

__all__ = ["DataObject"]
