"""Exceptions raised by the DMI statement builders and session.

Faults raised by the database driver (SQLAlchemy or DB-API exceptions) are
never wrapped in these types; they reach the caller unchanged.
"""

from typing import Any, Dict, Optional


class DMIError(Exception):
    """Base class for all DMI errors."""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to structured dict for logging."""
        return {
            "error_type": type(self).__name__,
            "message": str(self),
        }


class InvalidOperationError(DMIError):
    """Raised when an operation is not valid for the statement's current mode.

    The main case is calling ``execute_stored_procedure()`` on a statement
    that was never bound to a stored procedure.
    """


class MalformedStatementError(DMIError):
    """Raised when a statement cannot be rendered or bound as requested."""

    def __init__(self, message: str, statement: Optional[str] = None):
        self.statement = statement
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["statement"] = self.statement
        return data


class NotConnectedError(DMIError):
    """Raised when a DMI session is used after it was closed."""


class ReadOnlyDatabaseError(DMIError):
    """Raised when a write is attempted on a session that is not editable."""


class UnsupportedWriteModeError(DMIError):
    """Raised when a write mode cannot be honoured with the statements given."""
