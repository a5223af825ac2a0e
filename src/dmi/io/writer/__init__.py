"""
Database writer: write-mode policies and the DMI session.

Public API:
- DMI: session executing statements over a SQLAlchemy connection
- WriteModeType: the five write-mode policies
- reconcile: run a policy as explicit primary/fallback steps
- WriteResult / WriteOutcome: tagged result of a reconciliation
"""

from dmi.io.writer.core import DMI, DataStore, StatementKind
from dmi.io.writer.models import WriteOutcome, WriteResult
from dmi.io.writer.operations import is_duplicate_key_error, reconcile
from dmi.io.writer.write_mode import WriteModeType

__all__ = [
    "DMI",
    "DataStore",
    "StatementKind",
    "WriteModeType",
    "WriteOutcome",
    "WriteResult",
    "is_duplicate_key_error",
    "reconcile",
]
