"""
DMI - Database Management Interface.

Builds SQL statements programmatically, routes them through stored procedures
when one is bound, reconciles records against persisted rows using named
write modes, and tracks per-record dirty state.
"""

__version__ = "0.1.0"
