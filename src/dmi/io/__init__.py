"""I/O layer: database writes and the DMI session."""
