"""Command-line interface for DMI."""
