"""CLI command modules for pubstatus."""
