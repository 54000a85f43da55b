"""Command line interface for memo-sync."""
