"""Command-line interface for the voice recorder."""
