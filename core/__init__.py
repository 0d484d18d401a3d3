"""Shared plumbing: logging setup used by the CLI and the library modules."""
