"""Markdown task files with git synchronization."""

__version__ = "0.1.0"
