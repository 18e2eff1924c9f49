"""Filesystem persistence for compilation jobs."""

__version__ = "0.1.0"
