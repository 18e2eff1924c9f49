"""Core (pure) library layer.

This package holds the persistence contract shared by every store backend and
the request types that cross it. It is safe to import from:
- the CLI entrypoint
- the HTTP API
- tests

It should not touch the filesystem or trigger side effects at import time.
"""
