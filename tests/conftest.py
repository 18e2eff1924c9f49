"""Pytest configuration to make the project root importable as a package.

This ensures that ``import compilejobs`` and ``import api`` work when tests
are run from the repository root or other locations.
"""

import os
import sys

import pytest

# Project root = parent directory of this tests/ folder
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


@pytest.fixture
def store(tmp_path):
    """A job store rooted in a fresh temp directory."""
    from compilejobs.jobs.store import FilePersistenceStore

    return FilePersistenceStore(tmp_path / "compilation-jobs")
