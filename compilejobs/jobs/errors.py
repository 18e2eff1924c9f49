"""Errors raised by job stores.

Each error maps onto the {errorCode, errorMessage} pair used at the persistence
contract boundary, with HTTP-style codes (404 not found, 500 internal failure).
"""
from __future__ import annotations

from typing import Any


class JobStoreError(Exception):
    error_code: int = 500

    def __init__(self, message: str, *, job_id: str | None = None) -> None:
        super().__init__(message)
        self.error_message = message
        self.job_id = job_id

    def to_dict(self) -> dict[str, Any]:
        return {"errorCode": self.error_code, "errorMessage": self.error_message}


class NotFound(JobStoreError):
    """The requested job metadata or log does not exist."""

    error_code = 404


class StorageReadError(JobStoreError):
    """Reading or parsing a stored file failed."""


class StorageWriteError(JobStoreError):
    """Creating, writing or deleting a stored file failed."""
