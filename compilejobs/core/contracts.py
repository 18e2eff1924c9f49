from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import Any, TextIO


@dataclass(frozen=True)
class CreateJobRequest:
    name: str
    site_name: str
    server_name: str
    token: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "CreateJobRequest":
        return cls(
            name=d.get("name"),
            site_name=d.get("siteName", d.get("site_name")),
            server_name=d.get("serverName", d.get("server_name")),
            token=d.get("token") or "",
        )


class PersistenceStore(abc.ABC):
    """Contract every job persistence backend satisfies.

    Documents are plain JSON-compatible dicts; a document's properties.id is
    the job id. Failures are raised as compilejobs.jobs.errors.JobStoreError
    subclasses.
    """

    @abc.abstractmethod
    def enumerate(self) -> list[dict[str, Any]]:
        """Return every job document the store can load."""

    @abc.abstractmethod
    def create(self, request: CreateJobRequest) -> dict[str, Any]:
        ...

    @abc.abstractmethod
    def get(self, job_id: str) -> dict[str, Any]:
        ...

    @abc.abstractmethod
    def update(self, document: dict[str, Any]) -> dict[str, Any]:
        """Replace a job's document. The job must already exist."""

    @abc.abstractmethod
    def delete(self, job_id: str) -> None:
        ...

    @abc.abstractmethod
    def create_file_metadata(self, document: dict[str, Any]) -> dict[str, Any]:
        ...

    def update_file_metadata(self, document: dict[str, Any]) -> dict[str, Any]:
        # just overwrite the metadata file
        return self.create_file_metadata(document)

    @abc.abstractmethod
    def open_log_append_stream(self, job_id: str) -> TextIO:
        """Open the job log for appending. The caller closes the handle."""

    @abc.abstractmethod
    def read_log(self, job_id: str) -> str:
        ...

    # camelCase names of the same contract
    def getAllJobs(self) -> list[dict[str, Any]]:  # noqa: N802
        return self.enumerate()

    def createJob(self, args: dict[str, Any]) -> dict[str, Any]:  # noqa: N802
        return self.create(CreateJobRequest.from_dict(args))

    def getJob(self, args: dict[str, Any]) -> dict[str, Any]:  # noqa: N802
        return self.get(args["jobId"])

    def updateJob(self, document: dict[str, Any]) -> dict[str, Any]:  # noqa: N802
        return self.update(document)

    def deleteJob(self, args: dict[str, Any]) -> None:  # noqa: N802
        self.delete(args["jobId"])

    def updateFileMetadata(self, document: dict[str, Any]) -> dict[str, Any]:  # noqa: N802
        return self.update_file_metadata(document)

    def getLogStream(self, args: dict[str, Any]) -> TextIO:  # noqa: N802
        return self.open_log_append_stream(args["id"])

    def readLog(self, args: dict[str, Any]) -> str:  # noqa: N802
        return self.read_log(args["id"])
