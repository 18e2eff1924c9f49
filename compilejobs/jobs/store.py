from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path
from typing import Any, TextIO

from compilejobs.config import get_jobs_root
from compilejobs.core.contracts import CreateJobRequest, PersistenceStore
from compilejobs.jobs.errors import NotFound, StorageReadError, StorageWriteError
from compilejobs.jobs.types import JOB_ID_PREFIX, JobMetadata, document_job_id, new_job_id

logger = logging.getLogger(__name__)

MAX_ID_ATTEMPTS = 10


def write_json(path: Path, obj: Any) -> None:
    path.write_text(json.dumps(obj, indent=2, ensure_ascii=False), encoding="utf-8")


def read_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


class FilePersistenceStore(PersistenceStore):
    """Job store keeping one directory per job under ``jobs_root``.

    Layout::

        <jobs_root>/<job_id>/<job_id>.json   metadata document
        <jobs_root>/<job_id>/<job_id>.log    append-only log

    Every call reads or writes the filesystem directly. There is no locking:
    concurrent updates of the same job are last-writer-wins, and documents are
    overwritten in place, so a crash mid-write can leave a torn file.
    """

    def __init__(self, jobs_root: str | Path | None = None, *, check_collisions: bool = False) -> None:
        self.jobs_root = Path(jobs_root) if jobs_root is not None else get_jobs_root()
        self.check_collisions = check_collisions
        self.ensure_root()

    def ensure_root(self) -> Path:
        self.jobs_root.mkdir(parents=True, exist_ok=True)
        return self.jobs_root

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------
    def job_dir(self, job_id: str) -> Path:
        job_id = str(job_id)
        # The id is used as a directory name, so it must be a single path component.
        if not job_id or job_id in {".", ".."} or Path(job_id).name != job_id:
            logger.info("FilePersistenceStore.job_dir(): invalid job id: %r", job_id)
            raise NotFound(f"invalid job id: {job_id!r}", job_id=job_id)
        return self.jobs_root / job_id

    def metadata_path(self, job_id: str) -> Path:
        return self.job_dir(job_id) / f"{job_id}.json"

    def log_path(self, job_id: str) -> Path:
        return self.job_dir(job_id) / f"{job_id}.log"

    # ------------------------------------------------------------------
    # Enumeration
    # ------------------------------------------------------------------
    def enumerate(self, *, stop_on_error: bool = False) -> list[dict[str, Any]]:
        """Load every job document under the root, one at a time.

        Best-effort: a job whose metadata cannot be loaded is logged and
        skipped. With ``stop_on_error=True`` enumeration instead ends at the
        first failure and returns what was loaded before it.
        """
        if not self.jobs_root.exists():
            return []

        job_ids = [p.name for p in self.jobs_root.iterdir() if p.name.startswith(JOB_ID_PREFIX)]

        documents: list[dict[str, Any]] = []
        for job_id in job_ids:
            try:
                documents.append(self.get(job_id))
            except (NotFound, StorageReadError) as exc:
                if stop_on_error:
                    logger.warning(
                        "FilePersistenceStore.enumerate(): failed to get all jobs, "
                        "returning %d loaded before %s (%s)",
                        len(documents),
                        job_id,
                        exc.error_message,
                    )
                    break
                logger.warning("FilePersistenceStore.enumerate(): skipping job %s (%s)", job_id, exc.error_message)
        return documents

    # ------------------------------------------------------------------
    # Job CRUD
    # ------------------------------------------------------------------
    def _allocate_job_id(self) -> str:
        job_id = new_job_id()
        if not self.check_collisions:
            # A duplicate id overwrites the existing job.
            return job_id

        for _ in range(MAX_ID_ATTEMPTS):
            if not self.job_dir(job_id).exists():
                return job_id
            logger.info("FilePersistenceStore.create(): id %s already in use, regenerating", job_id)
            job_id = new_job_id()

        message = f"FilePersistenceStore.create(): no free job id after {MAX_ID_ATTEMPTS} attempts"
        logger.error(message)
        raise StorageWriteError(message)

    def create(
        self,
        request: CreateJobRequest | None = None,
        *,
        name: str | None = None,
        site_name: str | None = None,
        server_name: str | None = None,
        token: str = "",
    ) -> dict[str, Any]:
        if request is None:
            request = CreateJobRequest(name=name, site_name=site_name, server_name=server_name, token=token or "")

        job_id = self._allocate_job_id()
        metadata = JobMetadata(
            job_id=job_id,
            name=request.name,
            site_name=request.site_name,
            server_name=request.server_name,
            token=request.token or "",
        )

        job_dir = self.job_dir(job_id)
        try:
            job_dir.mkdir(exist_ok=True)
        except OSError as exc:
            logger.error("FilePersistenceStore.create(): failed to create job directory for: %s", job_id)
            raise StorageWriteError(f"failed to create job directory for {job_id}: {exc}", job_id=job_id) from exc

        document = metadata.to_dict()
        try:
            write_json(self.metadata_path(job_id), document)
        except (OSError, TypeError, ValueError) as exc:
            logger.error("FilePersistenceStore.create(): failed to write %s.json file for: %s", job_id, job_id)
            raise StorageWriteError(f"failed to write metadata for {job_id}: {exc}", job_id=job_id) from exc

        logger.info("Created job %s (%s)", job_id, request.name)
        return document

    def _exists(self, op: str, path: Path, job_id: str) -> bool:
        try:
            return path.exists()
        except OSError as exc:
            # e.g. PermissionError on a job directory without execute permission
            logger.error("FilePersistenceStore.%s(): failed to stat %s", op, path)
            raise StorageReadError(f"failed to access {path.name} for {job_id}: {exc}", job_id=job_id) from exc

    def get(self, job_id: str) -> dict[str, Any]:
        path = self.metadata_path(job_id)
        if not self._exists("get", path, job_id):
            message = f"FilePersistenceStore.get(): no job data available for job: {job_id}"
            logger.info(message)
            raise NotFound(message, job_id=job_id)

        try:
            document = read_json(path)
        except OSError as exc:
            logger.error("FilePersistenceStore.get(): failed to read %s", path)
            raise StorageReadError(f"failed to read metadata for {job_id}: {exc}", job_id=job_id) from exc
        except ValueError as exc:
            # JSONDecodeError and UnicodeDecodeError are both ValueErrors.
            logger.error("FilePersistenceStore.get(): failed to parse %s", path)
            raise StorageReadError(f"failed to parse metadata for {job_id}: {exc}", job_id=job_id) from exc

        if not isinstance(document, dict):
            logger.error("FilePersistenceStore.get(): %s is not a JSON object", path)
            raise StorageReadError(f"metadata for {job_id} is not a JSON object", job_id=job_id)
        return document

    def _write_document(self, op: str, document: dict[str, Any]) -> dict[str, Any]:
        job_id = document_job_id(document)
        if job_id is None:
            message = f"FilePersistenceStore.{op}(): document has no properties.id"
            logger.error(message)
            raise NotFound(message)

        try:
            write_json(self.metadata_path(job_id), document)
        except (OSError, TypeError, ValueError) as exc:
            logger.error("FilePersistenceStore.%s(): failed to write %s.json file for: %s", op, job_id, job_id)
            raise StorageWriteError(f"failed to write metadata for {job_id}: {exc}", job_id=job_id) from exc
        return document

    def update(self, document: dict[str, Any]) -> dict[str, Any]:
        """Overwrite a job's metadata with ``document`` verbatim.

        This is a full replace: fields missing from ``document`` are dropped.
        """
        job_id = document_job_id(document)
        if job_id is None:
            message = "FilePersistenceStore.update(): document has no properties.id"
            logger.error(message)
            raise NotFound(message)

        # raises NotFound / StorageReadError if the job isn't readable
        self.get(job_id)
        return self._write_document("update", document)

    def delete(self, job_id: str) -> None:
        job_dir = self.job_dir(job_id)
        try:
            if job_dir.exists():
                shutil.rmtree(job_dir)
                logger.info("Deleted job %s", job_id)
        except OSError as exc:
            logger.error("FilePersistenceStore.delete(): failed to delete job folder for: %s", job_id)
            raise StorageWriteError(f"failed to delete job folder for {job_id}: {exc}", job_id=job_id) from exc

    def create_file_metadata(self, document: dict[str, Any]) -> dict[str, Any]:
        return self._write_document("create_file_metadata", document)

    # ------------------------------------------------------------------
    # Logs
    # ------------------------------------------------------------------
    def open_log_append_stream(self, job_id: str) -> TextIO:
        path = self.log_path(job_id)
        try:
            return path.open("a", encoding="utf-8", newline="")
        except OSError as exc:
            logger.error("FilePersistenceStore.open_log_append_stream(): failed to create log stream for: %s", job_id)
            raise StorageWriteError(f"failed to open log for {job_id}: {exc}", job_id=job_id) from exc

    def append_log(self, job_id: str, text: str) -> None:
        with self.open_log_append_stream(job_id) as stream:
            try:
                stream.write(text)
            except OSError as exc:
                logger.error("FilePersistenceStore.append_log(): failed to write log for: %s", job_id)
                raise StorageWriteError(f"failed to write log for {job_id}: {exc}", job_id=job_id) from exc

    def read_log(self, job_id: str) -> str:
        path = self.log_path(job_id)
        if not self._exists("read_log", path, job_id):
            message = f"FilePersistenceStore.read_log(): no log file available for job: {job_id}"
            logger.info(message)
            raise NotFound(message, job_id=job_id)

        try:
            with path.open("r", encoding="utf-8", newline="") as f:
                return f.read()
        except (OSError, ValueError) as exc:
            logger.error("FilePersistenceStore.read_log(): failed to read log file for: %s", job_id)
            raise StorageReadError(f"failed to read log for {job_id}: {exc}", job_id=job_id) from exc
