"""Zip export/import of a single job directory.

Archives hold paths relative to the jobs root, so every member starts with
``<job_id>/`` and extracting into another store's root recreates the job.
"""
from __future__ import annotations

import logging
import zipfile
from pathlib import Path, PurePosixPath
from typing import Any

from compilejobs.jobs.errors import NotFound, StorageReadError, StorageWriteError
from compilejobs.jobs.store import FilePersistenceStore
from compilejobs.jobs.types import JobMetadata, is_job_id

logger = logging.getLogger(__name__)


def export_job(store: FilePersistenceStore, job_id: str, dest_zip: str | Path) -> Path:
    job_dir = store.job_dir(job_id)
    if not job_dir.is_dir():
        message = f"export_job(): no job folder available for job: {job_id}"
        logger.info(message)
        raise NotFound(message, job_id=job_id)

    dest = Path(dest_zip)
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(dest, "w", zipfile.ZIP_DEFLATED) as z:
            for file in sorted(job_dir.rglob("*")):
                if file.is_file():
                    z.write(file, file.relative_to(store.jobs_root).as_posix())
    except OSError as exc:
        logger.error("export_job(): failed to write archive %s for: %s", dest, job_id)
        raise StorageWriteError(f"failed to export {job_id}: {exc}", job_id=job_id) from exc

    logger.info("Exported job %s to %s", job_id, dest)
    return dest


def _archive_job_id(names: list[str]) -> str:
    """Return the single job directory every member lives under."""
    tops = set()
    for name in names:
        parts = PurePosixPath(name).parts
        if not parts or parts[0] in {"/", ".."} or ".." in parts or "\\" in name:
            raise StorageWriteError(f"unsafe archive member: {name!r}")
        if len(parts) == 1 and not name.endswith("/"):
            raise StorageWriteError(f"archive member {name!r} is not inside a job folder")
        tops.add(parts[0])

    if len(tops) != 1:
        raise StorageWriteError(f"archive must contain exactly one job folder, found {sorted(tops)}")
    job_id = tops.pop()
    if not is_job_id(job_id):
        raise StorageWriteError(f"archive folder {job_id!r} is not a job folder")
    return job_id


def import_job(store: FilePersistenceStore, src_zip: str | Path) -> dict[str, Any]:
    """Extract a job archive into the store and return its metadata document.

    An archive whose job already exists in the store is rejected; delete the
    job first to replace it.
    """
    src = Path(src_zip)
    if not src.exists():
        message = f"import_job(): no archive at {src}"
        logger.info(message)
        raise NotFound(message)

    try:
        with zipfile.ZipFile(src) as z:
            job_id = _archive_job_id(z.namelist())
            if store.job_dir(job_id).exists():
                raise StorageWriteError(f"job {job_id} already exists", job_id=job_id)
            z.extractall(store.jobs_root)
    except zipfile.BadZipFile as exc:
        logger.error("import_job(): %s is not a zip archive", src)
        raise StorageReadError(f"failed to read archive {src}: {exc}") from exc
    except StorageWriteError as exc:
        logger.error("import_job(): rejected %s (%s)", src, exc.error_message)
        raise
    except OSError as exc:
        logger.error("import_job(): failed to extract %s", src)
        raise StorageWriteError(f"failed to extract {src}: {exc}") from exc

    document = store.get(job_id)
    try:
        metadata = JobMetadata.from_dict(document)
    except ValueError as exc:
        logger.error("import_job(): %s has no job id in its metadata", src)
        raise StorageReadError(f"imported metadata for {job_id} has no properties.id", job_id=job_id) from exc
    if metadata.job_id != job_id:
        logger.error("import_job(): %s holds metadata for %s in folder %s", src, metadata.job_id, job_id)
        raise StorageReadError(f"imported metadata id {metadata.job_id} does not match folder {job_id}", job_id=job_id)

    logger.info("Imported job %s (%s) from %s", job_id, metadata.name, src)
    return document
