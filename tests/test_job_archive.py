from __future__ import annotations

import json
import zipfile
from pathlib import Path

import pytest

from compilejobs.core.contracts import CreateJobRequest
from compilejobs.jobs.archive import export_job, import_job
from compilejobs.jobs.errors import NotFound, StorageReadError, StorageWriteError
from compilejobs.jobs.store import FilePersistenceStore


def test_export_then_import_into_another_store(store: FilePersistenceStore, tmp_path: Path) -> None:
    doc = store.create(CreateJobRequest(name="Site1", site_name="s1", server_name="srv1"))
    job_id = doc["properties"]["id"]
    store.append_log(job_id, "compiled 3 pages\n")

    archive = export_job(store, job_id, tmp_path / "exports" / f"{job_id}.zip")

    with zipfile.ZipFile(archive) as z:
        names = set(z.namelist())
    assert names == {f"{job_id}/{job_id}.json", f"{job_id}/{job_id}.log"}

    other = FilePersistenceStore(tmp_path / "other-root")
    imported = import_job(other, archive)

    assert imported == doc
    assert other.read_log(job_id) == "compiled 3 pages\n"


def test_export_missing_job_raises_not_found(store: FilePersistenceStore, tmp_path: Path) -> None:
    with pytest.raises(NotFound):
        export_job(store, "job123456", tmp_path / "x.zip")


def test_import_rejects_path_traversal(store: FilePersistenceStore, tmp_path: Path) -> None:
    bad = tmp_path / "bad.zip"
    with zipfile.ZipFile(bad, "w") as z:
        z.writestr("job123456/job123456.json", "{}")
        z.writestr("../evil.txt", "x")

    with pytest.raises(StorageWriteError):
        import_job(store, bad)
    assert not (tmp_path / "evil.txt").exists()


def test_import_rejects_non_job_folder(store: FilePersistenceStore, tmp_path: Path) -> None:
    bad = tmp_path / "bad.zip"
    with zipfile.ZipFile(bad, "w") as z:
        z.writestr("notes/readme.txt", "x")

    with pytest.raises(StorageWriteError):
        import_job(store, bad)


def test_import_non_zip_raises_read_error(store: FilePersistenceStore, tmp_path: Path) -> None:
    bad = tmp_path / "bad.zip"
    bad.write_text("not a zip", encoding="utf-8")

    with pytest.raises(StorageReadError):
        import_job(store, bad)


def test_import_rejects_job_that_already_exists(store: FilePersistenceStore, tmp_path: Path) -> None:
    doc = store.create(CreateJobRequest(name="Site1", site_name="s1", server_name="srv1"))
    job_id = doc["properties"]["id"]
    archive = export_job(store, job_id, tmp_path / "job.zip")

    store.update(dict(doc, status="RUNNING"))

    with pytest.raises(StorageWriteError):
        import_job(store, archive)
    assert store.get(job_id)["status"] == "RUNNING"


def test_import_rejects_top_level_file(store: FilePersistenceStore, tmp_path: Path) -> None:
    bad = tmp_path / "bad.zip"
    with zipfile.ZipFile(bad, "w") as z:
        z.writestr("job123456", "{}")

    with pytest.raises(StorageWriteError):
        import_job(store, bad)
    assert not (store.jobs_root / "job123456").exists()


def test_import_rejects_metadata_for_another_job(store: FilePersistenceStore, tmp_path: Path) -> None:
    bad = tmp_path / "bad.zip"
    with zipfile.ZipFile(bad, "w") as z:
        z.writestr("job123456/job123456.json", json.dumps({"name": "x", "properties": {"id": "job654321"}}))

    with pytest.raises(StorageReadError):
        import_job(store, bad)
