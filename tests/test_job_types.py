from __future__ import annotations

import pytest

from compilejobs.core.contracts import CreateJobRequest
from compilejobs.jobs.errors import NotFound, StorageWriteError
from compilejobs.jobs.types import JobMetadata, document_job_id, is_job_id


def test_metadata_document_shape() -> None:
    meta = JobMetadata(job_id="job123456", name="Site1", site_name="s1", server_name="srv1")

    assert meta.to_dict() == {
        "name": "Site1",
        "siteName": "s1",
        "serverName": "srv1",
        "token": "",
        "status": "CREATED",
        "progress": 0,
        "properties": {"id": "job123456"},
    }


def test_metadata_from_dict_keeps_extra_properties() -> None:
    doc = {
        "name": "Site1",
        "siteName": "s1",
        "serverName": "srv1",
        "token": None,
        "status": "RUNNING",
        "progress": 50,
        "properties": {"id": "job123456", "channel": "web"},
    }
    meta = JobMetadata.from_dict(doc)

    assert meta.job_id == "job123456"
    assert meta.token == ""
    assert meta.to_dict()["properties"] == {"channel": "web", "id": "job123456"}


def test_metadata_from_dict_requires_id() -> None:
    with pytest.raises(ValueError):
        JobMetadata.from_dict({"name": "x"})


@pytest.mark.parametrize(
    "value,expected",
    [("job123456", True), ("job12345", False), ("job1234567", False), ("jobabcdef", False), ("xjob123456", False)],
)
def test_is_job_id(value: str, expected: bool) -> None:
    assert is_job_id(value) is expected


def test_document_job_id() -> None:
    assert document_job_id({"properties": {"id": "job123456"}}) == "job123456"
    assert document_job_id({"properties": {}}) is None
    assert document_job_id({"properties": "job123456"}) is None
    assert document_job_id({}) is None


def test_create_request_from_camel_case() -> None:
    req = CreateJobRequest.from_dict({"name": "Site1", "siteName": "s1", "serverName": "srv1"})
    assert req == CreateJobRequest(name="Site1", site_name="s1", server_name="srv1", token="")


def test_errors_serialize_to_contract_pairs() -> None:
    assert NotFound("gone").to_dict() == {"errorCode": 404, "errorMessage": "gone"}
    assert StorageWriteError("disk full").to_dict() == {"errorCode": 500, "errorMessage": "disk full"}
