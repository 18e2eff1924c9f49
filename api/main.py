from typing import Any, Dict, List

from fastapi import Body, Depends, FastAPI, HTTPException, Response
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from compilejobs.config import configure_logging
from compilejobs.core.contracts import CreateJobRequest
from compilejobs.jobs.errors import JobStoreError
from compilejobs.jobs.store import FilePersistenceStore
from compilejobs.jobs.types import document_job_id

configure_logging()

app = FastAPI(
    title="Compilation Job Store API",
    description="HTTP access to compilation job metadata and logs persisted on the local filesystem.",
    version="0.1.0",
)


def get_store() -> FilePersistenceStore:
    return FilePersistenceStore()


def _raise_http(exc: JobStoreError):
    raise HTTPException(status_code=exc.error_code, detail=exc.to_dict()) from exc


# Pydantic model for the create request body
class CreateJobBody(BaseModel):
    name: str
    siteName: str
    serverName: str
    token: str = ""


class LogAppendBody(BaseModel):
    text: str


@app.get("/health", summary="Health check", response_description="API health status")
async def health_check():
    """
    Checks the health of the API.
    """
    return {"status": "ok"}


@app.get("/jobs", summary="List jobs")
def list_jobs(store: FilePersistenceStore = Depends(get_store)) -> List[Dict[str, Any]]:
    """
    Returns every job whose metadata could be loaded. Unreadable jobs are skipped.
    """
    return store.enumerate()


@app.post("/jobs", status_code=201, summary="Create a job")
def create_job(body: CreateJobBody, store: FilePersistenceStore = Depends(get_store)):
    req = CreateJobRequest(
        name=body.name,
        site_name=body.siteName,
        server_name=body.serverName,
        token=body.token,
    )
    try:
        return store.create(req)
    except JobStoreError as e:
        _raise_http(e)


@app.get("/jobs/{job_id}", summary="Get a job's metadata")
def get_job(job_id: str, store: FilePersistenceStore = Depends(get_store)):
    try:
        return store.get(job_id)
    except JobStoreError as e:
        _raise_http(e)


@app.put("/jobs/{job_id}", summary="Replace a job's metadata")
def update_job(
    job_id: str,
    document: Dict[str, Any] = Body(...),
    store: FilePersistenceStore = Depends(get_store),
):
    """
    Overwrites the stored document with the request body. Fields left out of the
    body are not kept. properties.id in the body must match the path.
    """
    doc_id = document_job_id(document)
    if doc_id != job_id:
        raise HTTPException(
            status_code=400,
            detail={"errorCode": 400, "errorMessage": f"properties.id {doc_id!r} does not match {job_id!r}"},
        )
    try:
        return store.update(document)
    except JobStoreError as e:
        _raise_http(e)


@app.delete("/jobs/{job_id}", status_code=204, summary="Delete a job")
def delete_job(job_id: str, store: FilePersistenceStore = Depends(get_store)):
    try:
        store.delete(job_id)
    except JobStoreError as e:
        _raise_http(e)
    return Response(status_code=204)


@app.get("/jobs/{job_id}/log", response_class=PlainTextResponse, summary="Read a job's log")
def read_log(job_id: str, store: FilePersistenceStore = Depends(get_store)):
    try:
        return store.read_log(job_id)
    except JobStoreError as e:
        _raise_http(e)


@app.post("/jobs/{job_id}/log", status_code=204, summary="Append to a job's log")
def append_log(job_id: str, body: LogAppendBody, store: FilePersistenceStore = Depends(get_store)):
    try:
        store.append_log(job_id, body.text)
    except JobStoreError as e:
        _raise_http(e)
    return Response(status_code=204)

# To run this API:
# uvicorn api.main:app --reload --port 8000
# Then access http://127.0.0.1:8000/docs for Swagger UI
