from __future__ import annotations

import random
import re
from dataclasses import dataclass, field
from typing import Any

JOB_ID_PREFIX = "job"
JOB_ID_MIN = 100000
JOB_ID_MAX = 999999

STATUS_CREATED = "CREATED"

_JOB_ID_RE = re.compile(r"^job\d{6}$")


def new_job_id() -> str:
    """Generate a job id: "job" + a pseudo-random 6-digit number."""
    return f"{JOB_ID_PREFIX}{random.randint(JOB_ID_MIN, JOB_ID_MAX)}"


def is_job_id(value: str) -> bool:
    return bool(_JOB_ID_RE.match(str(value)))


@dataclass
class JobMetadata:
    """Metadata document persisted as <job_id>/<job_id>.json.

    The JSON form uses camelCase keys (siteName, serverName) to stay
    compatible with documents written by other store backends.
    """

    job_id: str
    name: str
    site_name: str
    server_name: str
    token: str = ""
    status: str = STATUS_CREATED
    progress: float = 0
    # Extra entries of "properties" besides "id".
    extra_properties: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "siteName": self.site_name,
            "serverName": self.server_name,
            "token": self.token,
            "status": self.status,
            "progress": self.progress,
            "properties": {**self.extra_properties, "id": self.job_id},
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "JobMetadata":
        props = d.get("properties")
        props = dict(props) if isinstance(props, dict) else {}
        job_id = props.pop("id", None)
        if not job_id:
            raise ValueError("metadata document has no properties.id")
        return cls(
            job_id=str(job_id),
            name=d.get("name"),
            site_name=d.get("siteName"),
            server_name=d.get("serverName"),
            token=d.get("token") or "",
            status=d.get("status", STATUS_CREATED),
            progress=d.get("progress", 0),
            extra_properties=props,
        )


def document_job_id(document: dict[str, Any]) -> str | None:
    """Return properties.id of a metadata document, or None if absent."""
    props = document.get("properties") if isinstance(document, dict) else None
    if not isinstance(props, dict):
        return None
    job_id = props.get("id")
    return str(job_id) if job_id else None
