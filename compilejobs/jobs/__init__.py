"""Filesystem-backed job store.

Purpose:
- Persist compilation job metadata and logs outside any long-running process.
- Keep everything under <jobs_root>/<job_id>/ so a restart can recover state by
  listing the directory.

There is no cache, index or background worker: every call is a direct
filesystem read or write.
"""
