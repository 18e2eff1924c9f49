from __future__ import annotations

import argparse
import json
import sys

from compilejobs.config import configure_logging
from compilejobs.core.contracts import CreateJobRequest
from compilejobs.jobs.archive import export_job, import_job
from compilejobs.jobs.errors import JobStoreError
from compilejobs.jobs.store import FilePersistenceStore


def _print_json(obj) -> None:  # noqa: ANN001
    print(json.dumps(obj, ensure_ascii=False))


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Inspect and edit compilation jobs stored under <root>/<job_id>.")
    p.add_argument("--root", type=str, default=None, help="Jobs root directory (defaults to the configured one).")
    p.add_argument("--log-level", type=str, default=None)

    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="Print every job document, one JSON object per line.")

    c = sub.add_parser("create", help="Create a job and print its document.")
    c.add_argument("--name", required=True)
    c.add_argument("--site-name", required=True)
    c.add_argument("--server-name", required=True)
    c.add_argument("--token", default="")

    for cmd in ("show", "delete", "log"):
        s = sub.add_parser(cmd)
        s.add_argument("job_id")

    a = sub.add_parser("append-log", help="Append TEXT to the job log.")
    a.add_argument("job_id")
    a.add_argument("text")

    st = sub.add_parser("set-status", help="Replace status (and optionally progress) of a job.")
    st.add_argument("job_id")
    st.add_argument("status")
    st.add_argument("--progress", type=float, default=None)

    e = sub.add_parser("export", help="Zip a job folder.")
    e.add_argument("job_id")
    e.add_argument("dest")

    i = sub.add_parser("import", help="Extract a job archive into the store.")
    i.add_argument("src")

    return p


def run(args: argparse.Namespace, store: FilePersistenceStore) -> None:
    cmd = args.command
    if cmd == "list":
        for doc in store.enumerate():
            _print_json(doc)
    elif cmd == "create":
        req = CreateJobRequest(
            name=args.name,
            site_name=args.site_name,
            server_name=args.server_name,
            token=args.token,
        )
        _print_json(store.create(req))
    elif cmd == "show":
        _print_json(store.get(args.job_id))
    elif cmd == "delete":
        store.delete(args.job_id)
    elif cmd == "log":
        sys.stdout.write(store.read_log(args.job_id))
    elif cmd == "append-log":
        store.append_log(args.job_id, args.text + "\n")
    elif cmd == "set-status":
        doc = store.get(args.job_id)
        doc["status"] = args.status
        if args.progress is not None:
            doc["progress"] = args.progress
        _print_json(store.update(doc))
    elif cmd == "export":
        print(export_job(store, args.job_id, args.dest))
    elif cmd == "import":
        _print_json(import_job(store, args.src))
    else:
        raise ValueError(f"Unsupported command: {cmd}")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    store = FilePersistenceStore(args.root)
    try:
        run(args, store)
    except JobStoreError as exc:
        print(json.dumps(exc.to_dict(), ensure_ascii=False), file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
