"""CLI entrypoint."""

from __future__ import annotations

import argparse
import sys
import time
import uuid
from pathlib import Path

from reduce_store.config import load_config, StoreConfig
from reduce_store.db.repo import make_repository
from reduce_store.errors import StorageRootNotConfigured
from reduce_store.naming.uri_builder import NIL_KEY, UriBuilder
from reduce_store.resources.registry import DEFAULT_KINDS, kind_by_name
from reduce_store.storage.disk_store import LocalDiskStore
from reduce_store.storage.sinks import StreamSink
from reduce_store.util.hashing import content_signature
from reduce_store.util.json import json_dumps_safe
from reduce_store.util.logging import configure_logging
from reduce_store.util.time import as_naive_local, parse_datetime
from reduce_store.watch.monitor import WATCH_PATTERN


def _build_config(base: StoreConfig, args: argparse.Namespace) -> StoreConfig:
    return StoreConfig(
        storage_root=args.storage_root or base.storage_root,
        db_url=args.db_url or base.db_url,
        content_host=base.content_host,
        virtual_path=base.virtual_path,
        watch_enabled=args.command == "watch" or base.watch_enabled,
        poll_seconds=getattr(args, "poll_seconds", None) or base.poll_seconds,
        log_level=args.log_level or base.log_level,
        log_file=base.log_file,
    )


def _open_store(config: StoreConfig) -> LocalDiskStore:
    if not config.storage_root:
        raise StorageRootNotConfigured("Set REDUCE_STORE_ROOT or pass --storage-root")
    repository = make_repository(config.db_url)
    uri_builder = UriBuilder(config.content_host, config.virtual_path)
    return LocalDiskStore(config, uri_builder, repository, kinds=DEFAULT_KINDS)


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--storage-root", help="Storage root override")
    parser.add_argument("--db-url", help="Database URL override")
    parser.add_argument("--log-level", help="Log level override")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="reduce-store")
    subparsers = parser.add_subparsers(dest="command", required=True)

    save_parser = subparsers.add_parser("save", help="Save a file under an artifact URL")
    save_parser.add_argument("--url", required=True, help="Artifact URL")
    save_parser.add_argument("--file", required=True, help="File holding the artifact bytes")
    _add_common(save_parser)

    content_parser = subparsers.add_parser("save-content", help="Save a file, deriving its URL from its content")
    content_parser.add_argument("--file", required=True, help="File holding the artifact bytes")
    content_parser.add_argument("--key", help="Reduction key (random when omitted)")
    content_parser.add_argument("--kind", required=True, help="Resource kind, e.g. css or js")
    _add_common(content_parser)

    send_parser = subparsers.add_parser("send", help="Write a stored artifact to a file or stdout")
    send_parser.add_argument("--url", required=True, help="Artifact URL")
    send_parser.add_argument("--output", help="Output file (stdout when omitted)")
    _add_common(send_parser)

    list_parser = subparsers.add_parser("list", help="List active artifacts as JSON")
    _add_common(list_parser)

    files_parser = subparsers.add_parser("files", help="List stored files with creation dates")
    files_parser.add_argument("--since", help="Only files created after this datetime (ISO)")
    _add_common(files_parser)

    flush_parser = subparsers.add_parser("flush", help="Expire one key, or everything")
    flush_parser.add_argument("key", nargs="?", help="Reduction key (all keys when omitted)")
    _add_common(flush_parser)

    watch_parser = subparsers.add_parser("watch", help="Keep the index in sync with the storage root")
    watch_parser.add_argument("--poll-seconds", type=float, help="Poll interval in seconds")
    _add_common(watch_parser)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    config = _build_config(load_config(), args)
    configure_logging(config.log_level, config.log_file)

    with _open_store(config) as store:
        if args.command == "save":
            store.save(Path(args.file).read_bytes(), args.url)
        elif args.command == "save-content":
            kind = kind_by_name(args.kind, store.kinds)
            if kind is None:
                parser.error(f"unknown kind: {args.kind}")
            data = Path(args.file).read_bytes()
            key = uuid.UUID(args.key) if args.key else uuid.uuid4()
            url = store.uri_builder.build_resource_url(key, content_signature(data), kind)
            store.save(data, url)
            print(url)
        elif args.command == "send":
            if args.output:
                with open(args.output, "wb") as handle:
                    found = store.send_content(args.url, StreamSink(handle))
            else:
                found = store.send_content(args.url, StreamSink(sys.stdout.buffer))
            if not found:
                print(f"not found: {args.url}", file=sys.stderr)
                return 1
        elif args.command == "list":
            print(json_dumps_safe(store.list_active(), indent=2, sort_keys=True))
        elif args.command == "files":
            since = parse_datetime(args.since)
            dated = store.file_wrapper.list_dated_files(store.storage_root, WATCH_PATTERN)
            if since is not None:
                since = as_naive_local(since)
                dated = [item for item in dated if item.created_at > since]
            for item in sorted(dated, key=lambda d: (d.created_at, d.file_name)):
                print(f"{item.created_at.isoformat()} {item.file_name}")
        elif args.command == "flush":
            store.flush(uuid.UUID(args.key) if args.key else NIL_KEY)
        elif args.command == "watch":
            try:
                while True:
                    time.sleep(config.poll_seconds)
            except KeyboardInterrupt:
                pass
    return 0


if __name__ == "__main__":
    sys.exit(main())
