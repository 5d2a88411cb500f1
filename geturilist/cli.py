"""Command-line interface for geturilist."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict

import httpx
from pydantic import ValidationError

from .config import NameFormat, Settings, load_settings
from .errors import GetUriListError
from .models import TriggerEvent
from .naming import object_key
from .pipeline import ArchiveJob, handle_event
from .storage import LocalObjectStore

logger = logging.getLogger(__name__)

NAME_FORMATS = [f.value for f in NameFormat]


def _add_run_options(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--storage-root", type=Path, default=None,
        help="Directory holding one sub-directory per bucket (default: GUL_STORAGE_ROOT or .)",
    )
    p.add_argument("--output-bucket", default=None, help="Bucket to write archives to")
    p.add_argument("--name-format", choices=NAME_FORMATS, default=None)
    p.add_argument("--concurrency", type=int, default=None)
    p.add_argument("--sleep-seconds", type=float, default=None)


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    p = argparse.ArgumentParser(
        prog="geturilist",
        description="Fetch every URL in a text/uri-list and archive each response as WARC.",
    )
    p.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    sub = p.add_subparsers(dest="cmd", required=True)

    # --- run ---
    run = sub.add_parser("run", help="Process one uri-list object")
    run.add_argument("bucket", help="Bucket holding the uri-list")
    run.add_argument("name", help="Object name, e.g. batch/urls.txt.gz")
    _add_run_options(run)

    # --- event ---
    event = sub.add_parser("event", help="Handle a JSON storage notification")
    event.add_argument("file", help="Path to the event JSON, or - for stdin")
    _add_run_options(event)

    # --- key ---
    key = sub.add_parser("key", help="Print the output object key for URLs")
    key.add_argument("urls", nargs="+")
    key.add_argument("--name-format", choices=NAME_FORMATS, default=NameFormat.SHA1.value)
    key.add_argument("--prefix", default="")

    return p


def _configure_logging(verbose: bool) -> None:
    """Set up root logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def _settings_from_args(args: argparse.Namespace) -> Settings:
    overrides: Dict[str, Any] = {
        "storage_root": args.storage_root,
        "output_bucket": args.output_bucket,
        "name_format": args.name_format,
        "concurrency": args.concurrency,
        "sleep_seconds": args.sleep_seconds,
    }
    return load_settings(**{k: v for k, v in overrides.items() if v is not None})


def _read_event(path: str) -> TriggerEvent:
    raw = sys.stdin.read() if path == "-" else Path(path).read_text(encoding="utf-8")
    return TriggerEvent.model_validate_json(raw)


def main(argv: list[str] | None = None) -> int:
    """Entry point for the CLI."""
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    if args.cmd == "key":
        for url in args.urls:
            try:
                print(object_key(httpx.URL(url), NameFormat(args.name_format), args.prefix))
            except httpx.InvalidURL as exc:
                logger.error("Invalid url %r: %s", url, exc)
                return 1
        return 0

    try:
        settings = _settings_from_args(args)
        store = LocalObjectStore(settings.storage_root)

        if args.cmd == "run":
            summary = ArchiveJob(settings, store, args.bucket, args.name).run()
        elif args.cmd == "event":
            try:
                event = _read_event(args.file)
            except (OSError, ValidationError) as exc:
                logger.error("Cannot read event %s: %s", args.file, exc)
                return 1
            summary = handle_event(event, settings, store)
            if summary is None:
                return 0
        else:
            return 2
    except GetUriListError as exc:
        logger.error("%s", exc)
        return 1

    print(json.dumps(summary.to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
