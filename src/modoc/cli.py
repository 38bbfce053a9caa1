"""Command line entry point.

Retrieves documentation records from a metadata snapshot and writes them as
JSON for a renderer to consume:

    modoc snapshot.json MyApp.Server MyApp.Worker \\
        --source-root /src/my_app \\
        --source-url "https://example.com/my_app/blob/main/%{path}#L%{line}"
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from .config import RetrieverConfig
from .errors import RetrieverError
from .json_provider import JsonMetadataProvider
from .retriever import retrieve_modules

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="modoc", description="Build documentation records from module metadata."
    )
    parser.add_argument("snapshot", type=Path, help="JSON metadata snapshot")
    parser.add_argument(
        "modules", nargs="*", help="Modules to document (default: all in the snapshot)"
    )
    parser.add_argument("--source-root", help="Make source paths relative to this directory")
    parser.add_argument("--source-url", help="Source URL pattern with %%{path} and %%{line}")
    parser.add_argument("--workers", type=int, help="Parallel module extractions")
    parser.add_argument("--output", type=Path, help="Write JSON here instead of stdout")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def _config(args: argparse.Namespace) -> RetrieverConfig:
    """Environment settings, overridden by explicit flags."""
    config = RetrieverConfig.from_env()
    overrides = {}
    if args.source_root is not None:
        overrides["source_root"] = args.source_root
    if args.source_url is not None:
        overrides["source_url_pattern"] = args.source_url
    if args.workers is not None:
        overrides["max_workers"] = args.workers
    return RetrieverConfig(**{**config.model_dump(), **overrides})


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = _config(args)
        provider = JsonMetadataProvider.from_path(args.snapshot)
    except (ValidationError, OSError) as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1

    modules = args.modules or provider.module_ids()
    try:
        records = retrieve_modules(modules, provider, config)
    except RetrieverError as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1

    output = json.dumps([r.to_dict() for r in records], indent=2, sort_keys=True)
    if args.output:
        args.output.write_text(output + "\n")
        log.info(f"Wrote {len(records)} modules to {args.output}")
    else:
        print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
