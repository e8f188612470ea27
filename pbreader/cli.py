"""
Inspect .pb files from the command line.

Usage:
  pb-inspect [PATH] [--max-files N] [--json OUT] [--log-level LEVEL]

PATH is a single .pb file or a directory of them (default: PB_FILES_DIR).
Exit status is 0 when every file parsed, 1 when some did not, 2 when PATH
does not exist.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import sentry_sdk

from . import config
from .errors import InvariantViolation, PBError, describe_error
from .utils.formatting import format_budget, format_int, format_vote_length
from .utils.pb_utils import load_instance, pb_folder, summarize_instance

logger = logging.getLogger(__name__)


def inspect_file(path: Path) -> Dict[str, Any]:
    try:
        summary = summarize_instance(load_instance(path), path.name)
    except (PBError, InvariantViolation) as e:
        logger.warning("Failed to parse %s: %s", path, e)
        return {"file_name": path.name, "ok": False, **describe_error(e)}
    return {"ok": True, **summary}


def collect_files(path: Path, max_files: Optional[int] = None) -> List[Path]:
    if path.is_file():
        return [path]
    files = sorted(path.glob("*.pb"))
    if max_files:
        files = files[:max_files]
    return files


def print_result(result: Dict[str, Any]) -> None:
    print(f"\nFile: {result['file_name']}")
    if not result["ok"]:
        print(f"  ERROR {result['error']}: {result['message']}")
        return
    print(f"  Title: {result['title']}")
    print(
        f"  Projects: {format_int(result['num_projects'])}"
        f"  Votes: {format_int(result['num_votes'])}"
    )
    print(f"  Budget: {format_budget(result['currency'], result['budget'])}")
    print(f"  Vote type: {result['vote_type']}  Rule: {result['rule_raw']}")
    print(f"  Average vote length: {format_vote_length(result['vote_length'])}")


def print_summary(results: List[Dict[str, Any]]) -> None:
    failed = [r for r in results if not r["ok"]]
    print("\n" + "=" * 60)
    print(f"Files processed: {len(results)}")
    print(f"Valid files: {len(results) - len(failed)}")
    print(f"Invalid files: {len(failed)}")
    print("=" * 60)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pb-inspect", description="Parse and summarize Pabulib .pb files"
    )
    parser.add_argument("path", nargs="?", help="a .pb file or a directory")
    parser.add_argument("--max-files", type=int, default=None)
    parser.add_argument("--json", dest="json_out", help="write all results to this file")
    parser.add_argument("--log-level", default=None)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    config.load_env()
    args = build_parser().parse_args(argv)
    config.configure_logging(args.log_level)
    config.init_sentry()

    path = Path(args.path) if args.path else pb_folder()
    if not path.exists():
        print(f"ERROR: {path} is not a valid file or directory", file=sys.stderr)
        return 2

    files = collect_files(path, args.max_files)
    if not files:
        print(f"No .pb files found in {path}")
        return 0

    results: List[Dict[str, Any]] = []
    for f in files:
        try:
            result = inspect_file(f)
        except Exception as e:
            sentry_sdk.capture_exception(e)
            raise
        results.append(result)
        print_result(result)
    print_summary(results)

    if args.json_out:
        with open(args.json_out, "w", encoding="utf-8") as out:
            json.dump(results, out, indent=2, ensure_ascii=False)
        print(f"\nFull results saved to: {args.json_out}")

    return 0 if all(r["ok"] for r in results) else 1


if __name__ == "__main__":
    sys.exit(main())
