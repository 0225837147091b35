from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING, Any

from dotenv import load_dotenv

from docwrite.app import apply_operations, count_documents
from docwrite.config import configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Batch document writes")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    apply = subparsers.add_parser("apply", help="Run an NDJSON file of write operations")
    apply.add_argument("file", type=str, help="Operation file, or '-' to read stdin")
    apply.add_argument("--collection", type=str, required=True, help="Target collection")
    apply.add_argument(
        "--unordered",
        action="store_true",
        help="Merge same-kind operations and continue past failures",
    )
    apply.add_argument(
        "--transaction",
        action="store_true",
        help="Run every operation inside one transaction (aborted on failure)",
    )

    count = subparsers.add_parser("count", help="Count documents in a collection")
    count.add_argument("--collection", type=str, required=True, help="Collection to count")
    count.add_argument(
        "--selector",
        type=str,
        help="JSON selector restricting which documents are counted",
    )

    return parser.parse_args(list(argv))


def _parse_selector(value: str | None) -> dict[str, Any] | None:
    if value is None:
        return None
    try:
        selector = json.loads(value)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON selector: {value}") from exc
    if not isinstance(selector, dict):
        raise ValueError("Selector must be a JSON object")
    return selector


def _read_lines(path: str) -> list[str]:
    if path == "-":
        return sys.stdin.read().splitlines()
    try:
        return Path(path).read_text(encoding="utf-8").splitlines()
    except OSError as exc:
        raise ValueError(f"Cannot read operation file {path}: {exc}") from exc


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    load_dotenv()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        if parsed_args.command == "apply":
            lines = _read_lines(parsed_args.file)
            result = apply_operations(
                lines,
                collection=parsed_args.collection,
                ordered=not parsed_args.unordered,
                transactional=parsed_args.transaction,
            )
            log.info("Applied %d request(s) in %d batch(es)", result.dispatched, result.batches)
        elif parsed_args.command == "count":
            total = count_documents(
                collection=parsed_args.collection,
                selector=_parse_selector(parsed_args.selector),
            )
            sys.stdout.write(f"{total}\n")
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error while writing documents")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    signal(SIGINT, sigint_handler)
    main()
