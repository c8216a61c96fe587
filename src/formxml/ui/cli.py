from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from formxml.app import apply_form_submission, purge_owner_objects
from formxml.config import configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)

EXIT_DROPPED_CREATES = 3


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile XML forms with their documents")
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    apply = subparsers.add_parser("apply", help="Apply a form submission to an XML document")
    apply.add_argument(
        "--definition",
        type=Path,
        required=True,
        help="JSON form definition",
    )
    apply.add_argument(
        "--submission",
        type=Path,
        required=True,
        help="JSON submission keyed by element key",
    )
    apply.add_argument(
        "--document",
        type=Path,
        help="Existing XML document (a new document is started when omitted or missing)",
    )
    apply.add_argument(
        "--output",
        type=Path,
        help="Where to write the result (defaults to --document)",
    )
    apply.add_argument(
        "--strict",
        action="store_true",
        help=f"Exit with status {EXIT_DROPPED_CREATES} when create actions were dropped",
    )

    purge = subparsers.add_parser(
        "purge-owner",
        help="Purge every repository object owned by a principal",
    )
    purge.add_argument(
        "owner",
        type=str,
        help="Owner id of the objects to purge",
    )

    args = parser.parse_args(list(argv))
    if args.command == "apply" and args.document is None and args.output is None:
        raise ValueError("apply needs --document or --output to write the result")
    return args


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
    except ValueError:
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)

    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        if parsed_args.command == "apply":
            report = apply_form_submission(
                definition_path=parsed_args.definition,
                submission_path=parsed_args.submission,
                document_path=parsed_args.document,
                output_path=parsed_args.output,
            )
            if parsed_args.strict and not report.complete:
                log.error("%s create action(s) were dropped", len(report.dropped))
                sys.exit(EXIT_DROPPED_CREATES)
        elif parsed_args.command == "purge-owner":
            harness = purge_owner_objects(parsed_args.owner)
            if not harness.passed:
                message = f"Could not purge all objects owned by {parsed_args.owner}"
                raise RuntimeError(message)  # noqa: TRY301
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error running %s", parsed_args.command)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
