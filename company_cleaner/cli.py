"""
Name: Command Line Entry Point

Responsibilities:
  - Run one cleaning run from a terminal or a scheduler
  - Print the run summary (or the reassembled document with --dry-run)
  - Map pipeline failures to exit codes

Collaborators:
  - container: builds the same CleanPageUseCase as the HTTP API
  - config.Settings: credentials validation

Notes:
  - Exit codes: 0 success, 1 run failure, 2 bad input (empty source)
"""

import argparse
import asyncio
import json
import sys
from typing import Optional, Sequence

from . import __version__, container
from .application.use_cases import CleanPageInput, CleanPageOutput
from .config import get_settings
from .exceptions import CleanerError, ConfigurationError, EmptySourceError

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_BAD_INPUT = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="company-cleaner",
        description="Clean a Notion company page into the standard section layout.",
    )
    parser.add_argument("source_id", help="Id of the Notion page to clean")
    parser.add_argument("--company", default=None, help="Company name override")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the reassembled document instead of writing to Notion",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _check_settings(dry_run: bool) -> None:
    settings = get_settings()
    if not dry_run:
        settings.validate_required()
    elif not settings.fake_document_store and not settings.notion_token.strip():
        raise ConfigurationError("NOTION_TOKEN is not configured")


async def _run(args: argparse.Namespace) -> CleanPageOutput:
    use_case = container.get_clean_page_use_case()
    try:
        return await use_case.execute(
            CleanPageInput(
                source_id=args.source_id,
                company_name=args.company,
                dry_run=args.dry_run,
            )
        )
    finally:
        await container.close_clients()


def _summary(output: CleanPageOutput) -> dict:
    return {
        "ok": True,
        "destinationId": output.destination_id,
        "sectionCount": output.section_count,
        "bytesWritten": output.bytes_written,
        "company": output.company_name,
        "blockCount": output.block_count,
        "reused": output.reused,
    }


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        _check_settings(args.dry_run)
        output = asyncio.run(_run(args))
    except CleanerError as e:
        error = e.to_response().to_dict()
        if getattr(e, "document_id", None):
            error["document_id"] = e.document_id
        print(json.dumps({"ok": False, **error}), file=sys.stderr)
        return EXIT_BAD_INPUT if isinstance(e, EmptySourceError) else EXIT_FAILURE

    if args.dry_run and output.document is not None:
        print(output.document.canonical_text())
    print(json.dumps(_summary(output)))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
