"""Command line interface for the i18n extractor."""

from __future__ import annotations

import argparse
import pathlib
import sys
from typing import Iterable, Optional

from .configuration import build_options, get_settings
from .errors import ConfigurationError, I18nExtractError
from .extractor import ExtractionRunner, ExtractionSummary
from .structures import ExtractionOptions


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="i18n-extract",
        description=(
            "Extract hard-coded Chinese text from Vue components into an i18n dictionary "
            "and replace it with $t() lookups."
        ),
    )
    parser.add_argument(
        "scan_dirs",
        nargs="*",
        help="Directories to scan (default: I18N_SCAN_DIRS or ./src).",
    )
    parser.add_argument(
        "-d",
        "--dictionary",
        help="Dictionary JSON file to update (default: ./i18n/zh-CN.json).",
    )
    parser.add_argument(
        "-i",
        "--ignore",
        action="append",
        help="Directory or glob to skip. Repeat for several entries.",
    )
    parser.add_argument(
        "-e",
        "--extension",
        action="append",
        help="File extension to scan (default: .vue). Repeat for several entries.",
    )
    parser.add_argument(
        "--backup",
        action="store_true",
        default=None,
        help="Copy every file to the backup directory before rewriting it.",
    )
    parser.add_argument(
        "--backup-dir",
        help="Directory for backup copies (default: ./i18n-backup).",
    )
    parser.add_argument(
        "--log",
        action="store_true",
        default=None,
        help="Append one line per processed file to the log file.",
    )
    parser.add_argument(
        "--log-path",
        help="Log file path (default: ./i18n-extract.log).",
    )
    parser.add_argument(
        "-k",
        "--key-namer",
        choices=["local", "http", "openai"],
        help="How keys are named: local prefix keys or a remote naming service.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show detailed progress information.",
    )
    parser.add_argument(
        "--debug-provider",
        action="store_true",
        help="Log complete key-naming requests and responses for troubleshooting.",
    )
    return parser


def options_from_args(args: argparse.Namespace) -> ExtractionOptions:
    """Combine layered settings with command line overrides."""

    settings = get_settings()
    return build_options(
        settings,
        scan_dirs=[pathlib.Path(item) for item in args.scan_dirs] or None,
        dictionary_path=pathlib.Path(args.dictionary) if args.dictionary else None,
        ignore=args.ignore,
        extensions=args.extension,
        backup=args.backup,
        backup_dir=pathlib.Path(args.backup_dir) if args.backup_dir else None,
        generate_log=args.log,
        log_path=pathlib.Path(args.log_path) if args.log_path else None,
        key_namer=args.key_namer,
        verbose=args.verbose,
        provider_debug=True if args.debug_provider else None,
    )


def execute_extraction(
    options: ExtractionOptions,
) -> tuple[int, ExtractionSummary | None, str | None]:
    """Execute a run and return the exit code, summary, and message."""

    try:
        options.dictionary_path.parent.mkdir(parents=True, exist_ok=True)
        runner = ExtractionRunner(options)
        summary = runner.run()
    except I18nExtractError as exc:
        return 1, None, f"Error: {exc}"
    except OSError as exc:
        return 1, None, f"Error: {exc}"
    except KeyboardInterrupt:
        return 2, None, "Extraction interrupted by user."

    return 0, summary, None


def print_summary(summary: ExtractionSummary) -> None:
    """Output a friendly report once processing completes."""

    print("\nExtraction completed!")
    print(f"  Processed files: {summary.processed_files} of {summary.scanned_files}")
    print(f"  Extracted texts: {summary.extracted_texts}")
    print(f"  Dictionary:      {summary.dictionary_path} ({summary.dictionary_size} keys)")
    print(f"  Key namer:       {summary.key_namer}")
    print(f"  Elapsed time:    {summary.elapsed_seconds:.2f} seconds")
    if summary.total_errors:
        print("  Notes:")
        for message in summary.error_messages:
            print(f"    - {message}")


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        options = options_from_args(args)
    except ConfigurationError as exc:
        print(exc)
        return 1

    exit_code, summary, message = execute_extraction(options)

    if message:
        print(message, file=sys.stderr)
    if summary:
        print_summary(summary)
    return exit_code


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
