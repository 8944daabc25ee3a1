# ============================================================================
# SOURCEFILE: cli.py
# RELPATH: file_bundle/src/fbundle/cli.py
# PROJECT: FileBundle v1.0
# VERSION: 1.0.0
# STATUS: In Development
# ============================================================================

"""Command-Line Interface for FileBundle."""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from fbundle.bundler import FileBundler
from fbundle.config import BundleConfig, ConfigManager
from fbundle.exceptions import FileBundleError
from fbundle.logging import StructuredLogger, configure_console_logging, configure_utf8_logging

__version__ = "1.0.0"

EPILOG = """\
examples:
  Bundle all .txt files in the current directory:
    fbundle -f '---' -g '*.txt'

  Bundle .rs files, excluding test files, from a specific directory:
    fbundle -f '//' -s ./src -g '**/*.rs' -g '!**/*_test.rs'

  Custom name and a two-line separator:
    fbundle -n my_bundle -f '---FILE---\\n>>' -g '**/*.md'

  Several include and exclude patterns:
    fbundle -f '#' -g '**/*.{js,ts}' -g '!**/node_modules/**' -g '!**/dist/**'

Patterns are case-insensitive and evaluated in order; the last pattern that
matches a file decides, and files matched by no pattern are left out.
"""


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    parser = argparse.ArgumentParser(
        prog="fbundle",
        description=(
            "Bundle files from a source directory into a single output file. "
            "Each file's content is preceded by the separator and its path "
            "relative to the source directory."
        ),
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("-n", "--bundle-name", help="output bundle name (default: file_bundle)")
    parser.add_argument("-s", "--src-dir", type=Path, help="directory to search (default: .)")
    parser.add_argument("-o", "--out-dir", type=Path, help="directory for the bundle (default: .)")
    parser.add_argument("-e", "--dst-ext", help="bundle file extension (default: .txt)")
    parser.add_argument("-f", "--file-sep",
                        help="separator written before each file path; '\\n' becomes a newline")
    parser.add_argument("-g", "--src-globs", action="append", metavar="PATTERN",
                        help="glob selecting files; prefix with '!' to exclude; repeatable")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable verbose output")

    parser.add_argument("-j", "--jobs", type=int,
                        help="parallel workers (0 = CPU count, 1 = sequential and ordered)")
    parser.add_argument("--respect-ignore-files", action="store_true", default=None,
                        help="honour .gitignore and .ignore files")
    parser.add_argument("--no-hidden", dest="include_hidden", action="store_false", default=None,
                        help="skip dot-files and dot-directories")
    parser.add_argument("--follow-links", action="store_true", default=None,
                        help="descend into symlinked directories")
    parser.add_argument("--skip-bad-globs", dest="skip_invalid_patterns",
                        action="store_true", default=None,
                        help="warn about malformed globs instead of failing")
    parser.add_argument("--config", type=Path, help="JSON configuration file")
    parser.add_argument("--log-dir", type=Path, help="write a JSON session log to this directory")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser


def resolve_config(args: argparse.Namespace) -> BundleConfig:
    """Merge the optional config file with command-line values."""
    manager = ConfigManager(str(args.config) if args.config else None)
    return BundleConfig.from_sources(manager, {
        "bundle_name": args.bundle_name,
        "src_dir": args.src_dir,
        "out_dir": args.out_dir,
        "dst_ext": args.dst_ext,
        "file_sep": args.file_sep,
        "src_globs": args.src_globs,
        "jobs": args.jobs,
        "respect_ignore_files": args.respect_ignore_files,
        "include_hidden": args.include_hidden,
        "follow_links": args.follow_links,
        "skip_invalid_patterns": args.skip_invalid_patterns,
        "log_dir": str(args.log_dir) if args.log_dir else None,
        "verbose": args.verbose,
    })


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    configure_utf8_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_console_logging(args.verbose)

    try:
        config = resolve_config(args)
        if config.verbose:
            print(f"Glob patterns: {list(config.src_globs)}")

        structured_logger = StructuredLogger(str(config.log_dir)) if config.log_dir else None
        bundler = FileBundler(config, structured_logger)
        if config.verbose:
            print(f"Source directory: {config.src_dir}")
        result = bundler.run()

        if config.verbose:
            print(f"Total files processed: {result.selected}")
            if result.non_utf8 or result.unreadable:
                print(f"  Non-UTF-8 (empty body): {result.non_utf8}")
                print(f"  Unreadable (left out): {result.unreadable}")
        print(f"Bundle created at: {result.output_path}")
        sys.exit(0)

    except KeyboardInterrupt:
        print("\nOperation cancelled by user.", file=sys.stderr)
        sys.exit(130)

    except FileBundleError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()


# ============================================================================
# STATUS: In Development
# DEPENDENCIES: bundler.py, config.py, exceptions.py, logging.py
# TESTS: tests/integration/test_cli.py
# ============================================================================
