"""
Command line entry points for the merge and split tools.
"""
import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from pdflyer.config import EditorConfig, load_config
from pdflyer.core.document.exporter import save_to_path
from pdflyer.core.document.loader import PDF_MEDIA_TYPE, DocumentLoader
from pdflyer.core.document.tools import (
    bundle_split,
    merge_documents,
    parse_page_ranges,
    split_document,
)
from pdflyer.core.errors import DocumentLoadError, EditorError

logger = logging.getLogger(__name__)

COMMANDS = ("merge", "split")


def setup_logging(level: Optional[str] = None):
    """Configure logging; the level defaults to ``PDFLYER_LOG_LEVEL`` or INFO."""
    level = level or os.environ.get("PDFLYER_LOG_LEVEL", "INFO")
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stderr),
        ]
    )


def build_parser(config: EditorConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pdflyer",
        description="Pdflyer PDF tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Concatenate PDFs
  pdflyer merge a.pdf b.pdf -o merged.pdf

  # One file per page
  pdflyer split report.pdf -o pages/

  # Page ranges, bundled into a zip archive
  pdflyer split report.pdf --ranges "1-3, 5" --zip
        """
    )
    parser.add_argument("--log-level", default=None, help="Logging level")
    subparsers = parser.add_subparsers(dest="command", required=True)

    merge = subparsers.add_parser("merge", help="Concatenate PDFs in order")
    merge.add_argument("inputs", nargs="+", help="PDF files to merge")
    merge.add_argument("-o", "--output", default=config.merge_file_name,
                       help="Output file (default: %(default)s)")

    split = subparsers.add_parser("split", help="Split a PDF into several files")
    split.add_argument("input", help="PDF file to split")
    split.add_argument("--ranges", default=None,
                       help='Page ranges such as "1-3, 5, 7-9" (default: every page)')
    split.add_argument("-o", "--output", default=".", help="Output directory")
    split.add_argument("--zip", action="store_true",
                       help="Bundle several outputs into one zip archive")
    return parser


def _read(path: str) -> bytes:
    try:
        with open(path, 'rb') as f:
            return f.read()
    except OSError as e:
        raise DocumentLoadError(f"Could not read {path}: {e.strerror}") from e


def run_merge(args, config: EditorConfig) -> None:
    data = merge_documents([_read(path) for path in args.inputs])
    save_to_path(data, args.output)
    print(f"Merged {len(args.inputs)} files into {args.output}")


def run_split(args, config: EditorConfig) -> None:
    data = _read(args.input)
    name = os.path.basename(args.input)

    ranges = None
    if args.ranges:
        document = DocumentLoader(config).load_bytes(data, PDF_MEDIA_TYPE, name)
        total = document.page_count
        document.close()
        ranges = parse_page_ranges(args.ranges, total)

    parts = split_document(data, name, ranges)
    if args.zip:
        parts = [bundle_split(parts, name)]

    output_dir = Path(args.output)
    output_dir.mkdir(parents=True, exist_ok=True)
    for part in parts:
        save_to_path(part.data, str(output_dir / part.name))
        print(f"Wrote {output_dir / part.name}")


def run(argv: List[str], config: Optional[EditorConfig] = None) -> int:
    """
    Run a tool command.

    Returns:
        Process exit code
    """
    config = config or load_config()
    args = build_parser(config).parse_args(argv)
    if args.log_level:
        logging.getLogger().setLevel(getattr(logging, args.log_level.upper(), logging.INFO))

    handlers = {"merge": run_merge, "split": run_split}
    try:
        handlers[args.command](args, config)
    except EditorError as e:
        logger.error("%s failed: %s", args.command, e.message)
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    except OSError as e:
        logger.error("%s failed: %s", args.command, e)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0
