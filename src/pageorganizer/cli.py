#!/usr/bin/env python3
"""
PageOrganizer CLI: reorder, delete and export PDF pages from the terminal.

Usage:
    python -m pageorganizer <command> [options]

Commands:
    info        Show page count and size of each document
    thumbnails  Render page thumbnails to PNG files
    export      Apply deletions and a new page order, then export

Examples:
    # Show documents
    pageorganizer-cli info a.pdf b.pdf

    # Thumbnails at 20% of the page size
    pageorganizer-cli thumbnails a.pdf -o thumbs/ --scale 0.2

    # Delete pages 2 and 5-7 from every document, bundle as ZIP
    pageorganizer-cli export a.pdf b.pdf -o out/ --delete 2,5-7

    # New order for a.pdf, one output file per document
    pageorganizer-cli export a.pdf -o out/ --order a.pdf=3,1,2 --mode individual
"""

import argparse
import logging
import os
import sys
from pathlib import Path

from pageorganizer.config import APP_DESCRIPTION, APP_VERSION
from pageorganizer.editor.page_model import make_page_id
from pageorganizer.services.document_loader import guess_media_type, load_paths
from pageorganizer.services.export_service import DeliveryMode, DirectoryDelivery
from pageorganizer.utils.config_manager import ConfigManager
from pageorganizer.utils.exceptions import PageOrganizerError, UnsupportedInputError
from pageorganizer.utils.i18n import _

# ---------------------------------------------------------------------------
# Order parser
# ---------------------------------------------------------------------------


def _parse_order(text: str) -> tuple[str, list[int]]:
    """Parse "name.pdf=3,1,2" into ("name.pdf", [3, 1, 2]).

    Raises:
        ValueError: If the order string is malformed
    """
    name, sep, numbers = text.rpartition("=")
    if not sep or not name:
        raise ValueError(f"Invalid order '{text}'. Use NAME=3,1,2.")
    try:
        order = [int(x.strip()) for x in numbers.split(",") if x.strip()]
    except ValueError:
        raise ValueError(f"Invalid order '{text}'. Use NAME=3,1,2.") from None
    if len(set(order)) != len(order):
        raise ValueError(f"Invalid order '{text}': a page is listed twice.")
    return name, order


# ---------------------------------------------------------------------------
# Argument parser construction
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with subcommands."""
    p = argparse.ArgumentParser(
        prog="pageorganizer-cli",
        description=APP_DESCRIPTION,
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    p.add_argument("-v", "--verbose", action="store_true", help=_("Verbose output"))
    p.add_argument("--config", type=Path, default=None, help=_("Settings file to use"))
    sub = p.add_subparsers(dest="command")

    info = sub.add_parser("info", help=_("Show page count and size of each document"))
    info.add_argument("inputs", type=Path, nargs="+", help=_("Input PDF files"))

    thumbs = sub.add_parser("thumbnails", help=_("Render page thumbnails to PNG files"))
    thumbs.add_argument("inputs", type=Path, nargs="+", help=_("Input PDF files"))
    thumbs.add_argument("-o", "--output", type=Path, required=True, help=_("Output folder"))
    thumbs.add_argument(
        "--scale", type=float, default=None, help=_("Fraction of the page size (e.g. 0.15)")
    )

    export = sub.add_parser("export", help=_("Apply edits and export documents"))
    export.add_argument("inputs", type=Path, nargs="+", help=_("Input PDF files"))
    export.add_argument("-o", "--output", type=Path, default=None, help=_("Output folder"))
    export.add_argument(
        "--delete", default="", help=_("Pages to delete in every document (e.g. '1,3,5-7')")
    )
    export.add_argument(
        "--order",
        action="append",
        default=[],
        metavar="NAME=PAGES",
        help=_("New page order for one document (e.g. 'a.pdf=3,1,2'); repeatable"),
    )
    export.add_argument(
        "--mode",
        choices=[m.value for m in DeliveryMode],
        default=None,
        help=_("Bundle outputs in one ZIP (archive) or write each file (individual)"),
    )
    export.add_argument("--overwrite", action="store_true", help=_("Overwrite existing files"))
    return p


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _load_organizer(args, config: ConfigManager, delivery: DirectoryDelivery | None = None):
    from pageorganizer.organizer import PageOrganizer

    documents = load_paths(str(path) for path in args.inputs)
    if not documents:
        first = args.inputs[0]
        raise UnsupportedInputError(first.name, guess_media_type(first.name) or None)

    organizer = PageOrganizer.from_config(config, delivery=delivery)
    organizer.load_documents(documents)
    organizer.wait_for_thumbnails()
    return organizer


def _cmd_info(args, config: ConfigManager, logger) -> int:
    """Handle the 'info' command."""
    with _load_organizer(args, config) as organizer:
        for summary in organizer.describe():
            print(f"{summary.name}:  {summary.page_count} pages, {summary.size_label}")
        failed = organizer.pipeline.last_result.failed_documents
        for name, reason in failed.items():
            print(f"Error: {reason}", file=sys.stderr)
    return 1 if failed else 0


def _cmd_thumbnails(args, config: ConfigManager, logger) -> int:
    """Handle the 'thumbnails' command."""
    if args.scale is not None:
        config.set("thumbnails.scale", args.scale, save_immediately=False)

    args.output.mkdir(parents=True, exist_ok=True)
    with _load_organizer(args, config) as organizer:
        written = 0
        for name in organizer.session.document_names():
            stem = os.path.splitext(name)[0]
            for page in organizer.session.pages(name):
                if page.thumbnail is None:
                    continue
                page.thumbnail.save(args.output / f"{stem}-page-{page.original_index}.png")
                written += 1
        result = organizer.pipeline.last_result

    print(f"Saved {written} thumbnail(s) → {args.output}")
    return 1 if result.failed_documents or result.skipped_pages else 0


def _apply_order(organizer, name: str, order: list[int]) -> None:
    """Move pages so the listed original pages come first, in that order.

    Raises:
        ValueError: If the document or a page number is unknown
    """
    if name not in organizer.session:
        raise ValueError(f"Unknown document '{name}' in --order")
    for position, page_number in enumerate(order):
        pages = organizer.session.pages(name)
        page_id = make_page_id(name, page_number)
        if organizer.session.position_of(name, page_id) is None:
            raise ValueError(f"Page {page_number} not found in '{name}'")
        if position >= len(pages):
            break
        organizer.move_page(name, page_id, pages[position].id)


def _cmd_export(args, config: ConfigManager, logger) -> int:
    """Handle the 'export' command."""
    output = args.output or Path(config.get("export.destination_folder") or os.getcwd())
    overwrite = args.overwrite or bool(config.get("export.overwrite_existing", False))
    mode = args.mode or config.get("export.delivery_mode", DeliveryMode.ARCHIVE.value)
    delivery = DirectoryDelivery(output, overwrite=overwrite)

    with _load_organizer(args, config, delivery) as organizer:
        for order_text in args.order:
            name, order = _parse_order(order_text)
            _apply_order(organizer, name, order)
        if args.delete:
            organizer.apply_range_deletion(args.delete)

        report = organizer.export(mode)

    for result in report.results:
        if result.success:
            print(f"Exported: {result.name} → {result.output_name} ({result.page_count} pages)")
        else:
            print(f"Error: {result.name}: {result.error}", file=sys.stderr)
    if report.archive_name:
        print(f"Archive: {output / report.archive_name}")
    if report.archive_error:
        print(f"Error: {report.archive_error}", file=sys.stderr)
    logger.debug(f"Delivered files: {[str(p) for p in delivery.delivered]}")
    return 0 if report.success else 1


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )
    logging.getLogger().setLevel(level)
    logger = logging.getLogger("pageorganizer.cli")

    missing = [str(p) for p in args.inputs if not p.exists()]
    if missing:
        print(f"Error: {', '.join(missing)} not found", file=sys.stderr)
        return 1

    handlers = {
        "info": _cmd_info,
        "thumbnails": _cmd_thumbnails,
        "export": _cmd_export,
    }

    try:
        config = ConfigManager(str(args.config) if args.config else None)
        return handlers[args.command](args, config, logger)
    except (PageOrganizerError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
