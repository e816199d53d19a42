#!/usr/bin/env python3
"""
printbook — Save the chapters of an online (Kotobee) book reader as one PDF.

Each chapter is opened in the reader, its content and styles are lifted out
of the live page, rebuilt as a standalone HTML document, printed to a PDF
page sized to the content, cleaned of blank pages, and finally all chapters
are merged in order.

Quick start:
  1. Log in to the reader once in a Chrome profile and point
     PRINTBOOK_PROFILE_DIR at it in .env (or pass --profile-dir --save-profile)
  2. python printbook.py --id 88480 --start 0 --end 2 --dry-run
  3. python printbook.py --id 88480 --start 0 --end 2 --name "Pengantar Statistik"

Output:
  storage/<id>/chapter_<n>.html   debug copy of each rebuilt chapter
  storage/<id>/chapter_<n>.pdf    per-chapter PDF
  storage/book_<id>[_<name>].pdf  merged book
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from config import PipelineConfig, load_config, save_setting
from errors import PrintbookError

logger = logging.getLogger("printbook")

# Extra Chromium switches for running against a real user profile.
BROWSER_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Save chapters of an online book reader as a single PDF",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List what would be fetched, no browser:
  python printbook.py --id 88480 --start 0 --end 5 --dry-run

  # Chapters 0 through 2 (inclusive):
  python printbook.py --id 88480 --start 0 --end 2

  # Name the merged PDF:
  python printbook.py --id 88480 --end 12 --name "Pengantar Statistik"

  # Use (and remember) a logged-in Chrome profile, with a visible window:
  python printbook.py --id 88480 --profile-dir ~/.config/chromium --save-profile --headful
        """,
    )
    parser.add_argument("--id", dest="book_id", type=str, required=True, help="Book identifier in the reader URL")
    parser.add_argument("--start", type=int, default=0, help="First chapter index, 0-based (default: 0)")
    parser.add_argument("--end", type=int, default=None, help="Last chapter index, inclusive (default: --start)")
    parser.add_argument(
        "--name", type=str, default=None, metavar="TITLE",
        help="Display name appended to the merged PDF filename",
    )
    parser.add_argument(
        "--output-dir", type=Path, default=Path("storage"), metavar="DIR",
        help="Where chapter files and the merged book are written (default: ./storage)",
    )
    parser.add_argument(
        "--headful", action="store_true", default=False,
        help="Show the reader browser window (overrides PRINTBOOK_HEADLESS); PDFs still print headless",
    )
    parser.add_argument(
        "--profile-dir", type=Path, default=None, metavar="DIR",
        help="Chromium user-data directory holding the reader session",
    )
    parser.add_argument(
        "--save-profile", action="store_true", default=False,
        help="Remember --profile-dir in .env for future runs",
    )
    parser.add_argument("--dry-run", action="store_true", help="List chapter URLs without launching a browser")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args(argv)
    if args.end is None:
        args.end = args.start
    if args.start < 0 or args.end < args.start:
        parser.error(f"invalid chapter range: --start {args.start} --end {args.end}")
    return args


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )


def print_plan(book_id: str, start: int, end: int, config: PipelineConfig, final_path: Path) -> None:
    from reader import chapter_url

    print(f"Book ID: {book_id}, Start: {start}, End: {end}")
    print(f"\n{end - start + 1} chapters:")
    print("-" * 70)
    for index in range(start, end + 1):
        print(f"  {index:3d}. {chapter_url(book_id, index, config.url_template)}")
    print("-" * 70)
    print(f"  Output: {final_path}")
    print()


async def open_print_browser(pw, config: PipelineConfig):
    """
    page.pdf only works in headless Chromium. When the reader runs headful,
    print through a separate headless browser; otherwise return None and
    print in the reader's own context.
    """
    if config.headless:
        return None
    logger.info("Reader is headful; printing through a separate headless browser")
    return await pw.chromium.launch(headless=True, channel=config.browser_channel, args=BROWSER_ARGS)


async def run(args: argparse.Namespace, config: PipelineConfig) -> Path:
    """Launch the browser, then hand the shared reader page to the pipeline."""
    from playwright.async_api import async_playwright

    from pipeline import build_book

    async with async_playwright() as pw:
        browser = None
        if config.profile_dir:
            logger.info("Using browser profile: %s", config.profile_dir)
            context = await pw.chromium.launch_persistent_context(
                str(config.profile_dir),
                headless=config.headless,
                channel=config.browser_channel,
                args=BROWSER_ARGS,
            )
        else:
            browser = await pw.chromium.launch(
                headless=config.headless,
                channel=config.browser_channel,
                args=BROWSER_ARGS,
            )
            context = await browser.new_context()

        print_browser = None
        try:
            print_browser = await open_print_browser(pw, config)
            print_context = await print_browser.new_context() if print_browser is not None else None
            page = context.pages[0] if context.pages else await context.new_page()
            page.set_default_navigation_timeout(config.first_navigation_timeout * 1000)
            return await build_book(
                page,
                args.book_id,
                args.start,
                args.end,
                config,
                output_dir=args.output_dir,
                name=args.name,
                print_context=print_context,
            )
        finally:
            await context.close()
            if print_browser is not None:
                await print_browser.close()
            if browser is not None:
                await browser.close()


def main(argv: list[str] | None = None):
    args = parse_args(argv)
    setup_logging(args.verbose)

    from pdf_builder import final_book_path

    try:
        config = load_config(
            profile_dir=args.profile_dir.expanduser() if args.profile_dir else None,
            headless=False if args.headful else None,
        )
    except PrintbookError as e:
        logger.error("%s", e)
        sys.exit(1)

    final_path = final_book_path(args.output_dir, args.book_id, args.name)

    if args.dry_run:
        print_plan(args.book_id, args.start, args.end, config, final_path)
        print("Dry run complete. No browser launched.")
        return

    if args.save_profile:
        if not args.profile_dir:
            logger.error("--save-profile needs --profile-dir")
            sys.exit(1)
        save_setting("PRINTBOOK_PROFILE_DIR", str(config.profile_dir))
        logger.info("Saved PRINTBOOK_PROFILE_DIR=%s to .env", config.profile_dir)

    from playwright.async_api import Error as PlaywrightError

    logger.info("Book ID: %s, Start: %d, End: %d", args.book_id, args.start, args.end)
    try:
        final_path = asyncio.run(run(args, config))
    except (PrintbookError, PlaywrightError) as e:
        logger.error("An error occurred: %s", e)
        sys.exit(1)

    print(f"\nDone! Book saved to: {final_path}")


if __name__ == "__main__":
    main()
