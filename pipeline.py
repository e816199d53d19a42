"""pipeline.py — Fetch, rebuild and print each chapter in order, then merge the book."""

import logging
from pathlib import Path

from tqdm import tqdm

from config import PipelineConfig
from document import assemble_document
from models import ChapterArtifact, ChapterRequest
from pdf_builder import final_book_path, merge_chapter_pdfs
from reader import chapter_url
from reader.extractor import extract_content
from reader.navigation import wait_for_chapter
from renderer import render_chapter_pdf

logger = logging.getLogger(__name__)


def chapter_requests(book_id: str, start: int, end: int) -> list[ChapterRequest]:
    """Requests for chapters start..end inclusive, ascending."""
    if start < 0 or end < start:
        raise ValueError(f"Invalid chapter range {start}-{end}")
    return [
        ChapterRequest(book_id=book_id, chapter_index=i, is_first_in_run=(i == start))
        for i in range(start, end + 1)
    ]


def book_dir(output_dir: Path, book_id: str) -> Path:
    return Path(output_dir) / book_id


async def process_chapter(
    page,
    request: ChapterRequest,
    config: PipelineConfig,
    chapters_dir: Path,
    print_context=None,
) -> ChapterArtifact:
    """
    Navigate → WaitReady → Extract → Reassemble → Render → Filter → Finalize
    for one chapter. Any failure propagates to the caller.
    The PDF is printed in print_context, or the reader page's own context.
    """
    url = chapter_url(request.book_id, request.chapter_index, config.url_template)
    await wait_for_chapter(page, url, config, is_first_in_run=request.is_first_in_run)

    content = await extract_content(page, config)
    html = assemble_document(content, config)

    html_path = chapters_dir / f"chapter_{request.number}.html"
    html_path.write_text(html, encoding="utf-8")
    logger.info("  HTML saved: %s", html_path)

    pdf_path = chapters_dir / f"chapter_{request.number}.pdf"
    kept = await render_chapter_pdf(print_context or page.context, html, pdf_path, config)
    logger.info("  PDF saved: %s (%d pages)", pdf_path, kept)

    return ChapterArtifact(chapter_index=request.chapter_index, pdf_path=pdf_path, page_count=kept)


async def build_book(
    page,
    book_id: str,
    start: int,
    end: int,
    config: PipelineConfig,
    output_dir: Path = Path("storage"),
    name: str | None = None,
    print_context=None,
) -> Path:
    """
    Process chapters start..end (inclusive) one after another on the shared
    page, then merge their PDFs in chapter order. Returns the final PDF path.
    The first failing chapter aborts the run.
    """
    requests = chapter_requests(book_id, start, end)
    chapters_dir = book_dir(output_dir, book_id)
    chapters_dir.mkdir(parents=True, exist_ok=True)

    # Phase 1: per-chapter PDFs
    logger.info("=== Phase 1: Saving chapters %d-%d as PDF ===", start, end)
    artifacts: list[ChapterArtifact] = []
    with tqdm(total=len(requests), desc=f"  Book {book_id}", unit="chapter") as pbar:
        for request in requests:
            logger.info("Chapter %d (index %d)", request.number, request.chapter_index)
            artifacts.append(await process_chapter(page, request, config, chapters_dir, print_context))
            pbar.update(1)

    # Phase 2: merge
    logger.info("=== Phase 2: Merging %d PDFs ===", len(artifacts))
    final_path = final_book_path(output_dir, book_id, name)
    total_pages = merge_chapter_pdfs(artifacts, final_path)

    logger.info("Final PDF saved: %s (%d pages)", final_path, total_pages)
    logger.info("Individual PDFs: %s", chapters_dir)
    logger.info("Chapters processed: %d (from %d to %d)", len(artifacts), start, end)
    return final_path
