"""pdf_builder.py — Drop blank renderer pages and assemble per-chapter PDFs into the final book."""

import io
import logging
from pathlib import Path

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PdfReadError
from pypdf.generic import ArrayObject, StreamObject

from errors import MergeSourceUnreadable
from models import ChapterArtifact, PageRecord

logger = logging.getLogger(__name__)

BLANK_PAGE_THRESHOLD = 100


def content_length(page) -> int:
    """Serialized byte length of a page's content streams as stored (still encoded), 0 when it has none."""
    if "/Contents" not in page:
        return 0
    contents = page["/Contents"]
    streams = contents if isinstance(contents, ArrayObject) else [contents]
    total = 0
    for stream in streams:
        stream = stream.get_object()
        if isinstance(stream, StreamObject):
            # _data is the stream body as read from the file, filters not undone
            total += len(stream._data)
    return total


def page_records(reader: PdfReader) -> list[PageRecord]:
    return [
        PageRecord(index=i, content_byte_length=content_length(page))
        for i, page in enumerate(reader.pages)
    ]


def has_content(record: PageRecord, threshold: int = BLANK_PAGE_THRESHOLD) -> bool:
    """Coarse blank test: content stream longer than threshold bytes."""
    return record.content_byte_length > threshold


def filter_blank_pages(pdf_path: Path, threshold: int = BLANK_PAGE_THRESHOLD) -> int:
    """
    Rewrite pdf_path in place keeping only pages that carry content, in order.
    May leave a zero-page PDF. Returns the number of pages kept.
    """
    pdf_path = Path(pdf_path)
    reader = PdfReader(io.BytesIO(pdf_path.read_bytes()))
    records = page_records(reader)

    writer = PdfWriter()
    for record in records:
        if has_content(record, threshold):
            writer.add_page(reader.pages[record.index])
        else:
            logger.debug(
                "  Dropping page %d (%d content bytes)", record.index + 1, record.content_byte_length
            )

    kept = len(writer.pages)
    with pdf_path.open("wb") as f:
        writer.write(f)

    logger.info("  Pages: %d total, %d kept, %d removed", len(records), kept, len(records) - kept)
    if kept == 0:
        logger.warning("  %s has no content pages left", pdf_path.name)
    return kept


def _open_source(pdf_path: Path) -> PdfReader:
    try:
        return PdfReader(io.BytesIO(Path(pdf_path).read_bytes()))
    except (OSError, PdfReadError) as e:
        raise MergeSourceUnreadable(pdf_path, str(e)) from e


def merge_chapter_pdfs(artifacts: list[ChapterArtifact], output_path: Path) -> int:
    """
    Concatenate chapter PDFs in the order given (not re-sorted) into output_path.
    Returns the total page count written.
    """
    writer = PdfWriter()
    for artifact in artifacts:
        reader = _open_source(artifact.pdf_path)
        for page in reader.pages:
            writer.add_page(page)
        logger.info("  Merged: %s (%d pages)", Path(artifact.pdf_path).name, len(reader.pages))

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("wb") as f:
        writer.write(f)
    return len(writer.pages)


def safe_name(name: str) -> str:
    return name.strip().replace(" ", "_").replace(":", "").replace("/", "_").replace("\\", "_")


def final_book_path(output_dir: Path, book_id: str, name: str | None = None) -> Path:
    """storage/book_<id>.pdf, or storage/book_<id>_<name>.pdf when a display name is given."""
    stem = f"book_{book_id}"
    if name and safe_name(name):
        stem += f"_{safe_name(name)}"
    return Path(output_dir) / f"{stem}.pdf"
