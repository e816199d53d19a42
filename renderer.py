"""renderer.py — Print one reassembled chapter to a PDF page sized to its content."""

import asyncio
import logging
from pathlib import Path

from config import PipelineConfig
from models import ContentBounds
from pdf_builder import filter_blank_pages

logger = logging.getLogger(__name__)

# Content root, then the wrapping container, then the whole document.
MEASURE_SCRIPT = """
([contentSelector, containerSelector]) => {
    const el = document.querySelector(contentSelector) || document.querySelector(containerSelector);
    if (el) {
        const rect = el.getBoundingClientRect();
        return { width: rect.width, height: rect.height };
    }
    const doc = document.documentElement;
    const body = document.body;
    return {
        width: Math.max(doc.scrollWidth, doc.offsetWidth, body ? body.scrollWidth : 0, body ? body.offsetWidth : 0),
        height: Math.max(doc.scrollHeight, doc.offsetHeight, body ? body.scrollHeight : 0, body ? body.offsetHeight : 0),
    };
}
"""

ZERO_MARGIN = {"top": "0px", "right": "0px", "bottom": "0px", "left": "0px"}


async def measure_content_bounds(page, config: PipelineConfig) -> ContentBounds:
    rect = await page.evaluate(MEASURE_SCRIPT, [config.content_selector, config.container_selector])
    return ContentBounds.from_rect(rect["width"], rect["height"])


def temp_path_for(pdf_path: Path) -> Path:
    return pdf_path.with_name(f"{pdf_path.stem}_temp{pdf_path.suffix}")


async def render_chapter_pdf(context, html: str, pdf_path: Path, config: PipelineConfig) -> int:
    """
    Render html on a fresh page of context into pdf_path, with the page
    sized to the measured content box, then drop blank pages. The PDF is written to a temporary
    path and only moved into place after filtering. Returns pages kept.
    """
    pdf_path = Path(pdf_path)
    temp_path = temp_path_for(pdf_path)

    pdf_page = await context.new_page()
    try:
        await pdf_page.set_content(html, wait_until="networkidle")
        if config.render_settle_delay:
            await asyncio.sleep(config.render_settle_delay)

        # Rounded up, and clamped to 1px so an empty chapter still gets a valid page size.
        bounds = await measure_content_bounds(pdf_page, config)
        logger.info("  Content size: %dx%d px", bounds.width, bounds.height)

        await pdf_page.pdf(
            path=str(temp_path),
            width=f"{bounds.width}px",
            height=f"{bounds.height}px",
            print_background=True,
            margin=ZERO_MARGIN,
            prefer_css_page_size=False,
        )
    finally:
        await pdf_page.close()

    kept = filter_blank_pages(temp_path, config.blank_page_threshold)
    temp_path.replace(pdf_path)
    return kept
