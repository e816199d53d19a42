"""reader/extractor.py — Pull the chapter markup and every applicable style rule out of the live DOM."""

import logging

from config import PipelineConfig
from models import RenderedContent

logger = logging.getLogger(__name__)

# Inline <style> blocks first, then rules of linked sheets, both in document order.
# Sheets whose cssRules throw (cross-origin) are reported back instead of read.
EXTRACT_SCRIPT = """
(selector) => {
    const root = document.querySelector(selector);
    const markup = root ? root.outerHTML : '';

    const styles = [];
    document.querySelectorAll('style').forEach((tag) => {
        styles.push(tag.innerHTML);
    });

    const skipped = [];
    document.querySelectorAll('link[rel="stylesheet"]').forEach((link) => {
        try {
            const sheet = link.sheet;
            if (sheet && sheet.cssRules) {
                let css = '';
                for (const rule of sheet.cssRules) {
                    css += rule.cssText + '\\n';
                }
                styles.push(css);
            }
        } catch (e) {
            skipped.push(link.href);
        }
    });

    return { markup, styles, skipped };
}
"""


def _as_content(payload: dict) -> RenderedContent:
    return RenderedContent(
        markup=payload.get("markup") or "",
        style_rules=[s for s in payload.get("styles") or [] if s is not None],
        skipped_stylesheets=list(payload.get("skipped") or []),
    )


async def extract_content(page, config: PipelineConfig) -> RenderedContent:
    """Return the content root's outer HTML and the page's style sources. Never raises for a missing root."""
    payload = await page.evaluate(EXTRACT_SCRIPT, config.content_selector)
    content = _as_content(payload)

    for href in content.skipped_stylesheets:
        logger.warning("Could not access stylesheet, skipping: %s", href)
    if not content.markup:
        logger.warning("Content root %s not found; chapter will render empty", config.content_selector)

    logger.debug(
        "Extracted %d chars of markup and %d style sources",
        len(content.markup), len(content.style_rules),
    )
    return content
