"""document.py — Rebuild an extracted chapter as a standalone, print-safe HTML document."""

from bs4 import BeautifulSoup

from config import PipelineConfig
from models import RenderedContent

# The reader lays chapters out for a scrolling viewport: fixed heights, clipped
# overflow, absolute positioning. These rules undo that for a print surface.
# They come after the captured styles so they win ties on source order.
OVERRIDE_RULES = """\
* {{
  box-sizing: border-box;
}}

html, body {{
  margin: 0 !important;
  padding: 0 !important;
  width: 100%;
  height: auto !important;
  overflow: visible !important;
  position: relative !important;
}}

{container} {{
  margin: 0 !important;
  padding: 0 !important;
  width: 100% !important;
  height: auto !important;
  max-width: 100% !important;
  max-height: none !important;
  overflow: visible !important;
  visibility: visible !important;
  position: relative !important;
}}

{content} {{
  margin: 0 !important;
  width: 100% !important;
  height: auto !important;
  max-height: none !important;
  overflow: visible !important;
  visibility: visible !important;
  position: relative !important;
}}"""

DOCUMENT_TEMPLATE = """\
<!DOCTYPE html>
<html>
<head>
<meta charset="UTF-8">
<style>
/* Captured styles */
{styles}

/* Print overrides */
{overrides}
</style>
</head>
<body>
<div id="{container_id}" class="{container_class}">
{markup}
</div>
</body>
</html>
"""


def strip_scripts(markup: str) -> str:
    """Drop <script> elements so the document never runs reader code off-context."""
    if "<script" not in markup.lower():
        return markup
    soup = BeautifulSoup(markup, "html.parser")
    for tag in soup.find_all("script"):
        tag.decompose()
    return str(soup)


def override_rules(config: PipelineConfig) -> str:
    return OVERRIDE_RULES.format(container=config.container_selector, content=config.content_selector)


def assemble_document(content: RenderedContent, config: PipelineConfig) -> str:
    """
    Wrap the chapter markup and its captured styles into one HTML document.
    Same content and config always yield byte-identical output.
    """
    return DOCUMENT_TEMPLATE.format(
        styles="\n".join(content.style_rules),
        overrides=override_rules(config),
        container_id=config.container_id,
        container_class=config.container_class,
        markup=strip_scripts(content.markup),
    )
