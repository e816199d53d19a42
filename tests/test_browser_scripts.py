"""The in-page extraction and measuring scripts, run in a real headless Chromium."""

import asyncio

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from config import PipelineConfig
from models import ContentBounds
from reader.extractor import extract_content
from renderer import measure_content_bounds

pytestmark = pytest.mark.browser

NO_BROWSER = object()


async def _with_page(html: str, action):
    async with async_playwright() as pw:
        try:
            browser = await pw.chromium.launch(headless=True)
        except PlaywrightError:
            return NO_BROWSER
        try:
            page = await browser.new_page()
            await page.set_content(html, wait_until="load")
            return await action(page)
        finally:
            await browser.close()


def run_on_page(html: str, action):
    result = asyncio.run(_with_page(html, action))
    if result is NO_BROWSER:
        pytest.skip("Chromium is not installed (playwright install chromium)")
    return result


def test_extract_orders_inline_blocks_before_linked_sheets():
    config = PipelineConfig()
    html = """
    <html><head>
      <link rel="stylesheet" href="data:text/css,h1%20%7B%20color%3A%20blue%3B%20%7D">
      <style>p{margin:0}</style>
    </head><body>
      <div id="epubContent"><h1>Bab 1</h1><p>Teks</p></div>
      <style>.late{color:red}</style>
    </body></html>
    """
    content = run_on_page(html, lambda page: extract_content(page, config))

    assert content.markup == '<div id="epubContent"><h1>Bab 1</h1><p>Teks</p></div>'
    assert content.style_rules[:2] == ["p{margin:0}", ".late{color:red}"]
    assert len(content.style_rules) == 3
    assert "color: blue" in content.style_rules[2]
    assert content.skipped_stylesheets == []


def test_extract_without_content_root():
    config = PipelineConfig()
    content = run_on_page("<p>Memuat...</p>", lambda page: extract_content(page, config))
    assert content.markup == ""


def test_measure_content_root():
    config = PipelineConfig()
    html = """
    <body style="margin:0">
      <div id="epubContainer" style="width:900px;height:2000px">
        <div id="epubContent" style="width:300px;height:150.5px"></div>
      </div>
    </body>
    """
    bounds = run_on_page(html, lambda page: measure_content_bounds(page, config))
    assert bounds == ContentBounds(width=300, height=151)


def test_measure_falls_back_to_container():
    config = PipelineConfig()
    html = '<body style="margin:0"><div id="epubContainer" style="width:200px;height:80px"></div></body>'
    bounds = run_on_page(html, lambda page: measure_content_bounds(page, config))
    assert bounds == ContentBounds(width=200, height=80)


def test_measure_falls_back_to_document():
    config = PipelineConfig()
    html = '<body style="margin:0"><div style="width:500px;height:1700px"></div></body>'
    bounds = run_on_page(html, lambda page: measure_content_bounds(page, config))
    assert bounds.width >= 500
    assert bounds.height >= 1700
