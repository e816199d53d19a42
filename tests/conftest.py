"""Shared fixtures: fixture PDFs and in-memory stand-ins for the browser page surface."""

import asyncio
import re
from pathlib import Path

import fitz  # pymupdf
import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from pypdf import PdfWriter

from config import PipelineConfig


def make_pdf(pages: list[bool], base_width: int = 200) -> bytes:
    """
    Build a PDF with one page per entry: True = text page, False = blank page.
    Page i is (base_width + i) points wide so tests can tell pages apart.
    """
    doc = fitz.open()
    for i, has_text in enumerate(pages):
        page = doc.new_page(width=base_width + i, height=300)
        if has_text:
            text = "\n".join(f"Line {n} of page {i + 1}" for n in range(20))
            page.insert_text((20, 40), text, fontsize=10)
    data = doc.tobytes()
    doc.close()
    return data


def make_compressed_pdf(content: bytes) -> bytes:
    """One page whose only content stream is Flate-compressed on disk."""
    doc = fitz.open()
    page = doc.new_page(width=200, height=300)
    xref = doc.get_new_xref()
    doc.update_object(xref, "<<>>")
    doc.update_stream(xref, content, compress=True)
    page.set_contents(xref)
    data = doc.tobytes()
    doc.close()
    return data


def write_pdf(path: Path, pages: list[bool], base_width: int = 200) -> Path:
    if pages:
        path.write_bytes(make_pdf(pages, base_width))
    else:
        writer = PdfWriter()
        with path.open("wb") as f:
            writer.write(f)
    return path


def page_widths(path: Path) -> list[int]:
    from pypdf import PdfReader

    return [round(float(p.mediabox.width)) for p in PdfReader(str(path)).pages]


class FakeFrame:
    def __init__(self, url: str):
        self.url = url


class FakePdfPage:
    """The fresh page a chapter is printed on."""

    def __init__(self, context):
        self.context = context
        self.html = None
        self.pdf_kwargs = None
        self.closed = False

    async def set_content(self, html, wait_until=None):
        self.html = html

    async def evaluate(self, script, arg=None):
        return dict(self.context.bounds)

    async def pdf(self, path=None, **kwargs):
        self.pdf_kwargs = kwargs
        Path(path).write_bytes(self.context.pdf_for(self.html))

    async def close(self):
        self.closed = True


class FakeContext:
    def __init__(self, bounds=None):
        self.bounds = bounds or {"width": 640.2, "height": 1200.5}
        self.printed: list[FakePdfPage] = []

    def pdf_for(self, html: str) -> bytes:
        """Page plan comes from data-chapter / data-pages="1,0,1" in the chapter markup."""
        chapter = re.search(r'data-chapter="(\d+)"', html)
        plan = re.search(r'data-pages="([01,]+)"', html)
        pages = [c == "1" for c in plan.group(1).split(",")] if plan else [False]
        base = 100 * (int(chapter.group(1)) + 1) if chapter else 50
        return make_pdf(pages, base_width=base)

    async def new_page(self):
        page = FakePdfPage(self)
        self.printed.append(page)
        return page


class FakeReaderPage:
    """
    The navigated reader page. goto() routes the main frame to the requested
    address (or to route_to, if set) and fires framenavigated.
    """

    def __init__(self, url="about:blank", contents=None, context=None):
        self.main_frame = FakeFrame(url)
        self.context = context or FakeContext()
        self.contents = contents or {}
        self.handlers = {}
        self.gotos = []
        self.route_to = None
        self.route_on_goto = True
        self.goto_times_out = False
        self.goto_error = None
        self.late_route_delay = None
        self.has_marker = True

    @property
    def url(self):
        return self.main_frame.url

    def on(self, event, handler):
        self.handlers.setdefault(event, []).append(handler)

    def remove_listener(self, event, handler):
        self.handlers[event].remove(handler)

    def _route(self, url):
        self.main_frame.url = url
        for handler in list(self.handlers.get("framenavigated", [])):
            handler(self.main_frame)

    async def goto(self, url, wait_until=None, timeout=None):
        self.gotos.append((url, wait_until, timeout))
        target = self.route_to or url
        if self.late_route_delay is not None:
            asyncio.get_running_loop().call_later(self.late_route_delay, self._route, target)
        elif self.route_on_goto:
            self._route(target)
        if self.goto_times_out:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded.")
        if self.goto_error is not None:
            raise self.goto_error

    async def wait_for_selector(self, selector, state=None, timeout=None):
        if not self.has_marker:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {selector}")

    async def evaluate(self, script, arg=None):
        return self.contents.get(self.url, {"markup": "", "styles": [], "skipped": []})


@pytest.fixture
def fast_config():
    return PipelineConfig(
        first_navigation_timeout=0.5,
        navigation_timeout=0.2,
        marker_timeout=0.2,
        settle_delay=0,
        render_settle_delay=0,
    )
