"""models.py — Shared data types for printbook."""

import math
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class ChapterRequest:
    book_id: str
    chapter_index: int      # 0-based
    is_first_in_run: bool = False

    @property
    def number(self) -> int:
        """1-based chapter number used in artifact filenames."""
        return self.chapter_index + 1


@dataclass
class RenderedContent:
    markup: str                                   # outerHTML of the content root, "" if absent
    style_rules: list[str] = field(default_factory=list)
    skipped_stylesheets: list[str] = field(default_factory=list)  # hrefs that could not be read


@dataclass(frozen=True)
class ContentBounds:
    width: int   # px
    height: int  # px

    @classmethod
    def from_rect(cls, width: float, height: float) -> "ContentBounds":
        """Round a measured rect up to whole pixels (never below 1px)."""
        return cls(width=max(1, math.ceil(width)), height=max(1, math.ceil(height)))


@dataclass(frozen=True)
class PageRecord:
    index: int                 # 0-based, contiguous within one PDF
    content_byte_length: int


@dataclass
class ChapterArtifact:
    chapter_index: int
    pdf_path: Path
    page_count: int = 0
