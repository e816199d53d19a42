"""reader/ — Driving the online book reader: chapter addressing, readiness, extraction."""

from config import DEFAULT_URL_TEMPLATE


def chapter_url(book_id: str, chapter_index: int, template: str = DEFAULT_URL_TEMPLATE) -> str:
    """Address of one chapter in the reader. Pure function of its inputs."""
    if chapter_index < 0:
        raise ValueError(f"Chapter index must be >= 0 (got {chapter_index})")
    return template.format(book_id=book_id, chapter=chapter_index)
