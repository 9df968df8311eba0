"""Pick the first section of a book that holds readable content."""

import logging

from voxe.constants import COVER_KEYWORDS, COVER_MIN_CHARS, COVER_MIN_WORDS, MAX_SECTIONS_TO_TRY
from voxe.errors import NoContentError

logger = logging.getLogger(__name__)


def is_likely_cover(text: str) -> bool:
    """Heuristic for cover, title and copyright pages.

    Very short sections are treated as front matter, so a genuinely short
    first chapter is skipped too.
    """
    trimmed = text.strip().lower()
    return (
        len(trimmed) < COVER_MIN_CHARS
        or trimmed == "cover"
        or any(keyword in trimmed for keyword in COVER_KEYWORDS)
        or len(trimmed.split()) < COVER_MIN_WORDS
    )


def find_first_content(sections, max_sections: int = MAX_SECTIONS_TO_TRY) -> tuple[int, str]:
    """Return (index, text) of the first non-empty, non-cover section.

    Only the first ``max_sections`` sections are inspected.

    Raises:
        NoContentError: If no section qualifies.
    """
    for i, text in enumerate(sections):
        if i >= max_sections:
            break
        if text.strip() and not is_likely_cover(text):
            logger.debug("Found content in section %d", i)
            return i, text
        logger.debug("Section %d looks like a cover or is empty, trying next...", i)

    raise NoContentError(
        "No text content found. The book might only contain images or unsupported content."
    )
