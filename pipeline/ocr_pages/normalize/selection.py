"""
Page numbering and page selection shared by every normalizer.

Normalizers hand in (page_number, raw_page) pairs in source order. Numbers
are never rewritten here: gaps and duplicates are logged, and a requested
page that the source does not contain is logged and left out.
"""

import logging
from typing import Any, Iterable, List, Optional, Set, Tuple

logger = logging.getLogger(__name__)

NumberedPage = Tuple[int, Any]


def coerce_page_number(value: Any) -> Optional[int]:
    """Return value as a positive int, or None if it cannot be one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 1 else None
    if isinstance(value, float) and value.is_integer():
        return int(value) if value >= 1 else None
    if isinstance(value, str) and value.strip().isdigit():
        number = int(value.strip())
        return number if number >= 1 else None
    return None


def requested_pages(pages: Optional[Iterable[int]]) -> Optional[Set[int]]:
    if pages is None:
        return None
    wanted = set()
    for page in pages:
        if isinstance(page, bool) or not isinstance(page, int):
            raise TypeError(f"Page numbers must be integers, got {page!r}")
        wanted.add(page)
    return wanted


def check_numbering(numbered: List[NumberedPage], provider: str) -> List[NumberedPage]:
    """Drop repeated page numbers (first wins) and warn about gaps."""
    seen = set()
    unique = []
    for number, page in numbered:
        if number in seen:
            logger.warning("Duplicate page %d in %s result; keeping the first occurrence.", number, provider)
            continue
        seen.add(number)
        unique.append((number, page))

    ordered = sorted(seen)
    for previous, current in zip(ordered, ordered[1:]):
        if current - previous == 2:
            logger.warning("Page %d missing from %s result.", previous + 1, provider)
        elif current - previous > 2:
            logger.warning("Pages %d-%d missing from %s result.", previous + 1, current - 1, provider)

    return unique


def select_pages(
    numbered: List[NumberedPage],
    pages: Optional[Iterable[int]],
    provider: str
) -> List[NumberedPage]:
    """Filter numbered pages to the requested set, keeping source order."""
    numbered = check_numbering(numbered, provider)
    wanted = requested_pages(pages)
    if wanted is None:
        return numbered

    available = {number for number, _ in numbered}
    for number in sorted(wanted - available):
        logger.warning("Page %d not found in %s result. Skipping.", number, provider)

    return [(number, page) for number, page in numbered if number in wanted]
