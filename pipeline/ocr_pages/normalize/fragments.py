"""
Fragment-list normalizer (Tensorlake shape, also reused for Textract blocks).

Raw page shape:
    {"page_number": 1,
     "page_fragments": [
         {"fragment_type": "text",
          "reading_order": 2,
          "content": {"content": "...", "html": "...", "markdown": "...", "summary": "..."}},
         ...]}

Fragments are visited in ascending reading_order, never in array order.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from infra.ocr.errors import StructureError
from ..schemas import CanonicalPage, CanonicalTable, CanonicalFragment, as_text
from .selection import coerce_page_number, select_pages

logger = logging.getLogger(__name__)

# Pagination noise dropped unless the caller asks for it
DEFAULT_EXCLUDE_TYPES = frozenset({"page_number", "page_footer"})


def fragment_content(fragment: Mapping[str, Any]) -> Dict[str, str]:
    """Return the content/html/markdown/summary strings of a fragment."""
    content = fragment.get("content")
    if isinstance(content, Mapping):
        return {
            "content": as_text(content.get("content")),
            "html": as_text(content.get("html")),
            "markdown": as_text(content.get("markdown")),
            "summary": as_text(content.get("summary")),
        }
    return {"content": as_text(content), "html": "", "markdown": "", "summary": ""}


def _order_key(indexed_fragment):
    position, fragment = indexed_fragment
    order = fragment.get("reading_order")
    if isinstance(order, bool) or not isinstance(order, (int, float)):
        # Unordered fragments go after ordered ones, in array order
        return (1, 0, position)
    return (0, order, position)


def sort_by_reading_order(fragments: List[Any]) -> List[Mapping[str, Any]]:
    valid = [(i, f) for i, f in enumerate(fragments) if isinstance(f, Mapping)]
    return [fragment for _, fragment in sorted(valid, key=_order_key)]


def number_fragment_pages(raw_pages: List[Any]) -> List[tuple]:
    numbered = []
    for position, page in enumerate(raw_pages, start=1):
        if not isinstance(page, Mapping):
            logger.warning("Page at position %d is not an object. Skipping.", position)
            continue
        number = coerce_page_number(page.get("page_number")) or position
        numbered.append((number, page))
    return numbered


def build_fragment_page(
    page_number: int,
    fragments: List[Any],
    exclude_types: Iterable[str]
) -> CanonicalPage:
    excluded = set(exclude_types)
    page_header: List[str] = []
    section_header: List[str] = []
    paragraphs: List[str] = []
    tables: List[CanonicalTable] = []
    other: List[CanonicalFragment] = []

    for fragment in sort_by_reading_order(fragments):
        frag_type = as_text(fragment.get("fragment_type")) or "unknown"
        if frag_type in excluded:
            continue

        parts = fragment_content(fragment)
        content = parts["content"]

        if frag_type == "page_header":
            page_header.append(content)
        elif frag_type == "section_header":
            section_header.append(content)
        elif frag_type == "text":
            paragraphs.append(content)
        elif frag_type == "table":
            tables.append(CanonicalTable(**parts))
        else:
            other.append(CanonicalFragment(type=frag_type, content=content))

    return CanonicalPage(
        page_number=page_number,
        page_header=page_header,
        section_header=section_header,
        text="\n\n".join(paragraphs),
        tables=tables,
        other=other,
    )


def normalize_fragment_pages(
    raw: Mapping[str, Any],
    pages: Optional[Iterable[int]] = None,
    exclude_types: Iterable[str] = DEFAULT_EXCLUDE_TYPES,
    provider: str = "tensorlake"
) -> List[CanonicalPage]:
    """
    Convert a fragment-list response into canonical pages.

    Args:
        raw: Provider response with a top-level "pages" list
        pages: 1-based page numbers to keep (None = all)
        exclude_types: fragment_type values to drop
        provider: Name used in warnings and errors

    Raises:
        StructureError: If the response has no page list
    """
    raw_pages = raw.get("pages") if isinstance(raw, Mapping) else None
    if not isinstance(raw_pages, list):
        raise StructureError("Invalid result structure: no pages found.", provider=provider)

    output = []
    for page_number, page in select_pages(number_fragment_pages(raw_pages), pages, provider):
        fragments = page.get("page_fragments")
        if not isinstance(fragments, list):
            logger.warning("No fragments found on page %d. Skipping.", page_number)
            continue
        output.append(build_fragment_page(page_number, fragments, exclude_types))

    return output
