"""
Queries over raw fragment-list (Tensorlake) responses.

These work on the provider's own typed fragments, so they can see things the
canonical pages drop (footers, page numbers, reading order).
"""

import logging
import re
from collections import Counter
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from infra.ocr.errors import StructureError
from ..normalize.fragments import (
    DEFAULT_EXCLUDE_TYPES,
    build_fragment_page,
    fragment_content,
    number_fragment_pages,
    sort_by_reading_order,
)
from ..normalize.selection import select_pages

logger = logging.getLogger(__name__)

HEADER_TYPES = {
    "page": ("page_header",),
    "section": ("section_header",),
    "all": ("page_header", "section_header"),
}
FOOTER_TYPES = ("page_number", "page_footer")
REFERENCE_KEYWORDS = ("references", "bibliography", "works cited", "literature cited")
CITATION_TYPES = ("page_header", "section_header", "text")

_CITATION_LABELS = {
    "page_header": "**Journal Info:**",
    "section_header": "**Title:**",
}


def _pages(raw: Mapping[str, Any], pages: Optional[Iterable[int]] = None) -> List[tuple]:
    raw_pages = raw.get("pages") if isinstance(raw, Mapping) else None
    if not isinstance(raw_pages, list):
        raise StructureError("Result does not contain 'pages' field", provider="tensorlake")
    return select_pages(number_fragment_pages(raw_pages), pages, "tensorlake")


def _fragments(page: Mapping[str, Any]) -> List[Mapping[str, Any]]:
    fragments = page.get("page_fragments")
    if not isinstance(fragments, list):
        return []
    return sort_by_reading_order(fragments)


def _rows(raw, pages, types: Sequence[str]) -> List[Dict[str, Any]]:
    rows = []
    for page_number, page in _pages(raw, pages):
        for fragment in _fragments(page):
            if fragment.get("fragment_type") in types:
                rows.append({
                    "page_number": page_number,
                    "type": fragment["fragment_type"],
                    "text": fragment_content(fragment)["content"],
                    "reading_order": fragment.get("reading_order"),
                })
    return rows


def extract_headers(
    raw: Mapping[str, Any],
    pages: Optional[Iterable[int]] = None,
    kind: str = "all"
) -> List[Dict[str, Any]]:
    """Page and/or section headers as {page_number, type, text, reading_order} rows.

    Args:
        kind: "page", "section" or "all"
    """
    if kind not in HEADER_TYPES:
        raise ValueError("kind must be 'page', 'section', or 'all'")
    return _rows(raw, pages, HEADER_TYPES[kind])


def extract_footers(raw: Mapping[str, Any], pages: Optional[Iterable[int]] = None) -> List[Dict[str, Any]]:
    """Page numbers and page footers, which the canonical pages exclude by default."""
    return _rows(raw, pages, FOOTER_TYPES)


def fragment_type_counts(raw: Mapping[str, Any], pages: Optional[Iterable[int]] = None) -> Counter:
    counts = Counter()
    for _, page in _pages(raw, pages):
        for fragment in _fragments(page):
            counts[fragment.get("fragment_type") or "unknown"] += 1
    return counts


def find_references(
    raw: Mapping[str, Any],
    pages: Optional[Iterable[int]] = None,
    keywords: Sequence[str] = REFERENCE_KEYWORDS
) -> Optional[Dict[str, Any]]:
    """
    Locate the references section and return its text.

    The section starts at the first section header containing one of the
    keywords (case-insensitive) and runs to the last selected page.

    Returns:
        {start_page, end_page, header_text, content}, or None if no header matches
    """
    selected = _pages(raw, pages)
    lowered = [keyword.lower() for keyword in keywords]

    start = None
    for position, (page_number, page) in enumerate(selected):
        for fragment in _fragments(page):
            if fragment.get("fragment_type") != "section_header":
                continue
            header_text = fragment_content(fragment)["content"]
            if any(keyword in header_text.lower() for keyword in lowered):
                start = (position, page_number, header_text)
                break
        if start:
            break

    if start is None:
        return None

    position, start_page, header_text = start
    texts = []
    for page_number, page in selected[position:]:
        text = build_fragment_page(page_number, _fragments(page), DEFAULT_EXCLUDE_TYPES).text
        if text:
            texts.append(text)

    return {
        "start_page": start_page,
        "end_page": selected[-1][0],
        "header_text": header_text,
        "content": "\n\n".join(texts),
    }


def citation_fragments(
    raw: Mapping[str, Any],
    page_number: int = 1,
    max_fragments: int = 10,
    fmt: str = "text",
    include_types: Sequence[str] = CITATION_TYPES
) -> Union[str, List[Dict[str, Any]]]:
    """
    First fragments of a page, for looking up a document's citation.

    Args:
        page_number: Page to read (usually the title page)
        max_fragments: Stop after this many matching fragments
        fmt: "text" (joined content), "json" (list of dicts) or "markdown" (labelled)
        include_types: Fragment types to keep

    Raises:
        ValueError: If fmt is unknown or the page does not exist
    """
    if fmt not in ("text", "json", "markdown"):
        raise ValueError("fmt must be 'text', 'json', or 'markdown'")

    selected = _pages(raw, [page_number])
    if not selected:
        raise ValueError(f"Page {page_number} not found in result.")

    fragments = []
    for fragment in _fragments(selected[0][1]):
        if len(fragments) >= max_fragments:
            break
        if fragment.get("fragment_type") in include_types:
            parts = fragment_content(fragment)
            fragments.append({
                "type": fragment["fragment_type"],
                "reading_order": fragment.get("reading_order"),
                "content": parts["content"],
                "html": parts["html"],
            })

    if not fragments:
        logger.warning("No matching fragments found on page %d.", page_number)
        return [] if fmt == "json" else ""

    if fmt == "json":
        return fragments
    if fmt == "text":
        return "\n\n".join(f["content"] for f in fragments)

    parts = []
    for f in fragments:
        label = _CITATION_LABELS.get(f["type"])
        parts.append(f"{label}\n{f['content']}" if label else f["content"])
    return "\n\n".join(parts)


def extract_tables(raw: Mapping[str, Any], pages: Optional[Iterable[int]] = None) -> List[Dict[str, Any]]:
    """Every table fragment with its page number, reading order and all renderings."""
    tables = []
    for page_number, page in _pages(raw, pages):
        for fragment in _fragments(page):
            if fragment.get("fragment_type") == "table":
                tables.append({
                    "page_number": page_number,
                    "reading_order": fragment.get("reading_order"),
                    **fragment_content(fragment),
                })
    return tables


def extract_page_text(
    raw: Mapping[str, Any],
    pages: Optional[Iterable[int]] = None,
    collapse: str = " "
) -> List[str]:
    """Every fragment's content joined with collapse, one string per page.

    Unlike the canonical pages, nothing is bucketed or excluded here.
    """
    return [
        collapse.join(fragment_content(fragment)["content"] for fragment in _fragments(page))
        for _, page in _pages(raw, pages)
    ]


def _markdown_block(fragment_type: str, parts: Dict[str, str]) -> str:
    content = parts["content"]
    if fragment_type == "section_header":
        return f"## {content}\n\n"
    if fragment_type in ("page_header",) + FOOTER_TYPES:
        return f"*{content}*\n\n"
    if fragment_type == "table_caption":
        return f"**{content}**\n\n"
    if fragment_type == "figure_caption":
        return f"*Figure: {content}*\n\n"
    if fragment_type == "table":
        if parts["html"]:
            return f"{parts['html']}\n\n"
        return f"```\n{content}\n```\n\n"
    if fragment_type == "figure":
        return "*[Figure]*\n\n"
    return f"{content}\n\n"


def to_markdown(
    raw: Mapping[str, Any],
    pages: Optional[Iterable[int]] = None,
    include_page_breaks: bool = True,
    include_headers: bool = False,
    include_footers: bool = False
) -> str:
    """
    Render a fragment-list response as one Markdown document.

    Section headers become "## " headings, tables keep their HTML (or fall
    back to a code block), captions are emphasised. Fragments with no
    content are skipped.

    Args:
        pages: Page numbers to render (default: all)
        include_page_breaks: Put a "---" rule and a **Page N** label before every page after the first
        include_headers: Keep running page headers
        include_footers: Keep page numbers and page footers
    """
    skipped = set()
    if not include_headers:
        skipped.add("page_header")
    if not include_footers:
        skipped.update(FOOTER_TYPES)

    parts = []
    for position, (page_number, page) in enumerate(_pages(raw, pages)):
        if include_page_breaks and position > 0:
            parts.append(f"\n\n---\n\n**Page {page_number}**\n\n")

        for fragment in _fragments(page):
            fragment_type = fragment.get("fragment_type") or "unknown"
            rendered = fragment_content(fragment)
            if not rendered["content"] or fragment_type in skipped:
                continue
            parts.append(_markdown_block(fragment_type, rendered))

    return re.sub(r"\n{3,}", "\n\n", "".join(parts))


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Unparseable timestamp in Tensorlake result: %r", value)
        return None


def extract_parse_metadata(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Job-level fields of a parse result.

    Returns:
        {parse_id, status, total_pages, parsed_pages_count, created_at,
        finished_at, processing_time, usage}. processing_time is in seconds
        and None unless both timestamps parse.
    """
    if not isinstance(raw, Mapping):
        raise StructureError("Result is not an object", provider="tensorlake")

    processing_time = None
    created = _parse_timestamp(raw.get("created_at"))
    finished = _parse_timestamp(raw.get("finished_at"))
    if created is not None and finished is not None:
        try:
            processing_time = (finished - created).total_seconds()
        except TypeError:
            # One timestamp carries an offset and the other does not
            logger.warning("Cannot compare Tensorlake timestamps %r and %r", raw.get("created_at"), raw.get("finished_at"))

    return {
        "parse_id": raw.get("parse_id"),
        "status": raw.get("status"),
        "total_pages": raw.get("total_pages"),
        "parsed_pages_count": raw.get("parsed_pages_count"),
        "created_at": raw.get("created_at"),
        "finished_at": raw.get("finished_at"),
        "processing_time": processing_time,
        "usage": raw.get("usage"),
    }
