"""
Markdown-native normalizer (Mistral OCR shape).

Raw page shape:
    {"index": 0, "markdown": "...", "header": "...", "footer": "...",
     "tables": [{"id": "tbl-0.md", "content": "|a|b|", "format": "markdown"}],
     "images": [...], "hyperlinks": [...], "dimensions": {...}}

Table links inside the markdown (e.g. "[tbl-0.md](tbl-0.md)") are left as-is;
callers cross-reference them against the page's tables themselves.
"""

import logging
from typing import Any, Iterable, List, Mapping, Optional

from infra.ocr.errors import StructureError
from ..schemas import CanonicalPage, CanonicalTable, CanonicalFragment, as_text
from .fragments import DEFAULT_EXCLUDE_TYPES
from .selection import select_pages

logger = logging.getLogger(__name__)

PROVIDER = "mistral"


def _header_lines(value: Any) -> List[str]:
    # Absent, "" and {} all mean "not extracted"
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, list):
        return [item for item in value if isinstance(item, str) and item.strip()]
    return []


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _table(table: Any) -> CanonicalTable:
    if not isinstance(table, Mapping):
        return CanonicalTable(content=as_text(table))

    content = as_text(table.get("content"))
    table_format = as_text(table.get("format")).lower()
    if table_format == "markdown":
        return CanonicalTable(markdown=content)
    if table_format == "html":
        return CanonicalTable(html=content)
    return CanonicalTable(content=content)


def _number_pages(raw_pages: List[Any]) -> List[tuple]:
    numbered = []
    for position, page in enumerate(raw_pages, start=1):
        if not isinstance(page, Mapping):
            logger.warning("Page at position %d is not an object. Skipping.", position)
            continue
        index = page.get("index")
        if isinstance(index, int) and not isinstance(index, bool) and index >= 0:
            numbered.append((index + 1, page))
        else:
            logger.warning("Page at position %d has no index; using its position.", position)
            numbered.append((position, page))
    return numbered


def _other_fragments(page: Mapping[str, Any], excluded: set) -> List[CanonicalFragment]:
    other = []

    footer = page.get("footer")
    if isinstance(footer, str) and footer.strip():
        other.append(CanonicalFragment(type="page_footer", content=footer))

    for image in _as_list(page.get("images")):
        if isinstance(image, Mapping):
            label = image.get("image_annotation") or image.get("id")
        else:
            label = image
        other.append(CanonicalFragment(type="figure", content=label))

    for link in _as_list(page.get("hyperlinks")):
        if isinstance(link, Mapping):
            link = link.get("url") or link.get("href") or link.get("text")
        other.append(CanonicalFragment(type="hyperlink", content=link))

    return [fragment for fragment in other if fragment.type not in excluded]


def normalize_mistral_pages(
    raw: Mapping[str, Any],
    pages: Optional[Iterable[int]] = None,
    exclude_types: Iterable[str] = DEFAULT_EXCLUDE_TYPES
) -> List[CanonicalPage]:
    """
    Convert a Mistral OCR response into canonical pages.

    Native page index is 0-based; page_number is index + 1.

    Raises:
        StructureError: If the response has no page list
    """
    raw_pages = raw.get("pages") if isinstance(raw, Mapping) else None
    if not isinstance(raw_pages, list):
        raise StructureError("Invalid result structure: no pages found.", provider=PROVIDER)

    excluded = set(exclude_types)
    output = []
    for page_number, page in select_pages(_number_pages(raw_pages), pages, PROVIDER):
        tables = page.get("tables")
        output.append(CanonicalPage(
            page_number=page_number,
            page_header=_header_lines(page.get("header")),
            section_header=[],
            text=as_text(page.get("markdown")),
            tables=[_table(table) for table in tables] if isinstance(tables, list) else [],
            other=_other_fragments(page, excluded),
        ))

    return output
