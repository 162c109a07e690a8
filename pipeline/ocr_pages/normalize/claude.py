"""
LLM-JSON normalizer (Claude shape).

The adapter prompts the model to answer in nearly-canonical JSON and stores
the parsed answer under raw["structured_output"]. Nothing in that answer is
trusted: every field is optional and gets its typed default here.
"""

import logging
from typing import Any, Iterable, List, Mapping, Optional

from infra.ocr.errors import StructureError
from ..schemas import CanonicalPage, CanonicalTable, CanonicalFragment, as_text
from .selection import coerce_page_number, select_pages

logger = logging.getLogger(__name__)

PROVIDER = "claude"
TABLE_FIELDS = ("content", "markdown", "html", "summary")


def _table(table: Any) -> CanonicalTable:
    if isinstance(table, Mapping):
        return CanonicalTable(**{key: table.get(key) for key in TABLE_FIELDS})
    return CanonicalTable(content=table)


def _fragment(item: Any) -> CanonicalFragment:
    if isinstance(item, Mapping):
        return CanonicalFragment(type=item.get("type"), content=item.get("content"))
    return CanonicalFragment(type="unknown", content=item)


def _text(value: Any) -> str:
    if isinstance(value, list):
        return "\n\n".join(as_text(part) for part in value if part is not None)
    return as_text(value)


def _items(page: Mapping[str, Any], key: str, page_number: int) -> List[Any]:
    value = page.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        logger.warning("Field '%s' on page %d is not a list; wrapping it.", key, page_number)
        return [value]
    return value


def _number_pages(raw_pages: List[Any]) -> List[tuple]:
    numbered = []
    for position, page in enumerate(raw_pages, start=1):
        if not isinstance(page, Mapping):
            logger.warning("Page at position %d is not an object. Skipping.", position)
            continue
        numbered.append((coerce_page_number(page.get("page_number")) or position, page))
    return numbered


def normalize_claude_pages(
    raw: Mapping[str, Any],
    pages: Optional[Iterable[int]] = None,
    exclude_types: Iterable[str] = ()
) -> List[CanonicalPage]:
    """
    Reconcile Claude structured output with the canonical page model.

    Raises:
        StructureError: If the model's answer did not parse into a page list
    """
    structured = raw.get("structured_output") if isinstance(raw, Mapping) else None
    raw_pages = structured.get("pages") if isinstance(structured, Mapping) else None
    if not isinstance(raw_pages, list):
        raise StructureError(
            "No structured output found in Claude result. "
            "The response may not have been parsed correctly.",
            provider=PROVIDER
        )

    excluded = set(exclude_types)
    output = []
    for page_number, page in select_pages(_number_pages(raw_pages), pages, PROVIDER):
        other = [_fragment(item) for item in _items(page, "other", page_number)]
        output.append(CanonicalPage(
            page_number=page_number,
            page_header=page.get("page_header"),
            section_header=page.get("section_header"),
            text=_text(page.get("text")),
            tables=[_table(table) for table in _items(page, "tables", page_number)],
            other=[fragment for fragment in other if fragment.type not in excluded],
        ))

    return output
