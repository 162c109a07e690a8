"""
Block-graph normalizer (AWS Textract shape).

Textract answers with a flat list of blocks linked by CHILD relationships
(PAGE -> LAYOUT_* -> LINE -> WORD, TABLE -> CELL -> WORD). The blocks are
first folded into the fragment-list shape, then the fragment-list algorithm
does the rest, so both providers bucket and order content identically.
"""

import html
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from infra.ocr.errors import StructureError
from ..schemas import CanonicalPage, as_text
from .fragments import DEFAULT_EXCLUDE_TYPES, normalize_fragment_pages
from .selection import coerce_page_number

logger = logging.getLogger(__name__)

PROVIDER = "textract"

LAYOUT_FRAGMENT_TYPES = {
    "LAYOUT_HEADER": "page_header",
    "LAYOUT_TITLE": "section_header",
    "LAYOUT_SECTION_HEADER": "section_header",
    "LAYOUT_TEXT": "text",
    "LAYOUT_LIST": "text",
    "LAYOUT_TABLE": "table",
    "LAYOUT_FIGURE": "figure",
    "LAYOUT_FOOTER": "page_footer",
    "LAYOUT_PAGE_NUMBER": "page_number",
    "LAYOUT_KEY_VALUE": "key_value",
}


def index_blocks(blocks: List[Any]) -> Dict[str, Mapping[str, Any]]:
    return {
        block["Id"]: block
        for block in blocks
        if isinstance(block, Mapping) and block.get("Id")
    }


def child_ids(block: Mapping[str, Any], relationship: str = "CHILD") -> List[str]:
    ids = []
    for rel in block.get("Relationships") or []:
        if isinstance(rel, Mapping) and rel.get("Type") == relationship:
            ids.extend(rel.get("Ids") or [])
    return ids


def block_text(block: Mapping[str, Any], by_id: Mapping[str, Mapping[str, Any]], separator: str = " ") -> str:
    """Text of a block, falling back to the text of its children."""
    if block.get("Text") is not None:
        return as_text(block.get("Text"))

    texts = []
    for child_id in child_ids(block):
        child = by_id.get(child_id)
        if child is not None and child.get("Text") is not None:
            texts.append(as_text(child["Text"]))
    return separator.join(texts)


def table_grid(table: Mapping[str, Any], by_id: Mapping[str, Mapping[str, Any]]) -> List[List[str]]:
    cells = [
        by_id[cell_id] for cell_id in child_ids(table)
        if cell_id in by_id and by_id[cell_id].get("BlockType") == "CELL"
    ]
    if not cells:
        return []

    n_rows = max(coerce_page_number(cell.get("RowIndex")) or 1 for cell in cells)
    n_cols = max(coerce_page_number(cell.get("ColumnIndex")) or 1 for cell in cells)
    grid = [["" for _ in range(n_cols)] for _ in range(n_rows)]

    for cell in cells:
        row = (coerce_page_number(cell.get("RowIndex")) or 1) - 1
        col = (coerce_page_number(cell.get("ColumnIndex")) or 1) - 1
        grid[row][col] = block_text(cell, by_id)

    return grid


def render_table(grid: List[List[str]]) -> Dict[str, str]:
    """Plain, markdown and HTML renderings of a cell grid."""
    if not grid:
        return {"content": "", "markdown": "", "html": "", "summary": ""}

    content = "\n".join("\t".join(row) for row in grid)

    def md_row(row):
        return "| " + " | ".join(cell.replace("|", "\\|") for cell in row) + " |"

    md_lines = [md_row(grid[0]), "| " + " | ".join("---" for _ in grid[0]) + " |"]
    md_lines.extend(md_row(row) for row in grid[1:])

    html_rows = "".join(
        "<tr>" + "".join(f"<td>{html.escape(cell)}</td>" for cell in row) + "</tr>"
        for row in grid
    )

    return {
        "content": content,
        "markdown": "\n".join(md_lines),
        "html": f"<table>{html_rows}</table>",
        "summary": "",
    }


def _is_layout(block: Optional[Mapping[str, Any]]) -> bool:
    return block is not None and as_text(block.get("BlockType")).startswith("LAYOUT_")


def layout_text(block: Mapping[str, Any], by_id: Mapping[str, Mapping[str, Any]], _seen=None) -> str:
    """
    Text of a layout block.

    Container layouts (LAYOUT_LIST) point at other layout blocks rather than
    LINEs; their items are gathered one per line.
    """
    seen = (_seen or set()) | {block.get("Id")}
    nested = [
        by_id[i] for i in child_ids(block)
        if i not in seen and _is_layout(by_id.get(i))
    ]
    if not nested:
        separator = "\n" if block.get("BlockType") == "LAYOUT_LIST" else " "
        return block_text(block, by_id, separator)

    items = [layout_text(child, by_id, seen) for child in nested]
    return "\n".join(item for item in items if item)


def _page_fragments(blocks: List[Mapping[str, Any]], by_id) -> List[Dict[str, Any]]:
    layout = [b for b in blocks if _is_layout(b)]
    nested_ids = {
        child_id
        for block in layout
        for child_id in child_ids(block)
        if child_id != block.get("Id") and _is_layout(by_id.get(child_id))
    }
    layout = [b for b in layout if b.get("Id") not in nested_ids]
    tables = [b for b in blocks if b.get("BlockType") == "TABLE"]
    fragments = []

    def add(fragment_type, content):
        fragments.append({
            "fragment_type": fragment_type,
            "reading_order": len(fragments) + 1,
            "content": content,
        })

    if layout:
        remaining_tables = iter(tables)
        for block in layout:
            block_type = block["BlockType"]
            fragment_type = LAYOUT_FRAGMENT_TYPES.get(block_type, block_type[len("LAYOUT_"):].lower())
            if fragment_type == "table":
                table = next(remaining_tables, None)
                if table is not None:
                    add("table", render_table(table_grid(table, by_id)))
                else:
                    add("table", {"content": block_text(block, by_id)})
                continue
            text = layout_text(block, by_id)
            if text:
                add(fragment_type, {"content": text})
        for table in remaining_tables:
            add("table", render_table(table_grid(table, by_id)))
    else:
        lines = [as_text(b.get("Text")) for b in blocks if b.get("BlockType") == "LINE"]
        if lines:
            add("text", {"content": "\n".join(lines)})
        for table in tables:
            add("table", render_table(table_grid(table, by_id)))

    return fragments


def blocks_to_fragment_pages(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Fold a Textract block list into {"pages": [{"page_number", "page_fragments"}]}.

    Raises:
        StructureError: If the response has no block list
    """
    blocks = raw.get("Blocks") if isinstance(raw, Mapping) else None
    if not isinstance(blocks, list):
        raise StructureError("Invalid result structure: no blocks found.", provider=PROVIDER)

    if not blocks:
        logger.warning("No blocks found in Textract response.")

    by_id = index_blocks(blocks)
    page_order = []
    per_page: Dict[int, List[Mapping[str, Any]]] = {}
    for block in blocks:
        if not isinstance(block, Mapping):
            continue
        number = coerce_page_number(block.get("Page")) or 1
        if number not in per_page:
            per_page[number] = []
            page_order.append(number)
        per_page[number].append(block)

    return {
        "pages": [
            {"page_number": number, "page_fragments": _page_fragments(per_page[number], by_id)}
            for number in page_order
        ]
    }


def normalize_textract_pages(
    raw: Mapping[str, Any],
    pages: Optional[Iterable[int]] = None,
    exclude_types: Iterable[str] = DEFAULT_EXCLUDE_TYPES
) -> List[CanonicalPage]:
    return normalize_fragment_pages(
        blocks_to_fragment_pages(raw),
        pages=pages,
        exclude_types=exclude_types,
        provider=PROVIDER,
    )
