"""Queries over raw block-graph (Textract) responses."""

import logging
from typing import Any, Dict, List, Mapping

from infra.ocr.errors import StructureError
from ..normalize.textract import index_blocks, child_ids, block_text, table_grid

logger = logging.getLogger(__name__)


def _blocks(raw: Mapping[str, Any]) -> List[Any]:
    blocks = raw.get("Blocks") if isinstance(raw, Mapping) else None
    if not isinstance(blocks, list):
        raise StructureError("Invalid result structure: no blocks found.", provider="textract")
    return blocks


def extract_key_value_pairs(raw: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """
    FORMS key/value pairs as {key, value, confidence} rows, in block order.

    Keys without a linked VALUE block get an empty value. Responses produced
    without the FORMS feature simply yield no rows.

    Raises:
        StructureError: If the response has no block list
    """
    blocks = _blocks(raw)
    by_id = index_blocks(blocks)
    pairs = []
    for block in blocks:
        if not isinstance(block, Mapping) or block.get("BlockType") != "KEY_VALUE_SET":
            continue
        if "KEY" not in (block.get("EntityTypes") or []):
            continue

        value = ""
        value_ids = child_ids(block, "VALUE")
        if value_ids and value_ids[0] in by_id:
            value = block_text(by_id[value_ids[0]], by_id)

        pairs.append({
            "key": block_text(block, by_id),
            "value": value,
            "confidence": block.get("Confidence"),
        })
    return pairs


def extract_document_metadata(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Whole-document view of a Textract response.

    Returns:
        {text, key_value_pairs, tables, pages}: every LINE joined with
        newlines, the FORMS pairs, one cell grid per TABLE block and the
        number of PAGE blocks.
    """
    blocks = _blocks(raw)
    if not blocks:
        logger.warning("No blocks found in Textract response.")

    by_id = index_blocks(blocks)
    typed = [block for block in blocks if isinstance(block, Mapping)]
    lines = [block["Text"] for block in typed if block.get("BlockType") == "LINE" and block.get("Text") is not None]

    return {
        "text": "\n".join(lines),
        "key_value_pairs": extract_key_value_pairs(raw),
        "tables": [table_grid(block, by_id) for block in typed if block.get("BlockType") == "TABLE"],
        "pages": sum(1 for block in typed if block.get("BlockType") == "PAGE"),
    }
