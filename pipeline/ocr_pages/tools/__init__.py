"""
Helpers over raw provider responses.

Fragment-list (Tensorlake) responses:
    extract_headers, extract_footers, fragment_type_counts,
    find_references, citation_fragments, extract_tables,
    extract_page_text, to_markdown, extract_parse_metadata

Block-graph (Textract) responses:
    extract_key_value_pairs, extract_document_metadata
"""

from .fragments import (
    extract_headers,
    extract_footers,
    fragment_type_counts,
    find_references,
    citation_fragments,
    extract_tables,
    extract_page_text,
    to_markdown,
    extract_parse_metadata,
)
from .blocks import extract_key_value_pairs, extract_document_metadata

__all__ = [
    "extract_headers",
    "extract_footers",
    "fragment_type_counts",
    "find_references",
    "citation_fragments",
    "extract_tables",
    "extract_page_text",
    "to_markdown",
    "extract_parse_metadata",
    "extract_key_value_pairs",
    "extract_document_metadata",
]
