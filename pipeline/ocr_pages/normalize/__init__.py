"""
Page normalizers: raw provider response -> List[CanonicalPage].

One normalizer per raw response shape. All are pure functions of
(raw, pages, exclude_types); they log per-page problems and raise
StructureError only when the top-level page list is missing.
"""

from typing import Callable, Dict

from .fragments import DEFAULT_EXCLUDE_TYPES, normalize_fragment_pages
from .mistral import normalize_mistral_pages
from .claude import normalize_claude_pages
from .textract import normalize_textract_pages, blocks_to_fragment_pages
from .selection import select_pages

NORMALIZERS: Dict[str, Callable] = {
    "fragments": normalize_fragment_pages,
    "markdown": normalize_mistral_pages,
    "llm_json": normalize_claude_pages,
    "blocks": normalize_textract_pages,
}


def get_normalizer(shape: str) -> Callable:
    if shape not in NORMALIZERS:
        raise ValueError(
            f"Unknown raw response shape: '{shape}'. "
            f"Available: {', '.join(sorted(NORMALIZERS))}"
        )
    return NORMALIZERS[shape]


__all__ = [
    "DEFAULT_EXCLUDE_TYPES",
    "NORMALIZERS",
    "get_normalizer",
    "normalize_fragment_pages",
    "normalize_mistral_pages",
    "normalize_claude_pages",
    "normalize_textract_pages",
    "blocks_to_fragment_pages",
    "select_pages",
]
