from typing import Any, List
from pydantic import BaseModel, Field, field_validator


def as_text(value: Any) -> str:
    """Coerce an optional scalar to a string ("" for None)."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


class CanonicalTable(BaseModel):
    """A table in every representation we can offer. Missing forms are ""."""
    content: str = Field(default="", description="Plain-text rendering of the table")
    markdown: str = Field(default="", description="Pipe-table markdown")
    html: str = Field(default="", description="HTML <table> markup")
    summary: str = Field(default="", description="Short description of the table")

    @field_validator('content', 'markdown', 'html', 'summary', mode='before')
    @classmethod
    def default_missing_text(cls, v):
        return as_text(v)


class CanonicalFragment(BaseModel):
    """Anything on a page that is not a header, body text or table."""
    type: str = Field(default="unknown", description="Fragment label, e.g. figure_caption")
    content: str = Field(default="", description="Fragment text")

    @field_validator('type', mode='before')
    @classmethod
    def default_missing_type(cls, v):
        text = as_text(v)
        return text or "unknown"

    @field_validator('content', mode='before')
    @classmethod
    def default_missing_content(cls, v):
        return as_text(v)


class CanonicalPage(BaseModel):
    """Provider-agnostic page produced by every normalizer."""
    page_number: int = Field(..., ge=1, description="1-based page number from the source numbering")
    page_header: List[str] = Field(default_factory=list, description="Running headers in reading order")
    section_header: List[str] = Field(default_factory=list, description="Section titles in reading order")
    text: str = Field(default="", description="Body paragraphs joined by blank lines")
    tables: List[CanonicalTable] = Field(default_factory=list)
    other: List[CanonicalFragment] = Field(default_factory=list)

    @field_validator('page_header', 'section_header', mode='before')
    @classmethod
    def coerce_headers(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        elif not isinstance(v, (list, tuple)):
            return []
        return [as_text(item) for item in v if item is not None and as_text(item) != ""]

    @field_validator('text', mode='before')
    @classmethod
    def coerce_text(cls, v):
        return as_text(v)

    @field_validator('tables', 'other', mode='before')
    @classmethod
    def coerce_lists(cls, v):
        if v is None:
            return []
        return v
