"""
Claude OCR provider (Anthropic Messages API).

The document is sent inline as base64 together with a prompt asking for the
canonical page JSON. The model's text answer is parsed into
"structured_output"; when it is not valid JSON the text is kept as
"raw_text" and structured_output is None, which the normalizer reports as a
StructureError.
"""

import base64
import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from infra.ocr import OCRProvider, HTTPTransport, TransportError, Document
from ..normalize import normalize_claude_pages
from ..schemas import CanonicalPage

logger = logging.getLogger(__name__)

ANTHROPIC_BASE_URL = "https://api.anthropic.com"
ANTHROPIC_VERSION = "2023-06-01"
DEFAULT_MODEL = "claude-sonnet-4-5"
DEFAULT_MAX_TOKENS = 16000

MEDIA_TYPES = {
    ".pdf": "application/pdf",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
}

EXTRACTION_PROMPT = """Extract all content from this document and return it as JSON with this structure:

{
  "pages": [
    {
      "page_number": 1,
      "page_header": ["Running header text if present"],
      "section_header": ["Section title if present"],
      "text": "All body text content with paragraphs separated by \\n\\n",
      "tables": [
        {
          "content": "Plain text representation of table",
          "markdown": "Markdown formatted table using | separators",
          "html": "<table>HTML representation</table>",
          "summary": "Brief description of what the table contains"
        }
      ],
      "other": [
        {
          "type": "figure_caption",
          "content": "Figure 1. Caption text..."
        }
      ]
    }
  ]
}

Instructions:
- Identify page boundaries (for multi-page PDFs, increment page_number)
- Extract running headers (journal name, article title, page numbers in margins)
- Identify section headings (Introduction, Methods, etc.)
- Preserve all body text with paragraph breaks
- For tables: provide plain text, markdown, and HTML representations, plus a summary
- Capture figure captions, footnotes, etc. in the "other" array with appropriate type labels
- Return ONLY the JSON, no additional text"""

_FENCE = re.compile(r"^\s*```(?:json)?\s*\n(.*?)\n?```\s*$", re.DOTALL)


def media_type_for(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix not in MEDIA_TYPES:
        supported = ", ".join(ext.lstrip(".").upper() for ext in MEDIA_TYPES)
        raise TransportError(
            f"Unsupported file type: {suffix.lstrip('.') or path.name}. Supported: {supported}",
            provider="claude",
        )
    return MEDIA_TYPES[suffix]


def content_block(path: Path) -> Dict[str, Any]:
    """Inline base64 source block; PDFs go in a document block, images in an image block."""
    media_type = media_type_for(path)
    data = base64.b64encode(path.read_bytes()).decode("utf-8")
    return {
        "type": "document" if media_type == "application/pdf" else "image",
        "source": {"type": "base64", "media_type": media_type, "data": data},
    }


def response_text(response: Dict[str, Any]) -> Optional[str]:
    """Concatenate the text blocks of a Messages API response."""
    parts = [
        block.get("text", "")
        for block in response.get("content") or []
        if isinstance(block, dict) and block.get("type", "text") == "text"
    ]
    return "".join(parts) if parts else None


def parse_json_answer(text: str) -> Optional[Any]:
    """Parse the model's answer as JSON, tolerating a surrounding code fence."""
    match = _FENCE.match(text)
    if match:
        text = match.group(1)
    try:
        return json.loads(text)
    except ValueError:
        return None


class ClaudeOCRProvider(OCRProvider):
    """Claude vision extraction into the canonical page JSON."""

    def __init__(
        self,
        api_key: str = None,
        model: str = None,
        timeout: float = 300.0,
        poll_interval: float = 2.0,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        extraction_prompt: str = None,
        base_url: str = ANTHROPIC_BASE_URL,
        exclude_types: Iterable[str] = (),
        transport: Optional[HTTPTransport] = None,
        **kwargs
    ):
        super().__init__(api_key=api_key, timeout=timeout, poll_interval=poll_interval)
        self.model = model or DEFAULT_MODEL
        self.max_tokens = int(max_tokens)
        self.extraction_prompt = extraction_prompt or EXTRACTION_PROMPT
        self.base_url = base_url
        self.exclude_types = set(exclude_types)
        self._transport = transport

    @property
    def name(self) -> str:
        return "claude"

    @property
    def raw_shape(self) -> str:
        return "llm_json"

    @property
    def transport(self) -> HTTPTransport:
        if self._transport is None:
            self._transport = HTTPTransport(
                provider=self.name,
                base_url=self.base_url,
                headers={
                    "x-api-key": self.require_api_key(),
                    "anthropic-version": ANTHROPIC_VERSION,
                    "content-type": "application/json",
                },
                timeout=self.timeout,
            )
        return self._transport

    def build_request(self, path: Path, options: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "model": options.get("model", self.model),
            "max_tokens": options.get("max_tokens", self.max_tokens),
            "messages": [
                {
                    "role": "user",
                    "content": [
                        content_block(path),
                        {"type": "text", "text": options.get("extraction_prompt", self.extraction_prompt)},
                    ],
                }
            ],
        }

    def submit(self, document: Document, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        self.require_api_key()
        path = Path(document)
        body = self.build_request(path, options or {})

        logger.info("Sending %s to Claude (%s)", path.name, body["model"])
        result = self.transport.post("/v1/messages", json=body)

        text = response_text(result)
        if text is None:
            return result

        structured = parse_json_answer(text)
        result["structured_output"] = structured
        if structured is None:
            logger.warning("Could not parse Claude response as JSON. Returning raw text.")
            result["raw_text"] = text
        return result

    def normalize(self, raw: Dict[str, Any], pages: Optional[Iterable[int]] = None) -> List[CanonicalPage]:
        return normalize_claude_pages(raw, pages=pages, exclude_types=self.exclude_types)
