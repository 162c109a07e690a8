"""
Mistral OCR provider implementation using Mistral AI API.

Uses Mistral's native OCR API:
- Returns one markdown document per page, 0-based "index"
- Splits out header/footer text when asked to
- Extracts tables separately (markdown or html) and references them from the page markdown
- Detects images with bounding boxes

Local files are uploaded with purpose="ocr" and processed through a signed URL;
http(s) URLs are passed straight through.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from mistralai import Mistral

from infra.ocr import OCRProvider, TransportError, Document, is_url
from ..normalize import DEFAULT_EXCLUDE_TYPES, normalize_mistral_pages
from ..schemas import CanonicalPage

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "mistral-ocr-latest"

IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp", ".avif", ".tiff", ".bmp"}

# Passed to client.ocr.process unless overridden per call
DEFAULT_OPTIONS = {
    "include_image_base64": False,
    "table_format": "markdown",
    "extract_header": True,
    "extract_footer": True,
}


def document_chunk(url: str, source: Document) -> Dict[str, str]:
    """Build the OCR "document" argument; images and PDFs use different chunk types."""
    suffix = Path(str(source).split("?")[0]).suffix.lower()
    if suffix in IMAGE_EXTENSIONS:
        return {"type": "image_url", "image_url": url}
    return {"type": "document_url", "document_url": url}


class MistralOCRProvider(OCRProvider):
    """Mistral OCR provider using Mistral AI API."""

    def __init__(
        self,
        api_key: str = None,
        model: str = None,
        timeout: float = 60.0,
        poll_interval: float = 2.0,
        exclude_types: Iterable[str] = DEFAULT_EXCLUDE_TYPES,
        client: Optional[Mistral] = None,
        **kwargs
    ):
        super().__init__(api_key=api_key, timeout=timeout, poll_interval=poll_interval)
        self.model = model or DEFAULT_MODEL
        self.exclude_types = set(exclude_types)
        self._client = client

    @property
    def name(self) -> str:
        return "mistral"

    @property
    def raw_shape(self) -> str:
        return "markdown"

    @property
    def client(self) -> Mistral:
        if self._client is None:
            self._client = Mistral(api_key=self.require_api_key(), timeout_ms=int(self.timeout * 1000))
        return self._client

    def upload(self, path: Path) -> str:
        """Upload a local file for OCR and return a signed URL to it."""
        logger.info("Uploading %s to Mistral", path.name)
        with open(path, "rb") as f:
            uploaded = self.client.files.upload(
                file={"file_name": path.name, "content": f},
                purpose="ocr",
            )
        signed = self.client.files.get_signed_url(file_id=uploaded.id)
        return signed.url

    def submit(self, document: Document, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        self.require_api_key()
        process_options = {**DEFAULT_OPTIONS, **(options or {})}
        model = process_options.pop("model", self.model)

        try:
            url = document if is_url(document) else self.upload(Path(document))
            response = self.client.ocr.process(
                model=model,
                document=document_chunk(url, document),
                **process_options
            )
        except (OSError, TransportError):
            raise
        except Exception as e:
            raise TransportError(f"Mistral OCR request failed: {e}", provider=self.name) from e

        raw = response.model_dump()
        logger.info("Mistral OCR returned %d pages", len(raw.get("pages") or []))
        return raw

    def normalize(self, raw: Dict[str, Any], pages: Optional[Iterable[int]] = None) -> List[CanonicalPage]:
        return normalize_mistral_pages(raw, pages=pages, exclude_types=self.exclude_types)
