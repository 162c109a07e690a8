"""
AWS Textract OCR provider.

Uses the synchronous APIs, which take the document bytes inline:
- AnalyzeDocument when feature types are requested (tables, forms, layout)
- DetectDocumentText when the feature list is empty (lines and words only)

Both return a flat "Blocks" graph which the normalizer folds into pages.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from infra.ocr import OCRProvider, TransportError, Document
from ..normalize import DEFAULT_EXCLUDE_TYPES, normalize_textract_pages
from ..schemas import CanonicalPage

logger = logging.getLogger(__name__)

DEFAULT_REGION = "us-east-1"
DEFAULT_FEATURES = ("TABLES", "FORMS", "LAYOUT")

# Synchronous Textract limit for inline bytes
MAX_DOCUMENT_BYTES = 5 * 1024 * 1024


class TextractOCRProvider(OCRProvider):
    """AWS Textract via boto3."""

    def __init__(
        self,
        api_key: str = None,
        secret_key: str = None,
        region: str = None,
        features: Sequence[str] = DEFAULT_FEATURES,
        timeout: float = 60.0,
        poll_interval: float = 2.0,
        exclude_types: Iterable[str] = DEFAULT_EXCLUDE_TYPES,
        client: Any = None,
        **kwargs
    ):
        super().__init__(api_key=api_key, timeout=timeout, poll_interval=poll_interval)
        self.secret_key = secret_key
        self.region = region or DEFAULT_REGION
        self.features = list(features or [])
        self.exclude_types = set(exclude_types)
        self._client = client

    @property
    def name(self) -> str:
        return "textract"

    @property
    def raw_shape(self) -> str:
        return "blocks"

    @property
    def client(self):
        if self._client is None:
            if not self.api_key or not self.secret_key:
                raise ValueError("AWS access key ID and secret access key are required for Textract")
            try:
                import boto3
                from botocore.config import Config
            except ImportError as e:
                raise TransportError(f"boto3 package not installed: {e}", provider=self.name) from e

            self._client = boto3.client(
                "textract",
                aws_access_key_id=self.api_key,
                aws_secret_access_key=self.secret_key,
                region_name=self.region,
                config=Config(read_timeout=self.timeout, connect_timeout=min(self.timeout, 60)),
            )
        return self._client

    def submit(self, document: Document, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        options = options or {}
        features = list(options.get("features", self.features) or [])
        path = Path(document)

        data = path.read_bytes()
        if len(data) > MAX_DOCUMENT_BYTES:
            raise TransportError(
                f"File size ({len(data) / 1024 / 1024:.2f} MB) exceeds the 5 MB limit for synchronous processing.",
                provider=self.name,
            )

        try:
            if features:
                logger.info("Textract AnalyzeDocument %s with features: %s", path.name, ", ".join(features))
                response = self.client.analyze_document(Document={"Bytes": data}, FeatureTypes=features)
            else:
                logger.info("Textract DetectDocumentText %s", path.name)
                response = self.client.detect_document_text(Document={"Bytes": data})
        except (TransportError, ValueError):
            raise
        except Exception as e:
            raise TransportError(f"Textract request failed: {e}", provider=self.name) from e

        return dict(response)

    def normalize(self, raw: Dict[str, Any], pages: Optional[Iterable[int]] = None) -> List[CanonicalPage]:
        return normalize_textract_pages(raw, pages=pages, exclude_types=self.exclude_types)
