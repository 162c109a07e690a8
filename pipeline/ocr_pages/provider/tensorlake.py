"""
Tensorlake OCR provider.

Tensorlake parses documents asynchronously:
1. PUT /documents/v2/files uploads the file and returns a file_id
2. POST /documents/v2/parse starts a parse job and returns a parse_id
3. GET /documents/v2/parse/{parse_id} is polled until the job finishes

The finished job carries a "pages" list of typed, reading-ordered fragments.
The whole document is always parsed; page selection happens at normalize time.
"""

import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from infra.ocr import OCRProvider, HTTPTransport, TransportError, Document
from ..normalize import DEFAULT_EXCLUDE_TYPES, normalize_fragment_pages
from ..schemas import CanonicalPage

logger = logging.getLogger(__name__)

TENSORLAKE_BASE_URL = "https://api.tensorlake.ai"

DONE_STATUSES = ("completed", "successful")
WAITING_STATUSES = ("processing", "pending", "queued")


class TensorlakeOCRProvider(OCRProvider):
    """Tensorlake document parsing (upload, parse, poll)."""

    def __init__(
        self,
        api_key: str = None,
        timeout: float = 60.0,
        poll_interval: float = 2.0,
        base_url: str = TENSORLAKE_BASE_URL,
        exclude_types: Iterable[str] = DEFAULT_EXCLUDE_TYPES,
        transport: Optional[HTTPTransport] = None,
        **kwargs
    ):
        super().__init__(api_key=api_key, timeout=timeout, poll_interval=poll_interval)
        self.base_url = base_url
        self.exclude_types = set(exclude_types)
        self._transport = transport

    @property
    def name(self) -> str:
        return "tensorlake"

    @property
    def raw_shape(self) -> str:
        return "fragments"

    @property
    def transport(self) -> HTTPTransport:
        if self._transport is None:
            self._transport = HTTPTransport(
                provider=self.name,
                base_url=self.base_url,
                headers={"Authorization": f"Bearer {self.require_api_key()}"},
                timeout=self.timeout,
            )
        return self._transport

    def submit(self, document: Document, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        options = options or {}
        self.require_api_key()

        file_id = self.upload(document, labels=options.get("labels"))
        parse_id = self.start_parse(file_id)
        return self.wait_for_result(parse_id)

    def upload(self, document: Document, labels: Optional[Dict[str, Any]] = None) -> str:
        path = Path(document)
        data = {"labels": json.dumps(labels)} if labels else None

        logger.info("Uploading %s to Tensorlake", path.name)
        with open(path, "rb") as f:
            response = self.transport.put(
                "/documents/v2/files",
                files={"file_bytes": (path.name, f)},
                data=data,
            )

        file_id = response.get("file_id")
        if not file_id:
            raise TransportError("Failed to get file ID from upload response.", provider=self.name)
        return file_id

    def start_parse(self, file_id: str) -> str:
        response = self.transport.post("/documents/v2/parse", json={"file_id": file_id})

        parse_id = response.get("parse_id") or response.get("id")
        if not parse_id:
            raise TransportError("Failed to get parse ID from Tensorlake response.", provider=self.name)

        logger.info("Tensorlake parse job started: %s", parse_id)
        return parse_id

    def get_result(self, parse_id: str) -> Dict[str, Any]:
        return self.transport.get(f"/documents/v2/parse/{parse_id}")

    def wait_for_result(self, parse_id: str) -> Dict[str, Any]:
        """Poll a parse job until it finishes, fails or runs past the timeout.

        Timing out stops the wait only; the job keeps running upstream.
        """
        start = time.monotonic()

        while True:
            elapsed = time.monotonic() - start
            if elapsed > self.timeout:
                raise TransportError(
                    f"Parse job timed out after {self.timeout:g} seconds. Parse ID: {parse_id}",
                    provider=self.name,
                )

            result = self.get_result(parse_id)
            status = result.get("status") or "unknown"

            if status in DONE_STATUSES:
                logger.info("Tensorlake parse %s complete (%.1fs)", parse_id, elapsed)
                return result
            if status == "failed":
                raise TransportError(
                    f"Parse job failed. Error: {result.get('error') or 'Unknown error'}",
                    provider=self.name,
                )

            if status in WAITING_STATUSES:
                logger.debug("Tensorlake parse %s status: %s (%.1fs elapsed)", parse_id, status, elapsed)
            else:
                logger.warning("Unknown Tensorlake status: %s. Continuing to poll...", status)
            time.sleep(self.poll_interval)

    def normalize(self, raw: Dict[str, Any], pages: Optional[Iterable[int]] = None) -> List[CanonicalPage]:
        return normalize_fragment_pages(raw, pages=pages, exclude_types=self.exclude_types, provider=self.name)
