"""
OCR error taxonomy.

TransportError and StructureError mark a single provider attempt as failed;
the fallback orchestrator records them and moves on. ConfigurationError and
AllProvidersFailedError are the only terminal failures a caller sees.
"""

from pathlib import Path
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from pipeline.ocr_pages.schemas import AttemptRecord


class OCRError(Exception):
    pass


class TransportError(OCRError):
    """Network, auth or vendor-side failure raised by a provider adapter."""

    def __init__(self, message: str, provider: str = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


class StructureError(OCRError):
    """Raw response is missing the minimum top-level shape a normalizer needs."""

    def __init__(self, message: str, provider: str = None):
        super().__init__(message)
        self.provider = provider


class ConfigurationError(OCRError):
    pass


class AllProvidersFailedError(OCRError):
    def __init__(self, document, attempted: List[str], error_log: List["AttemptRecord"]):
        self.document = str(document)
        self.attempted = list(attempted)
        self.error_log = list(error_log)
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        name = Path(self.document).name or self.document
        message = (
            f"All OCR providers failed for: {name}\n"
            f"Providers attempted: {', '.join(self.attempted)}"
        )
        if self.error_log:
            details = "\n".join(
                f"  - {record.provider}: {record.reason}" for record in self.error_log
            )
            message += f"\n\nErrors:\n{details}"
        return message
