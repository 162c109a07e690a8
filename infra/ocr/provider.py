from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union, TYPE_CHECKING

if TYPE_CHECKING:
    from pipeline.ocr_pages.schemas import CanonicalPage


Document = Union[str, Path]


class OCRProvider(ABC):
    """
    One external OCR service.

    Subclasses send a document to their vendor (submit) and turn the vendor's
    raw JSON into canonical pages (normalize). Credentials and limits are
    passed in explicitly; providers never read the environment.
    """

    def __init__(self, api_key: str = None, timeout: float = 60.0, poll_interval: float = 2.0):
        self.api_key = api_key
        self.timeout = timeout
        self.poll_interval = poll_interval

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @property
    @abstractmethod
    def raw_shape(self) -> str:
        """Raw response family: fragments, markdown, llm_json or blocks."""
        pass

    @abstractmethod
    def submit(self, document: Document, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Send a document to the vendor and return its raw JSON response.

        Raises:
            TransportError: On any network, auth or vendor-side failure
        """
        pass

    @abstractmethod
    def normalize(
        self,
        raw: Dict[str, Any],
        pages: Optional[Iterable[int]] = None
    ) -> List["CanonicalPage"]:
        """Convert this provider's raw response into canonical pages.

        Raises:
            StructureError: If the response lacks its top-level page list
        """
        pass

    def require_api_key(self) -> str:
        if not self.api_key:
            raise ValueError(f"No API key configured for provider '{self.name}'")
        return self.api_key


def is_url(document: Document) -> bool:
    return isinstance(document, str) and document.startswith(("http://", "https://"))
