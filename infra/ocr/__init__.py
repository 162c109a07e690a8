from .provider import OCRProvider, Document, is_url
from .transport import HTTPTransport
from .errors import (
    OCRError,
    TransportError,
    StructureError,
    ConfigurationError,
    AllProvidersFailedError,
)

__all__ = [
    "OCRProvider",
    "Document",
    "is_url",
    "HTTPTransport",
    "OCRError",
    "TransportError",
    "StructureError",
    "ConfigurationError",
    "AllProvidersFailedError",
]
