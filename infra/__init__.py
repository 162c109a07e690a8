from infra.config import OhseerConfig, get_config

from infra.ocr import (
    OCRProvider,
    HTTPTransport,
    OCRError,
    TransportError,
    StructureError,
    ConfigurationError,
    AllProvidersFailedError,
)

from infra.pipeline import (
    PipelineLogger,
    create_logger,
)

__all__ = [
    "OhseerConfig",
    "get_config",

    "OCRProvider",
    "HTTPTransport",
    "OCRError",
    "TransportError",
    "StructureError",
    "ConfigurationError",
    "AllProvidersFailedError",

    "PipelineLogger",
    "create_logger",
]
