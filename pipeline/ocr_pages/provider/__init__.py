"""
OCR Provider package.

Provides pluggable OCR providers that can be:
1. Built-in (auto-registered on import)
2. Config-defined (instantiated from ohseer config by type)

Usage:
    from pipeline.ocr_pages.provider import get_provider, list_providers

    # Get a provider by name
    provider = get_provider("tensorlake", config=config)

    # List available providers
    available = list_providers(config)
"""

from .registry import (
    register_provider,
    register_provider_type,
    get_provider,
    list_providers,
    list_provider_types,
    is_registered,
    is_type_registered,
)

# Import provider classes
from .tensorlake import TensorlakeOCRProvider
from .mistral import MistralOCRProvider
from .claude import ClaudeOCRProvider
from .textract import TextractOCRProvider

# Auto-register built-in providers
register_provider("tensorlake", TensorlakeOCRProvider)
register_provider("mistral", MistralOCRProvider)
register_provider("claude", ClaudeOCRProvider)
register_provider("textract", TextractOCRProvider)

# Register provider types for config-based instantiation
register_provider_type("tensorlake", TensorlakeOCRProvider)
register_provider_type("mistral-ocr", MistralOCRProvider)
register_provider_type("claude", ClaudeOCRProvider)
register_provider_type("textract", TextractOCRProvider)


__all__ = [
    # Registry functions
    "get_provider",
    "list_providers",
    "list_provider_types",
    "register_provider",
    "register_provider_type",
    "is_registered",
    "is_type_registered",
    # Provider classes (for direct instantiation if needed)
    "TensorlakeOCRProvider",
    "MistralOCRProvider",
    "ClaudeOCRProvider",
    "TextractOCRProvider",
]
