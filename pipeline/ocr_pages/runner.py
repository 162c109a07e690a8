"""
Top-level OCR entry point.

run_ocr() wires configuration, the credential gate and the fallback
orchestrator together:

    config -> credential_status -> require_available -> FallbackOrchestrator.run

Example:
    from pipeline.ocr_pages import run_ocr

    result = run_ocr("paper.pdf", providers=["tensorlake", "mistral"], pages=[1, 2])
    print(result.provider, len(result.pages), result.error_log_json())
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from infra.config import OhseerConfig, get_config
from infra.ocr import Document, is_url
from infra.pipeline import PipelineLogger
from .availability import require_available
from .orchestrator import FallbackOrchestrator
from .provider import get_provider, list_providers
from .schemas import ResultEnvelope

logger = logging.getLogger(__name__)


def validate_providers(providers: List[str], config: OhseerConfig) -> None:
    known = list_providers(config)
    unknown = [name for name in providers if name not in known]
    if unknown:
        raise ValueError(
            f"Unknown OCR provider(s): {', '.join(unknown)}. "
            f"Available: {', '.join(known)}"
        )


def run_ocr(
    document: Document,
    providers: Optional[List[str]] = None,
    pages: Optional[Iterable[int]] = None,
    config: Optional[OhseerConfig] = None,
    options: Optional[Dict[str, Dict[str, Any]]] = None,
    extract_pages: bool = True,
    exclude_types: Optional[Iterable[str]] = None,
    include_types: Optional[Iterable[str]] = None,
    pipeline_logger: Optional[PipelineLogger] = None
) -> ResultEnvelope:
    """
    OCR a document with automatic provider fallback.

    Args:
        document: Local file path, or an http(s) URL for providers that accept one
        providers: Fallback order (default: config.defaults.providers)
        pages: 1-based page numbers to keep (None = all)
        config: OhseerConfig (default: loaded from OHSEER_CONFIG / ~/.ohseer/config.yaml)
        options: Provider name -> provider-specific submit kwargs
        extract_pages: False returns the winning provider's raw response
        exclude_types: Fragment types to drop (default: each provider's own default)
        include_types: Fragment types to take back out of each provider's exclude set.
            Applied per provider, so a provider that already keeps a type is unchanged.
        pipeline_logger: Optional JSONL logger for per-attempt records

    Returns:
        ResultEnvelope with the winning provider, pages, raw response and error log

    Raises:
        FileNotFoundError: If a local document does not exist
        ValueError: If a provider name is unknown
        ConfigurationError: If no requested provider has credentials
        AllProvidersFailedError: If every available provider failed
    """
    if not is_url(document) and not Path(document).is_file():
        raise FileNotFoundError(f"File not found: {document}")

    if config is None:
        config = get_config()

    requested = list(providers) if providers else list(config.defaults.providers)
    validate_providers(requested, config)

    available = require_available(requested, config.credential_status(), key_hint=config.key_hint)

    provider_kwargs = {}
    if exclude_types is not None:
        provider_kwargs["exclude_types"] = set(exclude_types)

    kept = set(include_types or ())

    def factory(name: str):
        provider = get_provider(name, config=config, **provider_kwargs)
        if kept:
            provider.exclude_types = set(provider.exclude_types) - kept
        return provider

    orchestrator = FallbackOrchestrator(factory, pipeline_logger=pipeline_logger)
    result = orchestrator.run(
        document,
        available,
        pages=pages,
        options=options,
        extract_pages=extract_pages,
    )

    logger.info("OCR of %s completed with %s", Path(str(document)).name, result.provider)
    return result
